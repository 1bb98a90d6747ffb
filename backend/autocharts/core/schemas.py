from datetime import datetime
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Any, Dict, Literal

ColumnType = Literal['integer', 'number', 'date', 'string', 'unknown']
AggregationFunction = Literal['sum', 'count', 'average', 'min', 'max']

Record = Dict[str, Any]


class ColumnProfile(BaseModel):
    name: str
    dtype: ColumnType
    null_count: int
    empty_count: int
    unique_count: int
    sample_values: List[Any]
    # numeric columns only
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    is_likely_categorical: Optional[bool] = None
    # date columns only
    min_date: Optional[datetime] = None
    max_date: Optional[datetime] = None
    is_likely_time_series: Optional[bool] = None

    @property
    def is_numeric(self) -> bool:
        return self.dtype in ('integer', 'number')


class DatasetProfile(BaseModel):
    row_count: int
    col_count: int
    columns: Dict[str, ColumnProfile]


class FilterCondition(BaseModel):
    column: str
    operator: str  # free-form so unknown operators can pass through
    value: Any = None
    value2: Any = None

    @model_validator(mode='after')
    def check_between_bounds(self) -> "FilterCondition":
        if self.operator == 'between' and self.value2 is None:
            raise ValueError("'between' filters need both value and value2")
        return self


class AggregationSpec(BaseModel):
    group_column: str
    value_column: str
    function: AggregationFunction = 'sum'


class SummaryStatistics(BaseModel):
    min: float
    max: float
    mean: float
    median: float


class Histogram(BaseModel):
    bins: List[str] = []
    counts: List[int] = []


class ChartSeries(BaseModel):
    label: str
    data: List[Any]
    colors: List[str] = []


class ChartSpec(BaseModel):
    id: str
    title: str
    type: str  # 'doughnut', 'bar', 'histogram', 'pie', 'line', 'scatter', 'radar'
    labels: List[str] = []
    series: List[ChartSeries] = []


class ChartSuggestion(BaseModel):
    type: str
    description: str
    required_columns: List[str]


class DatasetSummary(BaseModel):
    record_count: int
    column_count: int
    numeric_columns: int
    categorical_columns: int
    data_points: int
    completeness: int
    data_quality: int


class AnalysisResult(BaseModel):
    filename: str
    profile: DatasetProfile
    charts: List[ChartSpec]
    summary: DatasetSummary
    insights: List[str] = []
    dataset: List[Record]


# Request bodies

class ProfileRequest(BaseModel):
    dataset: List[Record]
    sample_size: Optional[int] = Field(default=None, ge=1)


class AggregateRequest(BaseModel):
    dataset: List[Record]
    spec: AggregationSpec


class FilterRequest(BaseModel):
    dataset: List[Record]
    conditions: List[FilterCondition] = []


class StatisticsRequest(BaseModel):
    values: List[float]


class HistogramRequest(BaseModel):
    values: List[float]
    bin_count: int = Field(default=8, ge=1, le=200)


class RecommendRequest(BaseModel):
    dataset: List[Record]
    conditions: List[FilterCondition] = []


class BuildChartRequest(BaseModel):
    dataset: List[Record]
    chart_type: str = 'bar'
    x_column: str
    y_column: Optional[str] = None
    function: AggregationFunction = 'sum'


class ConvertColumnRequest(BaseModel):
    dataset: List[Record]
    column: str
    new_type: str


class CalculatedColumnRequest(BaseModel):
    dataset: List[Record]
    name: str = Field(min_length=1)
    formula: str = Field(min_length=1)
