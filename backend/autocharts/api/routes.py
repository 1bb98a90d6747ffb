import logging
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, UploadFile, File, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from autocharts.services.parser import parse_file
from autocharts.services.profiler import profile_dataset, column_names
from autocharts.services.aggregation import aggregate
from autocharts.services.filters import apply_filters
from autocharts.services.statistics import summary_statistics, histogram
from autocharts.services.inference import recommend_charts, suggest_chart_types
from autocharts.services.generator import build_aggregated_chart
from autocharts.services.insights import generate_insights, summarize_dataset
from autocharts.services.transform import convert_column_type, add_calculated_column
from autocharts.core.schemas import (
    AggregateRequest,
    AnalysisResult,
    BuildChartRequest,
    CalculatedColumnRequest,
    ChartSpec,
    ColumnProfile,
    ConvertColumnRequest,
    DatasetProfile,
    FilterRequest,
    Histogram,
    HistogramRequest,
    ProfileRequest,
    Record,
    RecommendRequest,
    StatisticsRequest,
)
from autocharts.core.errors import ErrorCodes, get_error_response
from autocharts.core.config import get_settings
from autocharts.core.sanitization import sanitize_filename, sanitize_for_logging

logger = logging.getLogger(__name__)

# Get centralized configuration
settings = get_settings()

router = APIRouter()

# Shared with main.py, which registers it on app.state and installs the 429 handler
limiter = Limiter(key_func=get_remote_address)


def _raise(request: Request, status_code: int, code: str, detail: Optional[str] = None):
    error_info = get_error_response(code, detail)
    error_info['correlation_id'] = getattr(request.state, 'correlation_id', 'unknown')
    raise HTTPException(status_code=status_code, detail=error_info)


def _require_columns(request: Request, dataset: List[Record], *columns: str):
    """Reject requests naming a column the (non-empty) dataset lacks."""
    if not dataset:
        return
    known = column_names(dataset)
    for column in columns:
        if column not in known:
            _raise(request, 400, ErrorCodes.INVALID_COLUMN, f"'{sanitize_for_logging(column, 100)}' not found.")


def _dataset_profile(dataset: List[Record], sample_size: Optional[int] = None) -> DatasetProfile:
    columns: Dict[str, ColumnProfile] = profile_dataset(dataset, sample_size)
    return DatasetProfile(row_count=len(dataset), col_count=len(columns), columns=columns)


@router.get("/health")
async def health_check():
    return {"status": "ok"}


async def _check_file_size_streaming(file: UploadFile) -> int:
    """
    Check file size using streaming to avoid loading entire file into memory.
    Returns the file size in bytes.
    """
    file_size = 0
    chunk_size = 1024 * 1024  # 1MB chunks

    await file.seek(0)
    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        file_size += len(chunk)

        # Early exit if file exceeds limit
        if file_size > settings.max_file_size_bytes:
            break

    # Reset file pointer for actual parsing
    await file.seek(0)
    return file_size


async def _process_upload(file: UploadFile, request: Request) -> AnalysisResult:
    """Parse, profile and chart an uploaded file (without rate limiting)."""
    file_size = await _check_file_size_streaming(file)

    if file_size > settings.max_file_size_bytes:
        _raise(
            request, 413, ErrorCodes.FILE_TOO_LARGE,
            f"Maximum size is {settings.max_file_size_mb}MB. Your file is {file_size / 1024 / 1024:.2f}MB"
        )
    if file_size == 0:
        _raise(request, 400, ErrorCodes.FILE_EMPTY)

    # Sanitize filename for logging (prevent log injection)
    safe_filename = sanitize_filename(file.filename) if file.filename else 'unknown'
    logger.info(
        f"Processing file: {sanitize_for_logging(safe_filename)}, size: {file_size / 1024:.2f}KB"
    )

    # 1. Parse
    records = await parse_file(file)

    # 2. Profile
    profile = _dataset_profile(records, settings.type_sample_size)
    logger.info(f"Profiled dataset: {profile.row_count} rows, {profile.col_count} columns")

    # 3. Charts, insights and summary
    charts = recommend_charts(records, profile.columns, settings.max_auto_charts)
    insights = generate_insights(profile.columns)
    summary = summarize_dataset(records, profile.columns)

    # 4. Limit data size for performant JSON response
    if len(records) > settings.max_dataset_rows:
        logger.info(
            f"Dataset truncated from {len(records)} to {settings.max_dataset_rows} rows for response"
        )
        records = records[:settings.max_dataset_rows]

    logger.info(
        f"Successfully processed file: {sanitize_for_logging(safe_filename)}, generated {len(charts)} charts, {len(insights)} insights"
    )

    return AnalysisResult(
        filename=safe_filename or "uploaded_file",
        profile=profile,
        charts=charts,
        summary=summary,
        insights=insights,
        dataset=records
    )


@router.post("/upload", response_model=AnalysisResult)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def upload_file(request: Request, file: UploadFile = File(...)):
    """
    Upload a CSV, TSV, Excel or JSON file and get its profile and automatic charts.

    Rate limited per IP address (RATE_LIMIT_PER_MINUTE).
    """
    try:
        return await _process_upload(file, request)
    except HTTPException:
        raise
    except Exception as e:
        safe_filename = sanitize_for_logging(sanitize_filename(file.filename) if file.filename else 'unknown')
        logger.error(f"Unexpected error processing file {safe_filename}: {e}", exc_info=True)
        _raise(request, 500, ErrorCodes.UNKNOWN_ERROR)


@router.post("/profile", response_model=DatasetProfile)
async def profile_endpoint(body: ProfileRequest):
    return _dataset_profile(body.dataset, body.sample_size)


@router.post("/aggregate")
async def aggregate_endpoint(request: Request, body: AggregateRequest) -> Dict[str, Any]:
    _require_columns(request, body.dataset, body.spec.group_column, body.spec.value_column)
    return {"result": aggregate(body.dataset, body.spec)}


@router.post("/filter")
async def filter_endpoint(request: Request, body: FilterRequest) -> Dict[str, Any]:
    _require_columns(request, body.dataset, *(c.column for c in body.conditions))
    filtered = apply_filters(body.dataset, body.conditions)
    return {"dataset": filtered, "row_count": len(filtered)}


@router.post("/statistics")
async def statistics_endpoint(body: StatisticsRequest) -> Dict[str, Any]:
    return {"statistics": summary_statistics(body.values)}


@router.post("/histogram", response_model=Histogram)
async def histogram_endpoint(body: HistogramRequest):
    return histogram(body.values, body.bin_count)


@router.post("/charts/recommend")
async def recommend_endpoint(request: Request, body: RecommendRequest) -> Dict[str, Any]:
    """
    Automatic charts for a dataset, optionally restricted by filters.

    Column types come from the full dataset; charts are drawn from the
    filtered rows.
    """
    _require_columns(request, body.dataset, *(c.column for c in body.conditions))
    profile = profile_dataset(body.dataset, settings.type_sample_size)
    filtered = apply_filters(body.dataset, body.conditions)
    return {
        "charts": recommend_charts(filtered, profile, settings.max_auto_charts),
        "suggestions": suggest_chart_types(profile),
        "row_count": len(filtered),
    }


@router.post("/charts/build", response_model=ChartSpec)
async def build_chart_endpoint(request: Request, body: BuildChartRequest):
    columns = [body.x_column] + ([body.y_column] if body.y_column else [])
    _require_columns(request, body.dataset, *columns)
    return build_aggregated_chart(body.dataset, body.chart_type, body.x_column, body.y_column, body.function)


@router.post("/columns/convert")
async def convert_column_endpoint(request: Request, body: ConvertColumnRequest) -> Dict[str, Any]:
    _require_columns(request, body.dataset, body.column)
    dataset = convert_column_type(body.dataset, body.column, body.new_type)
    return {"dataset": dataset}


@router.post("/columns/calculated")
async def calculated_column_endpoint(request: Request, body: CalculatedColumnRequest) -> Dict[str, Any]:
    try:
        dataset = add_calculated_column(body.dataset, body.name, body.formula)
    except ValueError as e:
        logger.info(f"Rejected formula {sanitize_for_logging(body.formula, 200)}: {e}")
        _raise(request, 400, ErrorCodes.INVALID_FORMULA, str(e))
    return {"dataset": dataset}
