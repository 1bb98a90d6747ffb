"""
Integration tests for API endpoints.
"""
import pytest
import uuid
from io import BytesIO
from fastapi.testclient import TestClient
from main import app


@pytest.fixture
def client():
    """Create a test client with a fresh rate limit window."""
    app.state.limiter.reset()
    return TestClient(app)


@pytest.fixture
def dataset():
    return [
        {"region": "North", "sales": "120", "date": "2024-01-03"},
        {"region": "South", "sales": "80", "date": "2024-01-17"},
        {"region": "North", "sales": "$40", "date": "2024-02-02"},
        {"region": "East", "sales": "", "date": "2024-03-09"},
    ]


@pytest.mark.integration
def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.integration
def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()


@pytest.mark.integration
def test_upload_csv_file(client):
    csv_content = b"name,age,score\nAlice,25,85.5\nBob,30,90.0\nCharlie,35,88.5"

    response = client.post(
        "/api/upload",
        files={"file": ("test.csv", BytesIO(csv_content), "text/csv")}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["filename"] == "test.csv"
    assert data["profile"]["row_count"] == 3
    assert data["profile"]["col_count"] == 3
    assert data["profile"]["columns"]["age"]["dtype"] == "integer"
    assert data["profile"]["columns"]["score"]["dtype"] == "number"
    assert data["profile"]["columns"]["name"]["dtype"] == "string"
    assert [chart["id"] for chart in data["charts"]] == [
        "overview-total",
        "numeric-stats-age",
        "numeric-stats-score",
        "categorical-bar-name",
        "categorical-pie-name",
    ]
    assert len(data["insights"]) == 2
    assert data["summary"]["record_count"] == 3
    assert data["dataset"][0] == {"name": "Alice", "age": "25", "score": "85.5"}


@pytest.mark.integration
def test_upload_invalid_file_type(client):
    response = client.post(
        "/api/upload",
        files={"file": ("test.pdf", BytesIO(b"some content"), "application/pdf")}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_FILE_TYPE"


@pytest.mark.integration
def test_upload_empty_file(client):
    response = client.post(
        "/api/upload",
        files={"file": ("empty.csv", BytesIO(b""), "text/csv")}
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "FILE_EMPTY"
    assert "correlation_id" in detail


@pytest.mark.integration
def test_correlation_id_header(client):
    correlation_id = str(uuid.uuid4())
    response = client.post(
        "/api/upload",
        files={"file": ("test.csv", BytesIO(b"name,value\ntest,10"), "text/csv")},
        headers={"X-Correlation-ID": correlation_id}
    )

    assert response.status_code == 200
    assert response.headers["X-Correlation-ID"] == correlation_id


@pytest.mark.integration
def test_correlation_id_generated(client):
    response = client.get("/api/health")
    uuid.UUID(response.headers["X-Correlation-ID"])


@pytest.mark.integration
def test_upload_rate_limit(client):
    limit = app.state.settings.rate_limit_per_minute
    codes = []
    for _ in range(limit + 1):
        response = client.post(
            "/api/upload",
            files={"file": ("test.csv", BytesIO(b"a,b\n1,2"), "text/csv")}
        )
        codes.append(response.status_code)

    assert codes[:limit] == [200] * limit
    assert codes[-1] == 429
    assert response.json()["code"] == "RATE_LIMIT_EXCEEDED"


@pytest.mark.integration
def test_profile_endpoint(client, dataset):
    response = client.post("/api/profile", json={"dataset": dataset})

    assert response.status_code == 200
    columns = response.json()["columns"]
    assert columns["region"]["dtype"] == "string"
    # "$40" is not a strict number
    assert columns["sales"]["dtype"] == "string"
    assert columns["sales"]["empty_count"] == 1
    assert columns["date"]["dtype"] == "date"


@pytest.mark.integration
def test_profile_accepts_oversized_integers(client):
    response = client.post("/api/profile", json={"dataset": [{"a": 10 ** 400}, {"a": 1}]})

    assert response.status_code == 200
    assert response.json()["columns"]["a"]["max"] == 1.0


@pytest.mark.integration
def test_profile_rejects_bad_sample_size(client, dataset):
    response = client.post("/api/profile", json={"dataset": dataset, "sample_size": 0})
    assert response.status_code == 422


@pytest.mark.integration
def test_aggregate_endpoint(client, dataset):
    body = {"dataset": dataset, "spec": {"group_column": "region", "value_column": "sales", "function": "sum"}}
    response = client.post("/api/aggregate", json=body)

    assert response.status_code == 200
    assert response.json()["result"] == {"North": 160.0, "South": 80.0}


@pytest.mark.integration
def test_aggregate_unknown_column(client, dataset):
    body = {"dataset": dataset, "spec": {"group_column": "nope", "value_column": "sales"}}
    response = client.post("/api/aggregate", json=body)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_COLUMN"


@pytest.mark.integration
def test_aggregate_unknown_function(client, dataset):
    body = {"dataset": dataset, "spec": {"group_column": "region", "value_column": "sales", "function": "median"}}
    assert client.post("/api/aggregate", json=body).status_code == 422


@pytest.mark.integration
def test_filter_endpoint(client, dataset):
    body = {
        "dataset": dataset,
        "conditions": [{"column": "date", "operator": "between", "value": "2024-01-10", "value2": "2024-02-28"}],
    }
    response = client.post("/api/filter", json=body)

    assert response.status_code == 200
    data = response.json()
    assert data["row_count"] == 2
    assert [row["region"] for row in data["dataset"]] == ["South", "North"]


@pytest.mark.integration
def test_filter_between_without_upper_bound(client, dataset):
    body = {"dataset": dataset, "conditions": [{"column": "sales", "operator": "between", "value": 1}]}
    assert client.post("/api/filter", json=body).status_code == 422


@pytest.mark.integration
def test_statistics_and_histogram(client):
    stats = client.post("/api/statistics", json={"values": [1, 2, 3, 4]}).json()["statistics"]
    assert stats == {"min": 1.0, "max": 4.0, "mean": 2.5, "median": 3.0}

    assert client.post("/api/statistics", json={"values": []}).json() == {"statistics": None}

    hist = client.post("/api/histogram", json={"values": list(range(1, 11)), "bin_count": 2}).json()
    assert hist == {"bins": ["1.0-5.5", "5.5-10.0"], "counts": [5, 5]}


@pytest.mark.integration
def test_recommend_endpoint_with_filters(client, dataset):
    body = {"dataset": dataset, "conditions": [{"column": "region", "operator": "==", "value": "North"}]}
    response = client.post("/api/charts/recommend", json=body)

    assert response.status_code == 200
    data = response.json()
    assert data["row_count"] == 2
    assert data["charts"][0]["series"][0]["data"] == [2]
    assert "barChart" in data["suggestions"]


@pytest.mark.integration
def test_build_chart_endpoint(client, dataset):
    body = {"dataset": dataset, "chart_type": "bar", "x_column": "region", "y_column": "sales", "function": "max"}
    response = client.post("/api/charts/build", json=body)

    assert response.status_code == 200
    chart = response.json()
    assert chart["labels"] == ["North", "South"]
    assert chart["series"][0]["data"] == [120.0, 80.0]


@pytest.mark.integration
def test_convert_column_endpoint(client, dataset):
    body = {"dataset": dataset, "column": "sales", "new_type": "number"}
    response = client.post("/api/columns/convert", json=body)

    assert response.status_code == 200
    assert [row["sales"] for row in response.json()["dataset"]] == [120.0, 80.0, None, ""]


@pytest.mark.integration
def test_calculated_column_endpoint(client):
    body = {"dataset": [{"a": "2", "b": "3"}, {"a": "4", "b": "5"}], "name": "product", "formula": "a * b"}
    response = client.post("/api/columns/calculated", json=body)

    assert response.status_code == 200
    assert [row["product"] for row in response.json()["dataset"]] == [6.0, 20.0]


@pytest.mark.integration
def test_calculated_column_bad_formula(client):
    body = {"dataset": [{"a": 1}], "name": "x", "formula": "missing + 1"}
    response = client.post("/api/columns/calculated", json=body)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_FORMULA"


@pytest.mark.integration
def test_metrics_endpoint(client, dataset):
    client.post("/api/profile", json={"dataset": dataset})
    response = client.get("/api/metrics")

    assert response.status_code == 200
    performance = response.json()["performance"]
    assert "profile_dataset" in performance
    assert "request_duration" in performance
