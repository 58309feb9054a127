"""
Health endpoint tests.
"""


def test_health_endpoint(client):
    """Test that the /health endpoint returns 200 OK without credentials."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert "data" in data
    assert data["data"]["status"] == "healthy"
    assert "timestamp" in data["data"]
    assert "version" in data["data"]
    assert "service" in data["data"]


def test_health_ready_reports_unconfigured_database(client):
    """Without MONGO_URI the service is up but reports itself degraded."""
    response = client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["checks"]["database"] == "not_configured"
    assert data["checks"]["template_store"] == "ok"
    assert data["status"] == "degraded"


def test_root_endpoint(client):
    """Test that the root endpoint returns API information."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "service" in data
    assert "version" in data
    assert data["status"] == "running"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
