"""
Tests for the health check endpoint.
"""


def test_health_check_returns_200(client):
    response = client.get("/health")
    assert response.status_code == 200


def test_health_check_returns_service_name(client):
    """Monitoring parses this field, so it must not drift."""
    data = client.get("/health").json()
    assert data["service"] == "deposit-backoffice"


def test_health_check_reports_database_status(client):
    data = client.get("/health").json()
    assert data["database"] == "healthy"
    assert data["status"] == "healthy"


def test_health_needs_no_token(client):
    assert client.get("/health").status_code == 200


def test_health_reports_email_delivery(client):
    data = client.get("/health").json()
    assert data["email"] in ("configured", "not configured")
