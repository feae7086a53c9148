"""Integration tests for the health check endpoint."""

from flask.testing import FlaskClient


def test_health_endpoint_returns_ok(client: FlaskClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["supported_years"] == [2023, 2024, 2025]
    assert payload["default_year"] == 2025
    assert payload["version"]


def test_wsgi_entrypoint_exposes_application(monkeypatch) -> None:
    monkeypatch.setenv("PESOTAX_ALLOWED_ORIGINS", "https://allowed.test")

    from pesotax.backend import passenger_wsgi

    response = passenger_wsgi.application.test_client().get("/health")

    assert response.status_code == 200
