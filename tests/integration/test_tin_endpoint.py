"""Integration tests for the TIN endpoint."""

from __future__ import annotations

import pytest
from flask.testing import FlaskClient


def test_tin_endpoint_formats_and_validates(client: FlaskClient) -> None:
    response = client.post("/api/v1/tin", json={"tin": "123456789000"})

    assert response.status_code == 200
    assert response.get_json() == {
        "tin": "123456789000",
        "formatted": "123-456-789-000",
        "valid": True,
    }


def test_tin_endpoint_reports_invalid_numbers(client: FlaskClient) -> None:
    response = client.post("/api/v1/tin", json={"tin": "12345"})

    assert response.status_code == 200
    assert response.get_json()["valid"] is False


@pytest.mark.parametrize("body", [{}, {"tin": ""}, {"tin": 123}])
def test_tin_endpoint_requires_a_string(client: FlaskClient, body) -> None:
    response = client.post("/api/v1/tin", json=body)

    assert response.status_code == 400
    assert response.get_json()["error"] == "bad_request"
