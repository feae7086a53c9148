"""REST endpoints for tax calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from pesotax.backend.app.http import get_bracket_repository, model_response, parse_json_payload
from pesotax.backend.app.services import (
    calculate_business_tax,
    calculate_individual_tax,
    calculate_quarterly_tax,
    calculate_withholding_tax,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1/calculations")


@blueprint.post("/individual")
def create_individual_calculation() -> tuple[Any, int]:
    """Compute annual individual income tax from the submitted JSON payload."""

    payload = parse_json_payload(request)
    return model_response(calculate_individual_tax(payload, get_bracket_repository()))


@blueprint.post("/business")
def create_business_calculation() -> tuple[Any, int]:
    """Compare the 8% and graduated options for the submitted business figures."""

    payload = parse_json_payload(request)
    return model_response(calculate_business_tax(payload, get_bracket_repository()))


@blueprint.post("/withholding")
def create_withholding_calculation() -> tuple[Any, int]:
    payload = parse_json_payload(request)
    return model_response(calculate_withholding_tax(payload))


@blueprint.post("/quarterly")
def create_quarterly_calculation() -> tuple[Any, int]:
    payload = parse_json_payload(request)
    return model_response(calculate_quarterly_tax(payload, get_bracket_repository()))
