"""Endpoint for checking and formatting Taxpayer Identification Numbers."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from pesotax.backend.app.http import parse_json_payload
from pesotax.backend.app.services import format_tin, validate_tin

blueprint = Blueprint("tin", __name__, url_prefix="/api/v1")


@blueprint.post("/tin")
def check_tin() -> tuple[Any, int]:
    """Return whether the submitted TIN is valid, along with its dashed form."""

    payload = parse_json_payload(request)
    tin = payload.get("tin")
    if not isinstance(tin, str) or not tin.strip():
        raise BadRequest("Field 'tin' must be a non-empty string")

    formatted = format_tin(tin.strip())
    return (
        jsonify({"tin": tin, "formatted": formatted, "valid": validate_tin(formatted)}),
        200,
    )
