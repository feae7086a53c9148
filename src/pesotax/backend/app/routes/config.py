"""Expose year metadata, bracket tables and deadlines to API consumers.

These endpoints let a front-end render bracket tables and filing calendars
without duplicating the year configuration.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from pesotax.backend.app.http import get_bracket_repository
from pesotax.backend.app.services import deadline_calendar, deadline_schedule
from pesotax.backend.config.year_config import (
    available_years,
    load_manifest,
    load_tax_rules,
)
from pesotax.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    supported_years = list(available_years())
    default_year = supported_years[-1] if supported_years else None
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": default_year,
    }


def _parse_reference_date(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise BadRequest("Query parameter 'today' must be an ISO date (YYYY-MM-DD)") from exc


@blueprint.get("/meta")
def get_meta() -> tuple[Any, int]:
    return jsonify({"version": get_project_version()}), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return the configured tax years and the default selection."""

    manifest = load_manifest()
    years = [
        {"year": entry.year, "status": entry.status, "notes_url": entry.notes_url}
        for entry in sorted(manifest.years, key=lambda entry: entry.year)
    ]
    default_year = years[-1]["year"] if years else None
    return jsonify({"years": years, "default_year": default_year}), 200


@blueprint.get("/<int:year>/brackets")
def get_year_brackets(year: int) -> tuple[Any, int]:
    """Return the bracket table and statutory rules applied to ``year``."""

    table = get_bracket_repository().get_table(year)
    rules = load_tax_rules(year)
    payload = {
        "year": year,
        "source_year": table.tax_year,
        "fallback": table.tax_year != year,
        "brackets": [bracket.model_dump(mode="json") for bracket in table.brackets],
        "rules": rules.model_dump(mode="json"),
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/deadlines")
def get_year_deadlines(year: int) -> tuple[Any, int]:
    """Return the deadline set for ``year`` and its flattened calendar."""

    reference = _parse_reference_date(request.args.get("today"))
    payload = {
        "deadlines": deadline_schedule(year).model_dump(mode="json"),
        "calendar": [
            entry.model_dump(mode="json") for entry in deadline_calendar(year, reference)
        ],
    }
    return jsonify(payload), 200
