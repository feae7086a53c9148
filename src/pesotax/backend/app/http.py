"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from flask import Request, current_app, jsonify
from pydantic import BaseModel
from werkzeug.exceptions import BadRequest

from pesotax.backend.app.services.bracket_repository import BracketRepository

REPOSITORY_EXTENSION = "pesotax.brackets"


@dataclass(frozen=True)
class ProblemResponse:
    """Lightweight representation of an RFC 7807-style error payload."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return the serialisable payload for this problem response."""

        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        """Convert the problem payload into a Flask response tuple."""

        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Convenience factory mirroring Flask's ``jsonify`` interface."""

    additional: Mapping[str, Any] | None = extra or None
    return ProblemResponse(error=error, status=status, message=message, extra=additional)


def parse_json_payload(req: Request) -> dict[str, Any]:
    """Extract a JSON object from ``req`` or raise ``BadRequest``."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")
    return dict(data)


def model_response(model: BaseModel | list[BaseModel], status: int = 200) -> tuple[Any, int]:
    """Serialise a result model (or list of models) into a JSON response."""

    if isinstance(model, list):
        return jsonify([entry.model_dump(mode="json") for entry in model]), status
    return jsonify(model.model_dump(mode="json")), status


def get_bracket_repository() -> BracketRepository:
    """Return the bracket repository owned by the running application."""

    return current_app.extensions[REPOSITORY_EXTENSION]


__all__ = [
    "ProblemResponse",
    "REPOSITORY_EXTENSION",
    "get_bracket_repository",
    "model_response",
    "parse_json_payload",
    "problem_response",
]
