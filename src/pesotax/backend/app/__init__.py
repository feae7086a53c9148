"""Application factory for PesoTax backend services."""

from __future__ import annotations

import os
from warnings import warn

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest

from pesotax.backend.config.schema import ConfigurationError

from .http import REPOSITORY_EXTENSION, problem_response
from .routes import register_routes
from .routes.config import get_configuration_metadata
from .services.bracket_repository import BracketRepository


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def create_app(repository: BracketRepository | None = None) -> Flask:
    """Create and configure the Flask application instance.

    Each application owns a single :class:`BracketRepository` (and therefore a
    single bracket cache); pass one in to control its source or cache.
    """

    app = Flask(__name__)
    if repository is None:
        repository = BracketRepository.from_env()
    app.extensions[REPOSITORY_EXTENSION] = repository

    allowed_origins = _parse_allowed_origins(os.getenv("PESOTAX_ALLOWED_ORIGINS"))

    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type"],
    )

    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {"status": "ok", **get_configuration_metadata()}
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(error: ConfigurationError):
        """Surface broken year configuration as a server-side problem."""

        app.logger.error("Invalid tax configuration: %s", error)
        return problem_response(
            "configuration_error", status=500, message=str(error)
        ).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Gracefully surface domain validation errors to clients."""

        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()

    return app
