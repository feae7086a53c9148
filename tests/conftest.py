"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from pesotax.backend.app import create_app  # noqa: E402
from pesotax.backend.app.services.bracket_repository import (  # noqa: E402
    BracketRepository,
    default_bracket_table,
)
from pesotax.backend.config.schema import TaxBracket, TaxRules  # noqa: E402


@pytest.fixture()
def repository() -> BracketRepository:
    """Return a repository with its own cache backed by the YAML configuration."""

    repo = BracketRepository()
    yield repo
    repo.close()


@pytest.fixture()
def brackets() -> tuple[TaxBracket, ...]:
    """Return the built-in 2024 bracket schedule."""

    return tuple(default_bracket_table().brackets)


@pytest.fixture()
def rules() -> TaxRules:
    return TaxRules()


@pytest.fixture()
def app(repository: BracketRepository) -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app(repository=repository)
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()
