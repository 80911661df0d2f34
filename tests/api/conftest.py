"""Fixtures for API tests."""

import falcon.asgi
import pytest
from falcon.testing import TestClient

from bedrock.interfaces.api.middleware.cors import CORSMiddleware
from bedrock.interfaces.api.resources.decisions import DecisionsResource
from bedrock.interfaces.api.resources.health import HealthResource

from tests.conftest import make_engine


@pytest.fixture
def app(uow_factory):
    """Falcon ASGI app with the decision API over the in-memory store."""
    app = falcon.asgi.App(middleware=[CORSMiddleware(["https://console.example.com"])])
    app.add_route("/v1/health", HealthResource())
    app.add_route("/v1/decisions", DecisionsResource(make_engine(uow_factory)))
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Falcon ASGI test client."""
    return TestClient(app)
