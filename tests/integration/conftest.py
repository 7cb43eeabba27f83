"""Fixtures for API tests: an app wired to scripted remote services."""

import pytest
from fakes import FakeService
from fastapi.testclient import TestClient

from chatflow.config import Settings
from chatflow.main import create_app
from chatflow.tools.alpr import AlprClient
from chatflow.tools.registry import RegistryClient
from chatflow.webui.client import WebUIClient


@pytest.fixture
def registry_service() -> FakeService:
    return FakeService()


@pytest.fixture
def alpr_service() -> FakeService:
    return FakeService()


@pytest.fixture
def app(test_settings: Settings, fake_webui: FakeService, registry_service, alpr_service):
    """App whose clients talk to the fakes; the lifespan keeps pre-set clients."""
    app = create_app(test_settings)
    app.state.webui_client = WebUIClient(
        test_settings.webui_host_url,
        test_settings.webui_api_token,
        transport=fake_webui.transport,
    )
    app.state.registry_client = RegistryClient(
        test_settings.registry_api_url, transport=registry_service.transport
    )
    app.state.alpr_client = AlprClient(test_settings.alpr_api_url, transport=alpr_service.transport)
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(make_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}
