"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Callable
from datetime import datetime, timezone

# Required settings must exist before chatflow is imported (chatflow.main builds an app)
os.environ.setdefault("WEBUI_API_TOKEN", "test-webui-token")
os.environ.setdefault("JWT_SECRET_KEY", "test_secret_key_with_minimum_32_characters")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "INFO")

import jwt  # noqa: E402
import pytest  # noqa: E402
from fakes import FakeService  # noqa: E402

from chatflow.config import Settings  # noqa: E402
from chatflow.models.chains import WorkflowConfig  # noqa: E402
from chatflow.webui.client import WebUIClient  # noqa: E402

TEST_JWT_SECRET = "test_secret_key_with_minimum_32_characters_required_for_testing"
TEST_WEBUI_URL = "http://webui.test"
TEST_MODEL = "llama3.2:latest"


@pytest.fixture
def fake_webui() -> FakeService:
    return FakeService()


@pytest.fixture
async def webui_client(fake_webui: FakeService):
    client = WebUIClient(TEST_WEBUI_URL, "test-webui-token", transport=fake_webui.transport)
    yield client
    await client.aclose()


@pytest.fixture
def workflow_config() -> WorkflowConfig:
    return WorkflowConfig(
        model_name=TEST_MODEL,
        tools=["DVSA Lookup"],
        poll_interval=0.0,
        max_poll_attempts=15,
    )


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings for app-level tests; no wait between polls."""
    return Settings(
        webui_host_url=TEST_WEBUI_URL,
        webui_api_token="test-webui-token",
        webui_model_name=TEST_MODEL,
        registry_api_url="http://127.0.0.1/",
        alpr_api_url="http://127.0.0.1:8000",
        temp_dir_path=str(tmp_path / "staging"),
        poll_interval=0.0,
        jwt_secret_key=TEST_JWT_SECRET,
        jwt_algorithm="HS256",
        environment="test",
        log_level="DEBUG",
    )


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Factory for bearer tokens signed with the test secret."""

    def _make(subject: str = "test-client", secret: str = TEST_JWT_SECRET, **claims) -> str:
        payload = {"sub": subject, "iat": datetime.now(tz=timezone.utc), **claims}
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make
