"""
Pytest configuration and fixtures for the TalkAI Gateway test suite.
"""

import os

# Keep test runs from writing log files into the working tree
os.environ.setdefault("LOG_DIR", "")

import pytest
from fastapi.testclient import TestClient
from typing import Callable, Dict, List, Optional

from talkai_gateway.api.main import create_app
from talkai_gateway.core.auth import AccessGate
from talkai_gateway.core.config_manager import ConfigManager
from tests.fakes import FakeBackend


TEST_API_KEY = "sk-talkai-test-key"

MODELS_YAML = """\
models:
  claude-opus-4-1-20250805: Claude Opus 4.1
  claude-3-5-haiku-20241022: Claude 3.5 Haiku
"""


@pytest.fixture
def config_dir(tmp_path) -> str:
    (tmp_path / "models.yaml").write_text(MODELS_YAML, encoding="utf-8")
    return str(tmp_path)


@pytest.fixture
def make_config_manager(config_dir) -> Callable[..., ConfigManager]:
    def factory(**env: str) -> ConfigManager:
        environ = {"API_KEYS": TEST_API_KEY}
        environ.update(env)
        return ConfigManager(config_dir=config_dir, environ=environ)
    return factory


@pytest.fixture
def config_manager(make_config_manager) -> ConfigManager:
    return make_config_manager()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_app(config_manager, backend):
    def factory(
        config_manager: ConfigManager = config_manager,
        backend: FakeBackend = backend,
        access_gate: Optional[AccessGate] = None
    ):
        return create_app(
            config_manager=config_manager,
            httpx_client=backend.client(),
            access_gate=access_gate
        )
    return factory


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {TEST_API_KEY}"}


@pytest.fixture
def sample_messages() -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": "S"},
        {"role": "user", "content": "U"}
    ]


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "streaming: mark test as streaming test"
    )
    config.addinivalue_line(
        "markers", "auth: mark test as authentication test"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "stream" in str(item.fspath):
            item.add_marker(pytest.mark.streaming)
        if "auth" in str(item.fspath):
            item.add_marker(pytest.mark.auth)
