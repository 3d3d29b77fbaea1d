"""Shared pytest fixtures for the test suite."""

import pytest

from backoffice.services.container import reset_container
from backoffice.web.app import create_app


class FakeMockably:
    """Mockably with fixed readings."""

    def __init__(self, now: float = 1000.0, memory_mb: float = 12.5, modules: int = 321):
        self.now = now
        self.memory_mb = memory_mb
        self.modules = modules

    def microtime(self) -> float:
        return self.now

    def memory_usage_mb(self) -> float:
        return self.memory_mb

    def loaded_module_count(self) -> int:
        return self.modules


@pytest.fixture
def fake_mockably():
    return FakeMockably()


@pytest.fixture
def backend_env(monkeypatch):
    """Environment for a test backend; tests may setenv more before building the app."""
    for var in ("DB_PATH", "DEBUG", "PERFORMANCE_LOG_PATH", "BACKEND_LANGUAGE", "CMS_NAME"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("BACKEND_PREFIX", "admin")
    monkeypatch.setenv("ADMIN_USERNAME", "admin")
    monkeypatch.setenv("ADMIN_PASSWORD", "s3cret")
    monkeypatch.setenv("FORCE_SSL", "0")
    monkeypatch.setenv("LOG_PERFORMANCE", "0")
    return monkeypatch


@pytest.fixture
def make_app(backend_env):
    """Factory building a fresh testing app against a clean service container."""
    def _make_app(**env):
        for name, value in env.items():
            backend_env.setenv(name, value)
        reset_container()
        return create_app("testing")

    yield _make_app
    reset_container()


@pytest.fixture
def app(make_app):
    app = make_app()

    app.add_url_rule("/home", "home", lambda: "home")
    app.add_url_rule("/items/<int:item_id>/<slug>", "item", lambda item_id, slug: "item")

    def posts(page=1):
        return f"posts {page}"

    app.add_url_rule("/posts", "posts", posts)
    app.add_url_rule("/posts/<int:page>", "posts", posts)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
