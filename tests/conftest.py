"""
Shared pytest fixtures and configuration.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import planner.settings as settings_mod
from planner.api.app import create_app
from planner.config import config


@pytest.fixture()
def isolated_data(tmp_path, monkeypatch):
    """Point the store and the settings file at a fresh temp directory."""
    monkeypatch.setattr(config, "data_dir", tmp_path)
    monkeypatch.setattr(settings_mod, "_FILE", tmp_path / "settings.json")
    monkeypatch.setattr(settings_mod, "_current", {})
    yield tmp_path
    monkeypatch.setattr(settings_mod, "_current", {})

@pytest.fixture()
def app(isolated_data):
    """Create a fresh app instance per test."""
    return create_app()

@pytest_asyncio.fixture()
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
