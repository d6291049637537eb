import httpx
import pytest
from app.services.catalog import sample_catalog

@pytest.fixture
def catalog():
    return sample_catalog()

@pytest.fixture
def mock_upstream(monkeypatch):
    """Route a service module's AsyncClient through an httpx.MockTransport handler."""
    def install(module: str, handler):
        def factory(*args, **kwargs):
            return httpx.AsyncClient(transport=httpx.MockTransport(handler), **kwargs)
        monkeypatch.setattr(f"{module}.AsyncClient", factory)
    return install

@pytest.fixture
def supabase_catalog(monkeypatch):
    monkeypatch.setattr("app.config.settings.CATALOG_SOURCE", "supabase")
