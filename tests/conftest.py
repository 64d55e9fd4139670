import pytest

from tests.fakes.fake_couch import FakeCouchServer, InMemoryCouch


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in ("COUCHDB_URL", "COUCHDB_USER", "COUCHDB_PASSWORD", "COUCHDB_TIMEOUT", "COUCHDB_PAGE_SIZE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store():
    return InMemoryCouch()


@pytest.fixture
def fake_server(monkeypatch, store):
    """Replace the aiohttp driver used by the adapter with the in-memory fake."""
    monkeypatch.setattr(
        "couchdb_adapter.adapters.persistence.couchdb_adapter.CouchServer",
        FakeCouchServer.factory(store),
    )
    return store
