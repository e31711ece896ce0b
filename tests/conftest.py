import pytest
from fastapi.testclient import TestClient

from salon_pos.core.config import Settings
from salon_pos.db import Store
from salon_pos.main import create_app


@pytest.fixture
def store(tmp_path):
    s = Store(tmp_path / "pos.db", autosave_interval=0)
    s.initialize()
    yield s
    s.close()


@pytest.fixture
def client(tmp_path):
    cfg = Settings(DATA_DIR=tmp_path / "data", AUTOSAVE_SECONDS=0, PIN_MAX_ATTEMPTS=3, PIN_LOCKOUT_SECONDS=60)
    with TestClient(create_app(cfg)) as c:
        yield c


@pytest.fixture
def ipc(client):
    """POST a bridge call and return the envelope."""

    def call(channel, *args):
        r = client.post(f"/ipc/{channel}", json={"args": list(args)})
        assert r.status_code == 200, r.text
        return r.json()

    return call
