import os
import tempfile

_scratch = tempfile.mkdtemp(prefix="store-tests-")
os.environ["DATA_FILE"] = os.path.join(_scratch, "data.json")
os.environ["UPLOAD_DIR"] = os.path.join(_scratch, "uploads")
os.environ["DEFAULT_ADMIN_PASSWORD"] = "admin-pass"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOGIN_FAILURE_DELAY"] = "0"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

import config
from database import db

ADMIN_PASSWORD = "admin-pass"


@pytest.fixture(autouse=True)
def store(tmp_path, monkeypatch):
    monkeypatch.setattr(db, "path", tmp_path / "data.json")
    monkeypatch.setattr(config, "UPLOAD_DIR", tmp_path / "uploads")
    monkeypatch.setattr(config, "DEFAULT_ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setattr(config, "LOGIN_FAILURE_DELAY", 0)
    return db


@pytest.fixture
def client():
    from main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(client):
    res = client.post("/api/login", json={"password": ADMIN_PASSWORD})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.json()['token']}"}
