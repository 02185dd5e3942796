import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["BCRYPT_ROUNDS"] = "4"

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app
from seed_admin import seed_admin


@pytest.fixture
def mongo():
    return mongomock.MongoClient()["artfolio_test"]


@pytest.fixture
def client(mongo):
    app.dependency_overrides[get_db] = lambda: mongo
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    def _make(username, role="visitor", password="secret123"):
        r = client.post("/api/auth/register", json={
            "username": username,
            "email": f"{username}@artfolio.io",
            "password": password,
            "role": role,
        })
        assert r.status_code == 201, r.text
        body = r.json()
        token = body["access_token"]
        return {
            "id": body["user"]["id"],
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        }
    return _make


@pytest.fixture
def visitor(make_user):
    return make_user("vera")


@pytest.fixture
def artist(make_user):
    return make_user("arturo", role="artist")


@pytest.fixture
def admin(client, mongo):
    seed_admin(mongo, "root@artfolio.io", "root", "rootpass1")
    r = client.post("/api/auth/login", json={"email": "root@artfolio.io", "password": "rootpass1"})
    assert r.status_code == 200, r.text
    body = r.json()
    return {
        "id": body["user"]["id"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


@pytest.fixture
def make_artwork(client):
    def _make(owner, **overrides):
        payload = {
            "title": "Harbour at Dusk",
            "description": "Oil on canvas",
            "image_url": "https://cdn.artfolio.io/harbour.jpg",
            "price": 100,
            "category": "Oil",
            "tags": "seascape, dusk",
            "is_for_sale": True,
        }
        payload.update(overrides)
        r = client.post("/api/artworks", json=payload, headers=owner["headers"])
        assert r.status_code == 201, r.text
        return r.json()
    return _make
