"""Shared fixtures: a fresh SQLite file and upload folder per test."""

import itertools

import pytest
from fastapi.testclient import TestClient

import database
from config import get_settings
from database import get_db
from posts import create_post

# storage-level tests never log in, so no real digest is needed
FAKE_HASH = "not-a-real-digest"


@pytest.fixture
def db(tmp_path, monkeypatch):
    monkeypatch.setattr(database, "DB_NAME", str(tmp_path / "forum.db"))
    monkeypatch.setattr(get_settings(), "upload_folder", str(tmp_path / "uploads"))
    database.init_db()
    return database


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(username=None):
        username = username or f"user{next(counter)}"
        with get_db() as conn:
            cursor = conn.execute(
                "INSERT INTO users (email, username, password_hash, display_name, bio) VALUES (?, ?, ?, ?, '')",
                (f"{username}@example.com", username, FAKE_HASH, username),
            )
            conn.commit()
            return cursor.lastrowid

    return _make


@pytest.fixture
def make_post(db):
    def _make(user_id, title="A post", content="Some content", categories=None):
        return create_post(user_id, title, content, categories)

    return _make


@pytest.fixture
def make_comment(db):
    def _make(user_id, post_id, content="A comment"):
        with get_db() as conn:
            cursor = conn.execute(
                "INSERT INTO comments (post_id, user_id, content) VALUES (?, ?, ?)",
                (post_id, user_id, content),
            )
            conn.commit()
            return cursor.lastrowid

    return _make


@pytest.fixture
def client(db):
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    """Register through the API; the client keeps the session cookie."""

    def _register(username="reader", email=None, password="s3cret-pass"):
        return client.post("/auth/register", json={
            "email": email or f"{username}@example.com",
            "username": username,
            "password": password,
        })

    return _register
