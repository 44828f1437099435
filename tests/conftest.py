import asyncio
import os
import uuid
from datetime import datetime, timedelta, timezone

# Settings are read at import time, so these must be in place before the app is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STORAGE_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from app.core.security import create_access_token
from app.models.user import User, UserRole
from app.services.database import get_db, init_models
from main import app


@pytest.fixture
def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db", poolclass=NullPool)
    asyncio.run(init_models(engine))
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def db_run(session_factory):
    """Runs ``fn(session)`` in a fresh session and commits; for seeding and inspecting state."""
    def run(fn):
        async def _run():
            async with session_factory() as session:
                result = await fn(session)
                await session.commit()
                return result
        return asyncio.run(_run())
    return run


@pytest.fixture
def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def bearer(user_id, **claims) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, **claims)}"}


@pytest.fixture
def make_user(db_run):
    def _make_user(role: UserRole = UserRole.ARTIST, email: str = None) -> dict:
        async def _create(session):
            user = User(email=email or f"{uuid.uuid4().hex[:10]}@example.com", role=role)
            session.add(user)
            await session.flush()
            return user.id, user.email

        user_id, user_email = db_run(_create)
        return {"id": user_id, "email": user_email, "headers": bearer(user_id)}
    return _make_user


@pytest.fixture
def artist(make_user):
    return make_user(email="artist@example.com")


@pytest.fixture
def admin(make_user):
    return make_user(role=UserRole.ADMIN, email="qc@example.com")


def future_date(days: int = 10) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


ARTWORK = {
    "artwork_url": "https://storage.local/releasehub-uploads/artwork/cover.png",
    "original_name": "cover.png",
    "content_type": "image/png",
    "size": 2_500_000,
    "width": 3000,
    "height": 3000,
}

AUDIO = {
    "audio_url": "https://storage.local/releasehub-uploads/audio/song.wav",
    "original_name": "song.wav",
    "content_type": "audio/wav",
    "size": 40_000_000,
    "duration": 201,
}


@pytest.fixture
def create_release(client):
    def _create_release(headers: dict, **fields) -> dict:
        payload = {"title": "Test", "type": "SINGLE", **fields}
        response = client.post("/api/releases", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create_release


@pytest.fixture
def add_track(client):
    def _add_track(headers: dict, release_id: str, title: str = "Song", with_audio: bool = True) -> dict:
        response = client.post("/api/tracks", json={"release_id": release_id, "title": title}, headers=headers)
        assert response.status_code == 201, response.text
        track = response.json()
        if with_audio:
            response = client.put(f"/api/tracks/{track['id']}/audio", json=AUDIO, headers=headers)
            assert response.status_code == 200, response.text
            track = response.json()
        return track
    return _add_track


@pytest.fixture
def ready_release(client, create_release, add_track):
    """A release that passes every submission check."""
    def _ready_release(user: dict, splits=("100.00",)) -> dict:
        headers = user["headers"]
        release = create_release(
            headers,
            title="Full Release",
            primary_genre="Electronic",
            release_date=future_date(10),
            territories=["WW"],
        )
        add_track(headers, release["id"])
        response = client.put(f"/api/releases/{release['id']}/artwork", json=ARTWORK, headers=headers)
        assert response.status_code == 200, response.text
        for percent in splits:
            response = client.post(
                "/api/splits",
                json={"release_id": release["id"], "email": user["email"], "percent": percent},
                headers=headers,
            )
            assert response.status_code == 201, response.text
        return release
    return _ready_release


@pytest.fixture
def in_review_release(client, ready_release, artist):
    release = ready_release(artist)
    response = client.post(f"/api/releases/{release['id']}/submit", headers=artist["headers"])
    assert response.status_code == 200, response.text
    return response.json()
