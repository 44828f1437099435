import uuid
from datetime import timedelta

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token
from conftest import bearer


def test_missing_token_is_unauthorized(client):
    response = client.get("/api/users/me")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_garbage_and_expired_tokens_are_unauthorized(client, artist):
    expired = create_access_token(artist["id"], expires_delta=timedelta(minutes=-5))

    assert client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401
    assert client.get("/api/users/me", headers={"Authorization": f"Bearer {expired}"}).status_code == 401


def test_token_signed_with_other_key_is_unauthorized(client, artist):
    from jose import jwt

    forged = jwt.encode({"sub": str(artist["id"])}, "some-other-key", algorithm="HS256")

    assert client.get("/api/users/me", headers={"Authorization": f"Bearer {forged}"}).status_code == 401


def test_first_request_provisions_user_from_claims(client):
    user_id = uuid.uuid4()
    headers = bearer(user_id, email="new.artist@example.com", first_name="New", last_name="Artist")

    response = client.get("/api/users/me", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == str(user_id)
    assert body["email"] == "new.artist@example.com"
    assert body["role"] == "ARTIST"
    assert body["is_admin"] is False
    # second request finds the same row
    assert client.get("/api/users/me", headers=headers).json()["id"] == str(user_id)


def test_unknown_subject_without_email_is_unauthorized(client):
    assert client.get("/api/users/me", headers=bearer(uuid.uuid4())).status_code == 401


def test_email_of_another_account_is_unauthorized(client, artist):
    headers = bearer(uuid.uuid4(), email=artist["email"])
    assert client.get("/api/users/me", headers=headers).status_code == 401


def test_failed_commit_leaves_release_untouched(client, artist, ready_release, monkeypatch):
    release = ready_release(artist)

    async def failing_commit(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(AsyncSession, "commit", failing_commit)
    response = client.post(f"/api/releases/{release['id']}/submit", headers=artist["headers"])
    monkeypatch.undo()

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to submit release"
    detail = client.get(f"/api/releases/{release['id']}", headers=artist["headers"]).json()
    assert detail["status"] == "DRAFT"
    assert detail["upc"] is None
    assert detail["qc_items"] == []
