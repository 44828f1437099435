import pytest
from sqlalchemy import select

from app.models.audit_log import AuditLog


def test_approve_creates_three_pending_delivery_jobs(client, admin, in_review_release):
    release_id = in_review_release["id"]

    response = client.post(f"/api/admin/releases/{release_id}/approve", headers=admin["headers"])

    assert response.status_code == 200, response.text
    assert response.json()["status"] == "APPROVED"
    detail = client.get(f"/api/admin/releases/{release_id}", headers=admin["headers"]).json()
    jobs = detail["delivery_jobs"]
    assert sorted(j["target"] for j in jobs) == ["APPLE", "SPOTIFY", "YT_MUSIC"]
    assert {j["status"] for j in jobs} == {"PENDING"}
    assert all(j["payload"]["release_id"] == release_id for j in jobs)
    # approval adds no QC item
    assert len(detail["qc_items"]) == 1


def test_approve_requires_release_in_review(client, admin, artist, create_release):
    release = create_release(artist["headers"])

    response = client.post(f"/api/admin/releases/{release['id']}/approve", headers=admin["headers"])

    assert response.status_code == 422
    detail = client.get(f"/api/admin/releases/{release['id']}", headers=admin["headers"]).json()
    assert detail["status"] == "DRAFT"
    assert detail["delivery_jobs"] == []


def test_approving_twice_does_not_duplicate_jobs(client, admin, in_review_release):
    release_id = in_review_release["id"]
    client.post(f"/api/admin/releases/{release_id}/approve", headers=admin["headers"])

    again = client.post(f"/api/admin/releases/{release_id}/approve", headers=admin["headers"])

    assert again.status_code == 422
    detail = client.get(f"/api/admin/releases/{release_id}", headers=admin["headers"]).json()
    assert len(detail["delivery_jobs"]) == 3


def test_reject_records_reason_as_error_qc_item(client, admin, in_review_release):
    release_id = in_review_release["id"]

    response = client.post(
        f"/api/admin/releases/{release_id}/reject", json={"reason": "Low audio quality"}, headers=admin["headers"]
    )

    assert response.status_code == 200
    assert response.json()["status"] == "REJECTED"
    qc_items = client.get(f"/api/admin/releases/{release_id}", headers=admin["headers"]).json()["qc_items"]
    errors = [q for q in qc_items if q["severity"] == "ERROR"]
    assert [q["message"] for q in errors] == ["Low audio quality"]


def test_reject_without_reason_uses_default_message(client, admin, in_review_release):
    release_id = in_review_release["id"]

    response = client.post(f"/api/admin/releases/{release_id}/reject", json={"reason": "   "}, headers=admin["headers"])
    assert response.status_code == 200

    qc_items = client.get(f"/api/admin/releases/{release_id}", headers=admin["headers"]).json()["qc_items"]
    assert [q["message"] for q in qc_items if q["severity"] == "ERROR"] == ["Release rejected by admin"]


def test_reject_accepts_empty_body(client, admin, in_review_release):
    response = client.post(f"/api/admin/releases/{in_review_release['id']}/reject", headers=admin["headers"])

    assert response.status_code == 200
    assert response.json()["status"] == "REJECTED"


def test_non_admin_cannot_use_admin_routes(client, artist, in_review_release):
    release_id = in_review_release["id"]

    assert client.post(f"/api/admin/releases/{release_id}/approve", headers=artist["headers"]).status_code == 403
    assert client.post(f"/api/admin/releases/{release_id}/reject", headers=artist["headers"]).status_code == 403
    assert client.put(f"/api/admin/releases/{release_id}", json={"title": "x"}, headers=artist["headers"]).status_code == 403
    assert client.get("/api/admin/qc-queue", headers=artist["headers"]).status_code == 403

    status = client.get(f"/api/releases/{release_id}", headers=artist["headers"]).json()["status"]
    assert status == "IN_REVIEW"


def test_role_claim_in_token_does_not_grant_admin(client, artist):
    from conftest import bearer

    headers = bearer(artist["id"], role="ADMIN")

    assert client.get("/api/admin/qc-queue", headers=headers).status_code == 403


def test_admin_update_rejects_fields_outside_allow_list(client, admin, artist, make_user, create_release):
    release = create_release(artist["headers"])
    other = make_user()
    other_release = create_release(other["headers"])

    for payload in ({"org_id": other_release["org_id"]}, {"artist_id": other_release["artist_id"]},
                    {"title": "Ok", "rights_owner": "Someone"}):
        response = client.put(f"/api/admin/releases/{release['id']}", json=payload, headers=admin["headers"])
        assert response.status_code == 422, payload

    unchanged = client.get(f"/api/admin/releases/{release['id']}", headers=admin["headers"]).json()
    assert unchanged["org_id"] == release["org_id"]
    assert unchanged["artist_id"] == release["artist_id"]
    assert unchanged["title"] == release["title"]


def test_admin_update_applies_allowed_fields_and_status_override(client, admin, in_review_release):
    release_id = in_review_release["id"]

    response = client.put(
        f"/api/admin/releases/{release_id}",
        json={"title": "Corrected Title", "label_name": "Night Records", "territories": ["ua", "pl"], "status": "TAKEDOWN"},
        headers=admin["headers"],
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["title"] == "Corrected Title"
    assert body["label_name"] == "Night Records"
    assert body["territories"] == ["UA", "PL"]
    assert body["status"] == "TAKEDOWN"


def test_admin_update_rejects_unknown_status(client, admin, in_review_release):
    response = client.put(
        f"/api/admin/releases/{in_review_release['id']}", json={"status": "ARCHIVED"}, headers=admin["headers"]
    )
    assert response.status_code == 422


def test_admin_cannot_change_assigned_upc(client, admin, in_review_release):
    response = client.put(
        f"/api/admin/releases/{in_review_release['id']}", json={"upc": "036000291452"}, headers=admin["headers"]
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"][0]["id"] == "upc"


def test_qc_queue_lists_releases_in_review(client, admin, artist, create_release, in_review_release):
    draft = create_release(artist["headers"], title="Still a draft")

    queue = client.get("/api/admin/qc-queue", headers=admin["headers"]).json()

    ids = [r["id"] for r in queue]
    assert in_review_release["id"] in ids
    assert draft["id"] not in ids


def test_delivery_worker_reports_outcome(client, admin, in_review_release):
    client.post(f"/api/admin/releases/{in_review_release['id']}/approve", headers=admin["headers"])
    pending = client.get("/api/admin/delivery-jobs", headers=admin["headers"]).json()
    assert len(pending) == 3

    job_id = pending[0]["id"]
    response = client.patch(
        f"/api/admin/delivery-jobs/{job_id}",
        json={"status": "SENT", "response": {"delivery_id": "abc-123"}},
        headers=admin["headers"],
    )

    assert response.status_code == 200
    assert response.json()["status"] == "SENT"
    assert response.json()["response"] == {"delivery_id": "abc-123"}
    assert len(client.get("/api/admin/delivery-jobs", headers=admin["headers"]).json()) == 2

    back_to_pending = client.patch(f"/api/admin/delivery-jobs/{job_id}", json={"status": "PENDING"}, headers=admin["headers"])
    assert back_to_pending.status_code == 422


def test_admin_sets_user_role(client, admin, artist):
    response = client.patch(f"/api/admin/users/{artist['id']}/role", json={"role": "ADMIN"}, headers=admin["headers"])

    assert response.status_code == 200
    assert response.json()["is_admin"] is True
    assert client.get("/api/admin/qc-queue", headers=artist["headers"]).status_code == 200


def test_transitions_are_audited(client, admin, in_review_release, db_run):
    client.post(f"/api/admin/releases/{in_review_release['id']}/approve", headers=admin["headers"])

    async def _actions(session):
        result = await session.execute(
            select(AuditLog.action).where(AuditLog.entity_id == in_review_release["id"]).order_by(AuditLog.created_at)
        )
        return list(result.scalars().all())

    actions = db_run(_actions)
    assert "SUBMIT_RELEASE" in actions
    assert "APPROVE_RELEASE" in actions


@pytest.mark.parametrize("field", ["title", "type", "territories", "status"])
def test_admin_update_cannot_clear_required_fields(client, admin, in_review_release, field):
    release_id = in_review_release["id"]

    response = client.put(f"/api/admin/releases/{release_id}", json={field: None}, headers=admin["headers"])

    assert response.status_code == 422
    detail = client.get(f"/api/admin/releases/{release_id}", headers=admin["headers"])
    assert detail.status_code == 200
    body = detail.json()
    assert body["title"] == in_review_release["title"]
    assert body["type"] == in_review_release["type"]
    assert body["territories"] == in_review_release["territories"]
    assert body["status"] == "IN_REVIEW"
    assert client.get("/api/admin/releases", headers=admin["headers"]).status_code == 200


def test_admin_update_reports_cleared_territories_by_id(client, admin, in_review_release):
    response = client.put(
        f"/api/admin/releases/{in_review_release['id']}", json={"territories": None}, headers=admin["headers"]
    )

    assert response.status_code == 422
    assert [e["id"] for e in response.json()["detail"]["errors"]] == ["territories"]
