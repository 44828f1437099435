import pytest


@pytest.fixture
def org_with_reports(client, admin, artist, create_release):
    release = create_release(artist["headers"])
    org_id = release["org_id"]
    rows = [
        {"period": "2025-01", "source": "SPOTIFY", "territory": "ua", "units": 12000, "revenue_cents": 3600},
        {"period": "2025-01", "source": "APPLE", "territory": "US", "units": 4000, "revenue_cents": 2850},
        {"period": "2025-02", "source": "YT_MUSIC", "territory": "PL", "units": 1000, "revenue_cents": 150},
    ]
    response = client.post(f"/api/admin/organizations/{org_id}/reports", json=rows, headers=admin["headers"])
    assert response.status_code == 201, response.text
    return org_id


def test_reports_are_listed_newest_period_first_with_summary(client, artist, org_with_reports):
    body = client.get(f"/api/organizations/{org_with_reports}/reports", headers=artist["headers"]).json()

    assert [r["period"] for r in body["report_rows"]] == ["2025-02", "2025-01", "2025-01"]
    assert body["summary"] == {"total_revenue": 66.0, "streams": 17000}
    assert {r["territory"] for r in body["report_rows"]} == {"UA", "US", "PL"}


def test_reports_can_be_filtered_by_period(client, artist, org_with_reports):
    body = client.get(f"/api/organizations/{org_with_reports}/reports?period=2025-01", headers=artist["headers"]).json()

    assert len(body["report_rows"]) == 2
    assert body["summary"] == {"total_revenue": 64.5, "streams": 16000}


def test_invalid_period_is_rejected(client, artist, org_with_reports):
    response = client.get(f"/api/organizations/{org_with_reports}/reports?period=2025-13", headers=artist["headers"])
    assert response.status_code == 422


def test_org_stats(client, admin, artist, org_with_reports, in_review_release):
    stats = client.get(f"/api/organizations/{org_with_reports}/stats", headers=artist["headers"]).json()

    assert stats == {"total_revenue": 66.0, "active_releases": 0, "total_streams": 17000, "pending_review": 1}

    client.put(f"/api/admin/releases/{in_review_release['id']}", json={"status": "DELIVERED"}, headers=admin["headers"])
    stats = client.get(f"/api/organizations/{org_with_reports}/stats", headers=artist["headers"]).json()
    assert (stats["active_releases"], stats["pending_review"]) == (1, 0)


def test_recent_releases_respects_limit(client, artist, create_release):
    for n in range(3):
        release = create_release(artist["headers"], title=f"Release {n}")

    body = client.get(
        f"/api/organizations/{release['org_id']}/recent-releases?limit=2", headers=artist["headers"]
    ).json()

    assert len(body) == 2


def test_reports_are_private_to_members(client, make_user, org_with_reports):
    stranger = make_user()

    response = client.get(f"/api/organizations/{org_with_reports}/reports", headers=stranger["headers"])

    assert response.status_code == 403


def test_only_admins_ingest_reports(client, artist, org_with_reports):
    response = client.post(
        f"/api/admin/organizations/{org_with_reports}/reports",
        json=[{"period": "2025-03", "source": "SPOTIFY", "territory": "UA"}],
        headers=artist["headers"],
    )
    assert response.status_code == 403
