"""
Tests for the schedule router.

Tests cover:
- startTime < endTime on create and on merged updates
- Ordering by start time and the ?date filter
- Status validation
"""


def create_item(client, headers, start, end, **overrides):
    payload = {"title": "Study block", "startTime": start, "endTime": end}
    payload.update(overrides)
    return client.post("/api/schedule", json=payload, headers=headers)


# =============================================================================
# Create Tests
# =============================================================================

def test_create_schedule_item(client, auth_headers):
    response = create_item(client, auth_headers, "2026-10-20T09:00:00Z", "2026-10-20T10:30:00Z")

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "not-started"
    assert data["startTime"].startswith("2026-10-20T09:00:00")
    assert data["endTime"].startswith("2026-10-20T10:30:00")


def test_offset_times_are_stored_as_utc(client, auth_headers):
    response = create_item(client, auth_headers, "2026-10-20T11:00:00+02:00", "2026-10-20T12:00:00+02:00")

    assert response.status_code == 201
    assert response.json()["startTime"].startswith("2026-10-20T09:00:00")


def test_inverted_interval_rejected(client, auth_headers):
    response = create_item(client, auth_headers, "2026-10-20T10:00:00Z", "2026-10-20T09:00:00Z")

    assert response.status_code == 400
    assert "startTime must be before endTime" in response.json()["errors"][0]["message"]


def test_empty_interval_rejected(client, auth_headers):
    response = create_item(client, auth_headers, "2026-10-20T10:00:00Z", "2026-10-20T10:00:00Z")

    assert response.status_code == 400


def test_invalid_status_rejected(client, auth_headers):
    response = create_item(client, auth_headers, "2026-10-20T09:00:00Z", "2026-10-20T10:00:00Z", status="done")

    assert response.status_code == 400
    assert any(error["field"] == "status" for error in response.json()["errors"])


# =============================================================================
# Update Tests
# =============================================================================

def test_update_status(client, auth_headers):
    item = create_item(client, auth_headers, "2026-10-20T09:00:00Z", "2026-10-20T10:00:00Z").json()

    response = client.put(f"/api/schedule/{item['id']}", json={"status": "completed"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "completed"


def test_update_checks_merged_interval(client, auth_headers):
    """Moving only the start past the stored end is rejected."""
    item = create_item(client, auth_headers, "2026-10-20T09:00:00Z", "2026-10-20T10:00:00Z").json()

    response = client.put(
        f"/api/schedule/{item['id']}",
        json={"startTime": "2026-10-20T11:00:00Z"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "endTime", "message": "startTime must be before endTime"}]

    unchanged = client.get(f"/api/schedule/{item['id']}", headers=auth_headers).json()
    assert unchanged["startTime"].startswith("2026-10-20T09:00:00")


def test_update_moving_both_ends(client, auth_headers):
    item = create_item(client, auth_headers, "2026-10-20T09:00:00Z", "2026-10-20T10:00:00Z").json()

    response = client.put(
        f"/api/schedule/{item['id']}",
        json={"startTime": "2026-10-20T11:00:00Z", "endTime": "2026-10-20T12:00:00Z"},
        headers=auth_headers,
    )

    assert response.status_code == 200


def test_delete_schedule_item(client, auth_headers):
    item = create_item(client, auth_headers, "2026-10-20T09:00:00Z", "2026-10-20T10:00:00Z").json()

    response = client.delete(f"/api/schedule/{item['id']}", headers=auth_headers)

    assert response.json() == {"message": "Schedule item deleted successfully"}
    assert client.delete(f"/api/schedule/{item['id']}", headers=auth_headers).status_code == 404


# =============================================================================
# Listing Tests
# =============================================================================

def test_list_ordered_by_start_time(client, auth_headers):
    create_item(client, auth_headers, "2026-10-21T09:00:00Z", "2026-10-21T10:00:00Z", title="Later")
    create_item(client, auth_headers, "2026-10-20T09:00:00Z", "2026-10-20T10:00:00Z", title="Earlier")

    items = client.get("/api/schedule", headers=auth_headers).json()

    assert [i["title"] for i in items] == ["Earlier", "Later"]


def test_filter_by_date(client, auth_headers):
    create_item(client, auth_headers, "2026-10-20T00:00:00Z", "2026-10-20T01:00:00Z", title="Midnight")
    create_item(client, auth_headers, "2026-10-20T23:30:00Z", "2026-10-21T00:30:00Z", title="Late")
    create_item(client, auth_headers, "2026-10-21T00:00:00Z", "2026-10-21T01:00:00Z", title="Next day")

    items = client.get("/api/schedule?date=2026-10-20", headers=auth_headers).json()

    assert [i["title"] for i in items] == ["Midnight", "Late"]


def test_filter_by_invalid_date(client, auth_headers):
    response = client.get("/api/schedule?date=20-10-2026", headers=auth_headers)

    assert response.status_code == 400
