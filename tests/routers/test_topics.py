"""
Tests for the topics router.

Tests cover:
- Topic CRUD with defaults and validation
- Per-user isolation (foreign topics behave as missing)
- Deleting a topic clears topicId on everything that referenced it
"""


# =============================================================================
# CRUD Tests
# =============================================================================

def test_create_topic_defaults(client, auth_headers):
    """Description defaults to empty and color to the standard blue."""
    response = client.post("/api/topics", json={"name": "Math"}, headers=auth_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Math"
    assert data["description"] == ""
    assert data["color"] == "#3B82F6"
    assert data["userId"]
    assert data["createdAt"]
    assert data["updatedAt"]


def test_topic_lifecycle(client, auth_headers):
    """Create, list, update, delete, then the topic is gone."""
    created = client.post(
        "/api/topics",
        json={"name": "Math", "description": "", "color": "#3B82F6"},
        headers=auth_headers,
    ).json()

    listed = client.get("/api/topics", headers=auth_headers).json()
    assert [t["id"] for t in listed] == [created["id"]]

    response = client.put(f"/api/topics/{created['id']}", json={"name": "Algebra"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Algebra"
    assert response.json()["color"] == "#3B82F6"

    response = client.delete(f"/api/topics/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Topic deleted successfully"}

    assert client.get("/api/topics", headers=auth_headers).json() == []


def test_get_topic(client, auth_headers):
    created = client.post("/api/topics", json={"name": "Biology"}, headers=auth_headers).json()

    response = client.get(f"/api/topics/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["name"] == "Biology"


def test_create_topic_requires_name(client, auth_headers):
    response = client.post("/api/topics", json={"description": "no name"}, headers=auth_headers)

    assert response.status_code == 400
    assert any(error["field"] == "name" for error in response.json()["errors"])


def test_create_topic_blank_name(client, auth_headers):
    response = client.post("/api/topics", json={"name": "   "}, headers=auth_headers)

    assert response.status_code == 400


def test_create_topic_invalid_color(client, auth_headers):
    response = client.post("/api/topics", json={"name": "Art", "color": "blue"}, headers=auth_headers)

    assert response.status_code == 400
    assert any(error["field"] == "color" for error in response.json()["errors"])


def test_create_topic_unknown_field(client, auth_headers):
    response = client.post("/api/topics", json={"name": "Art", "priority": 3}, headers=auth_headers)

    assert response.status_code == 400


def test_client_user_id_is_ignored(client, auth_headers):
    """Ownership comes from the token, never from the body."""
    response = client.post("/api/topics", json={"name": "Mine", "userId": "someone-else"}, headers=auth_headers)
    me = client.get("/api/auth/me", headers=auth_headers).json()

    assert response.status_code == 201
    assert response.json()["userId"] == me["id"]


def test_update_topic_null_name_rejected(client, auth_headers):
    created = client.post("/api/topics", json={"name": "Chem"}, headers=auth_headers).json()

    response = client.put(f"/api/topics/{created['id']}", json={"name": None}, headers=auth_headers)

    assert response.status_code == 400


def test_update_missing_topic(client, auth_headers):
    response = client.put("/api/topics/does-not-exist", json={"name": "X"}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Topic not found"


def test_delete_twice(client, auth_headers):
    created = client.post("/api/topics", json={"name": "Once"}, headers=auth_headers).json()

    assert client.delete(f"/api/topics/{created['id']}", headers=auth_headers).status_code == 200
    response = client.delete(f"/api/topics/{created['id']}", headers=auth_headers)

    assert response.status_code == 404


# =============================================================================
# Isolation Tests
# =============================================================================

def test_foreign_topic_is_not_found(client, auth_headers, other_auth_headers):
    """Another user's topic is indistinguishable from a missing one."""
    created = client.post("/api/topics", json={"name": "Private"}, headers=auth_headers).json()
    topic_url = f"/api/topics/{created['id']}"

    assert client.get(topic_url, headers=other_auth_headers).status_code == 404
    assert client.put(topic_url, json={"name": "Hijack"}, headers=other_auth_headers).status_code == 404
    assert client.delete(topic_url, headers=other_auth_headers).status_code == 404
    assert client.get("/api/topics", headers=other_auth_headers).json() == []

    # Untouched for the owner
    assert client.get(topic_url, headers=auth_headers).json()["name"] == "Private"


def test_foreign_topic_reference_rejected(client, auth_headers, other_auth_headers):
    """Linking to someone else's topic is a validation error."""
    foreign = client.post("/api/topics", json={"name": "Bob's"}, headers=other_auth_headers).json()

    response = client.post(
        "/api/notes",
        json={"title": "Note", "content": "Body", "topicId": foreign["id"]},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "topicId", "message": "Topic not found"}]


# =============================================================================
# Delete Cascade Tests
# =============================================================================

def test_delete_topic_clears_references(client, auth_headers, make_pdf):
    """Videos, notes, schedule items and study guides survive with topicId null."""
    topic = client.post("/api/topics", json={"name": "Physics"}, headers=auth_headers).json()
    topic_id = topic["id"]

    video = client.post(
        "/api/videos",
        json={"title": "Lecture", "url": "https://example.com/v", "topicId": topic_id},
        headers=auth_headers,
    ).json()
    note = client.post(
        "/api/notes",
        json={"title": "Kinematics", "content": "v = u + at", "topicId": topic_id},
        headers=auth_headers,
    ).json()
    item = client.post(
        "/api/schedule",
        json={
            "title": "Revise",
            "startTime": "2026-10-20T09:00:00Z",
            "endTime": "2026-10-20T10:00:00Z",
            "topicId": topic_id,
        },
        headers=auth_headers,
    ).json()
    guide = client.post(
        "/api/study-guides/upload",
        data={"title": "Notes PDF", "topicId": topic_id},
        files={"pdf": ("physics.pdf", make_pdf(), "application/pdf")},
        headers=auth_headers,
    ).json()

    assert video["topicId"] == topic_id
    assert guide["topicId"] == topic_id

    response = client.delete(f"/api/topics/{topic_id}", headers=auth_headers)
    assert response.status_code == 200

    assert client.get(f"/api/videos/{video['id']}", headers=auth_headers).json()["topicId"] is None
    assert client.get(f"/api/notes/{note['id']}", headers=auth_headers).json()["topicId"] is None
    assert client.get(f"/api/schedule/{item['id']}", headers=auth_headers).json()["topicId"] is None
    assert client.get(f"/api/study-guides/{guide['id']}", headers=auth_headers).json()["topicId"] is None

    videos = client.get("/api/videos", headers=auth_headers).json()
    assert [v["topicId"] for v in videos] == [None]
    assert client.get(f"/api/videos?topicId={topic_id}", headers=auth_headers).json() == []
