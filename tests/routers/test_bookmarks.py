"""
Tests for the bookmarks router.

Page numbers belong to PDF bookmarks and timestamp labels to video
bookmarks, both on create and after a partial update.
"""


def create_bookmark(client, headers, **overrides):
    payload = {"resourceType": "pdf", "resourceId": "guide-1", "title": "Key diagram", "pageNumber": 4}
    payload.update(overrides)
    return client.post("/api/bookmarks", json=payload, headers=headers)


# =============================================================================
# Create Tests
# =============================================================================

def test_create_pdf_bookmark(client, auth_headers):
    response = create_bookmark(client, auth_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["resourceType"] == "pdf"
    assert data["resourceId"] == "guide-1"
    assert data["pageNumber"] == 4
    assert data["timestampLabel"] is None


def test_create_video_bookmark(client, auth_headers):
    response = create_bookmark(
        client, auth_headers, resourceType="video", resourceId="video-1", pageNumber=None, timestampLabel="12:30"
    )

    assert response.status_code == 201
    assert response.json()["timestampLabel"] == "12:30"


def test_create_note_bookmark(client, auth_headers):
    response = create_bookmark(client, auth_headers, resourceType="note", resourceId="note-1", pageNumber=None)

    assert response.status_code == 201


def test_page_number_on_video_rejected(client, auth_headers):
    response = create_bookmark(client, auth_headers, resourceType="video", pageNumber=3)

    assert response.status_code == 400
    assert "pageNumber is only allowed for pdf bookmarks" in response.json()["errors"][0]["message"]


def test_timestamp_on_pdf_rejected(client, auth_headers):
    response = create_bookmark(client, auth_headers, timestampLabel="01:00")

    assert response.status_code == 400


def test_unknown_resource_type_rejected(client, auth_headers):
    response = create_bookmark(client, auth_headers, resourceType="podcast", pageNumber=None)

    assert response.status_code == 400
    assert any(error["field"] == "resourceType" for error in response.json()["errors"])


def test_page_number_must_be_positive(client, auth_headers):
    response = create_bookmark(client, auth_headers, pageNumber=0)

    assert response.status_code == 400


# =============================================================================
# Update Tests
# =============================================================================

def test_update_title(client, auth_headers):
    bookmark = create_bookmark(client, auth_headers).json()

    response = client.put(f"/api/bookmarks/{bookmark['id']}", json={"title": "Renamed"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["title"] == "Renamed"
    assert response.json()["pageNumber"] == 4


def test_switching_kind_keeps_target_consistent(client, auth_headers):
    """A PDF bookmark cannot become a video bookmark while it still has a page."""
    bookmark = create_bookmark(client, auth_headers).json()
    url = f"/api/bookmarks/{bookmark['id']}"

    response = client.put(url, json={"resourceType": "video"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "resourceType"

    response = client.put(
        url,
        json={"resourceType": "video", "pageNumber": None, "timestampLabel": "03:15"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["resourceType"] == "video"
    assert response.json()["pageNumber"] is None
    assert response.json()["timestampLabel"] == "03:15"


def test_update_missing_bookmark(client, auth_headers):
    response = client.put("/api/bookmarks/missing", json={"title": "X"}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Bookmark not found"


def test_delete_bookmark(client, auth_headers, other_auth_headers):
    bookmark = create_bookmark(client, auth_headers).json()

    assert client.delete(f"/api/bookmarks/{bookmark['id']}", headers=other_auth_headers).status_code == 404
    response = client.delete(f"/api/bookmarks/{bookmark['id']}", headers=auth_headers)

    assert response.json() == {"message": "Bookmark deleted successfully"}
    assert client.get("/api/bookmarks", headers=auth_headers).json() == []
