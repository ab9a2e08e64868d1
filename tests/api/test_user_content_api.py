"""HTTP tests for /api/user-content and /api/admin/content."""

from tests.conftest import bearer


SUBMISSION = {
    "title": "Night Market",
    "description": "Street food in Taipei",
    "content_type": "text",
    "category": "food",
    "text_content": "Stinky tofu and more.",
    "tags": ["taipei", "street food"],
}


def submit(client, actor, **overrides) -> dict:
    response = client.post(
        "/api/user-content", json={**SUBMISSION, **overrides}, headers=bearer(actor)
    )
    assert response.status_code == 201
    return response.json()["content"]


def test_moderation_flow(client, author, reader, admin) -> None:
    content = submit(client, author)
    assert content["status"] == "pending"
    assert content["slug"] == "night-market"

    assert client.get("/api/user-content/night-market").status_code == 404
    assert (
        client.put(
            f"/api/admin/content/{content['id']}/approve", headers=bearer(reader)
        ).status_code
        == 403
    )

    approved = client.put(
        f"/api/admin/content/{content['id']}/approve",
        json={"notes": "Tasty", "featured": True},
        headers=bearer(admin),
    )
    assert approved.status_code == 200
    assert approved.json()["content"]["featured"] is True

    public = client.get("/api/user-content/night-market").json()
    assert public["status"] == "approved"
    assert public["views"] == 1

    published = client.put(
        f"/api/admin/content/{content['id']}/publish", headers=bearer(admin)
    ).json()["content"]
    assert published["status"] == "published"
    assert published["published_at"] == approved.json()["content"]["published_at"]

    again = client.put(
        f"/api/admin/content/{content['id']}/approve", headers=bearer(admin)
    )
    assert again.status_code == 400
    assert again.json()["message"] == "Only pending content can be approved"


def test_reject_requires_reason(client, author, admin) -> None:
    content = submit(client, author)

    missing = client.put(
        f"/api/admin/content/{content['id']}/reject", json={}, headers=bearer(admin)
    )
    rejected = client.put(
        f"/api/admin/content/{content['id']}/reject",
        json={"notes": "Add photos"},
        headers=bearer(admin),
    )

    assert missing.status_code == 400
    assert rejected.json()["content"]["moderation_notes"] == "Add photos"

    own = client.get(
        "/api/user-content/my/content?status=rejected", headers=bearer(author)
    ).json()
    assert [c["id"] for c in own["content"]] == [content["id"]]
    assert own["content"][0]["moderation_notes"] is None


def test_my_content_rejects_unknown_status(client, author) -> None:
    response = client.get(
        "/api/user-content/my/content?status=archived", headers=bearer(author)
    )
    assert response.status_code == 400


def test_video_without_source(client, author) -> None:
    response = client.post(
        "/api/user-content",
        json={**SUBMISSION, "content_type": "video", "text_content": None},
        headers=bearer(author),
    )

    assert response.status_code == 400
    assert response.json()["message"] == (
        "Video file or video URL is required for video posts"
    )


def test_author_cannot_edit_after_approval(client, author, admin) -> None:
    content = submit(client, author)
    client.put(f"/api/admin/content/{content['id']}/approve", headers=bearer(admin))

    response = client.put(
        f"/api/user-content/{content['id']}",
        json={"description": "changed"},
        headers=bearer(author),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot edit approved or published content"


def test_comments_wait_for_approval(client, author, reader, admin) -> None:
    content = submit(client, author)

    created = client.post(
        f"/api/user-content/{content['id']}/comment",
        json={"content": "Yum"},
        headers=bearer(reader),
    )

    assert created.status_code == 201
    assert created.json()["comment_count"] == 0
    assert created.json()["message"] == (
        "Comment added successfully and is pending approval"
    )
    listing = client.get(f"/api/user-content/{content['id']}/comments").json()
    assert listing["comments"] == []

    client.put(
        f"/api/comments/{created.json()['comment_id']}/approve",
        json={"isApproved": True},
        headers=bearer(admin),
    )
    listing = client.get(f"/api/user-content/{content['id']}/comments").json()
    assert len(listing["comments"]) == 1


def test_like_and_delete(client, author, reader) -> None:
    content = submit(client, author)

    liked = client.post(
        f"/api/user-content/{content['id']}/like", headers=bearer(reader)
    )
    stranger = client.delete(
        f"/api/user-content/{content['id']}", headers=bearer(reader)
    )
    deleted = client.delete(f"/api/user-content/{content['id']}", headers=bearer(author))

    assert liked.json()["message"] == "Content liked"
    assert stranger.status_code == 403
    assert deleted.status_code == 200


def test_pending_queue_and_stats(client, author, admin) -> None:
    submit(client, author)
    submit(client, author, title="Second")

    queue = client.get("/api/admin/content/pending", headers=bearer(admin)).json()
    stats = client.get("/api/admin/content/stats", headers=bearer(admin)).json()

    assert queue["count"] == 2
    assert stats["pending"] == 2
    assert stats["total"] == 0


def test_public_listing(client, author, admin) -> None:
    content = submit(client, author)
    submit(client, author, title="Hidden")
    client.put(f"/api/admin/content/{content['id']}/approve", headers=bearer(admin))

    listing = client.get("/api/user-content?category=food").json()

    assert [c["id"] for c in listing["content"]] == [content["id"]]
    assert listing["pagination"]["total_items"] == 1
