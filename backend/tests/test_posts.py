from __future__ import annotations

import pytest

from watched.core.exceptions import BadRequestError
from watched.models.admin_log import AdminLog
from watched.models.comment import Comment
from watched.models.post import Post, PostLike
from watched.models.site_activity_log import SiteActivityLog
from watched.services import posts as posts_service


def _create_post(client, headers, movie_id: int, *, title: str = "Mind bending", content: str = "Loved it."):
    return client.post(
        "/api/posts/create",
        json={"movieId": movie_id, "title": title, "content": content},
        headers=headers,
    )


def test_create_then_get_round_trips_post(client, make_user, make_movie, auth_header) -> None:
    alice = make_user("alice")
    movie = make_movie()

    created = _create_post(client, auth_header(alice), movie.id)
    assert created.status_code == 200, created.text
    post_id = created.json()["postId"]

    fetched = client.get(f"/api/posts/{post_id}")
    assert fetched.status_code == 200
    body = fetched.json()
    assert body["title"] == "Mind bending"
    assert body["content"] == "Loved it."
    assert body["username"] == "alice"
    assert body["movieId"] == movie.id
    assert body["likeCount"] == 0


def test_create_requires_auth_and_known_movie(client, make_user, auth_header) -> None:
    alice = make_user("alice")
    assert client.post("/api/posts/create", json={"movieId": 1, "title": "t", "content": "c"}).status_code == 401

    response = _create_post(client, auth_header(alice), 999)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid Movie ID."


def test_get_missing_post_is_404(client) -> None:
    assert client.get("/api/posts/42").status_code == 404


def test_non_owner_cannot_update_or_delete(client, make_user, make_movie, auth_header) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    post_id = _create_post(client, auth_header(alice), make_movie().id).json()["postId"]

    update = client.put(f"/api/posts/{post_id}", json={"title": "Mine now", "content": "x"}, headers=auth_header(bob))
    assert update.status_code == 403
    assert client.delete(f"/api/posts/{post_id}", headers=auth_header(bob)).status_code == 403
    assert client.get(f"/api/posts/{post_id}").json()["title"] == "Mind bending"


def test_owner_update_has_no_suffix_and_no_admin_log(client, make_user, make_movie, auth_header, db_session) -> None:
    alice = make_user("alice", is_admin=True)
    post_id = _create_post(client, auth_header(alice), make_movie().id).json()["postId"]

    response = client.put(
        f"/api/posts/{post_id}",
        json={"title": "Second thoughts", "content": "Still good."},
        headers=auth_header(alice),
    )
    assert response.status_code == 200
    assert response.json()["content"] == "Still good."
    assert db_session.query(AdminLog).count() == 0


def test_admin_edit_of_other_users_post_is_suffixed_and_logged(
    client, make_user, make_movie, auth_header, db_session
) -> None:
    alice = make_user("alice")
    admin = make_user("root", is_admin=True)
    post_id = _create_post(client, auth_header(alice), make_movie().id).json()["postId"]

    response = client.put(
        f"/api/posts/{post_id}",
        json={"title": "Moderated", "content": "Tone it down"},
        headers=auth_header(admin),
    )
    assert response.status_code == 200
    assert response.json()["content"] == "Tone it down -edited by root"
    assert response.json()["userId"] == alice.id

    logs = db_session.query(AdminLog).all()
    assert len(logs) == 1
    assert logs[0].action == "Edited Post"
    assert logs[0].admin_id == admin.id
    assert logs[0].target_user_id == alice.id
    assert logs[0].target_post_id == post_id


def test_admin_delete_cascades_and_keeps_owner_in_log(
    client, make_user, make_movie, auth_header, db_session
) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    admin = make_user("root", is_admin=True)
    post_id = _create_post(client, auth_header(alice), make_movie().id).json()["postId"]
    client.post("/api/comments/create", json={"postId": post_id, "content": "Agreed"}, headers=auth_header(bob))
    client.post(f"/api/posts/{post_id}/like", headers=auth_header(bob))

    response = client.delete(f"/api/posts/{post_id}", headers=auth_header(admin))
    assert response.status_code == 200
    assert response.json()["message"] == "Post deleted successfully"
    assert client.get(f"/api/posts/{post_id}").status_code == 404

    assert db_session.query(Comment).count() == 0
    assert db_session.query(PostLike).count() == 0
    log = db_session.query(AdminLog).one()
    assert log.action == "Deleted Post"
    assert log.target_user_id == alice.id
    assert log.target_post_id is None


def test_like_rules(client, make_user, make_movie, auth_header) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    admin = make_user("root", is_admin=True)
    movie = make_movie()
    post_id = _create_post(client, auth_header(alice), movie.id).json()["postId"]
    admin_post_id = _create_post(client, auth_header(admin), movie.id, title="Admin take").json()["postId"]

    own = client.post(f"/api/posts/{post_id}/like", headers=auth_header(alice))
    assert own.status_code == 400
    assert own.json()["message"] == "You cannot like your own post."
    assert client.post(f"/api/posts/{admin_post_id}/like", headers=auth_header(admin)).status_code == 400

    first = client.post(f"/api/posts/{post_id}/like", headers=auth_header(bob))
    assert first.status_code == 200, first.text
    assert first.json()["postId"] == post_id
    assert first.json()["userId"] == bob.id

    again = client.post(f"/api/posts/{post_id}/like", headers=auth_header(bob))
    assert again.status_code == 400
    assert again.json()["message"] == "Post already liked."

    missing = client.post("/api/posts/999/like", headers=auth_header(bob))
    assert missing.status_code == 400
    assert missing.json()["message"] == "Post not found."

    assert client.get(f"/api/posts/{post_id}").json()["likeCount"] == 1


def test_duplicate_like_is_stopped_by_unique_constraint(db_session, make_user, make_movie, monkeypatch) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    post = Post(user_id=alice.id, movie_id=make_movie().id, title="Mind bending", content="Loved it.")
    db_session.add(post)
    db_session.commit()
    db_session.add(PostLike(post_id=post.id, user_id=bob.id))
    db_session.commit()
    monkeypatch.setattr(posts_service, "find_like", lambda *args: None)

    with pytest.raises(BadRequestError) as excinfo:
        posts_service.like_post(db_session, post.id, bob)

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Post already liked."
    assert db_session.query(PostLike).count() == 1
    assert db_session.query(SiteActivityLog).count() == 0


def test_unlike_requires_existing_like(client, make_user, make_movie, auth_header) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    post_id = _create_post(client, auth_header(alice), make_movie().id).json()["postId"]

    not_liked = client.delete(f"/api/posts/{post_id}/like", headers=auth_header(bob))
    assert not_liked.status_code == 400
    assert not_liked.json()["message"] == "Post not liked or post not found"

    client.post(f"/api/posts/{post_id}/like", headers=auth_header(bob))
    removed = client.delete(f"/api/posts/{post_id}/like", headers=auth_header(bob))
    assert removed.status_code == 200
    assert removed.json()["message"] == "Like removed successfully"
    assert client.get(f"/api/posts/{post_id}").json()["likeCount"] == 0


def test_list_reports_has_liked_for_caller_only(client, make_user, make_movie, auth_header) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    movie = make_movie()
    liked_id = _create_post(client, auth_header(alice), movie.id, title="Liked").json()["postId"]
    _create_post(client, auth_header(alice), movie.id, title="Ignored")
    client.post(f"/api/posts/{liked_id}/like", headers=auth_header(bob))

    as_bob = {post["postId"]: post for post in client.get("/api/posts/all", headers=auth_header(bob)).json()}
    assert as_bob[liked_id]["hasLiked"] is True
    assert as_bob[liked_id]["likeCount"] == 1
    assert sum(post["hasLiked"] for post in as_bob.values()) == 1

    anonymous = client.get("/api/posts/all").json()
    assert len(anonymous) == 2
    assert not any(post["hasLiked"] for post in anonymous)


def test_post_mutations_write_site_activity(client, make_user, make_movie, auth_header, db_session) -> None:
    alice = make_user("alice")
    post_id = _create_post(client, auth_header(alice), make_movie().id).json()["postId"]
    client.put(f"/api/posts/{post_id}", json={"title": "t", "content": "c"}, headers=auth_header(alice))
    client.delete(f"/api/posts/{post_id}", headers=auth_header(alice))

    rows = db_session.query(SiteActivityLog).order_by(SiteActivityLog.id).all()
    assert [(row.activity, row.operation) for row in rows] == [
        ("Post", "Create"),
        ("Post", "Edit"),
        ("Post", "Delete"),
    ]
    assert all(row.user_id == alice.id for row in rows)
