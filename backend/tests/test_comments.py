from __future__ import annotations

from watched.models.admin_log import AdminLog
from watched.models.post import Post


def _post_for(db_session, owner, movie) -> Post:
    post = Post(user_id=owner.id, movie_id=movie.id, title="Review", content="Body")
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


def _comment(client, headers, post_id: int, content: str = "Nice review"):
    return client.post("/api/comments/create", json={"postId": post_id, "content": content}, headers=headers)


def test_create_get_and_list_comments(client, make_user, make_movie, auth_header, db_session) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    post = _post_for(db_session, alice, make_movie())

    created = _comment(client, auth_header(bob), post.id)
    assert created.status_code == 200, created.text
    comment_id = created.json()["commentId"]
    assert created.json()["username"] == "bob"

    _comment(client, auth_header(alice), post.id, "Thanks!")

    fetched = client.get(f"/api/comments/{comment_id}")
    assert fetched.status_code == 200
    assert fetched.json()["content"] == "Nice review"

    listed = client.get(f"/api/comments/post/{post.id}").json()
    assert [item["content"] for item in listed] == ["Nice review", "Thanks!"]


def test_create_rejects_unknown_post_and_empty_content(client, make_user, make_movie, auth_header, db_session) -> None:
    alice = make_user("alice")
    post = _post_for(db_session, alice, make_movie())

    unknown = _comment(client, auth_header(alice), 999)
    assert unknown.status_code == 400
    assert unknown.json()["message"] == "Invalid Post ID."

    empty = _comment(client, auth_header(alice), post.id, "   ")
    assert empty.status_code == 400


def test_missing_comment_is_404(client) -> None:
    response = client.get("/api/comments/77")
    assert response.status_code == 404
    assert response.json()["message"] == "Comment not found."


def test_non_owner_cannot_edit_or_delete_comment(client, make_user, make_movie, auth_header, db_session) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    post = _post_for(db_session, alice, make_movie())
    comment_id = _comment(client, auth_header(alice), post.id).json()["commentId"]

    assert client.put(f"/api/comments/{comment_id}", json={"content": "hijack"}, headers=auth_header(bob)).status_code == 403
    assert client.delete(f"/api/comments/{comment_id}", headers=auth_header(bob)).status_code == 403

    own = client.put(f"/api/comments/{comment_id}", json={"content": "Edited myself"}, headers=auth_header(alice))
    assert own.status_code == 200
    assert own.json()["content"] == "Edited myself"


def test_admin_edit_of_comment_is_suffixed_and_logged_once(
    client, make_user, make_movie, auth_header, db_session
) -> None:
    alice = make_user("alice")
    admin = make_user("adminUser", is_admin=True)
    post = _post_for(db_session, alice, make_movie())
    comment_id = _comment(client, auth_header(alice), post.id, "Spoilers ahead").json()["commentId"]

    response = client.put(f"/api/comments/{comment_id}", json={"content": "[removed]"}, headers=auth_header(admin))
    assert response.status_code == 200
    assert response.json()["content"] == "[removed] -edited by adminUser"

    logs = db_session.query(AdminLog).filter(AdminLog.action == "Edited Comment").all()
    assert len(logs) == 1
    assert logs[0].target_user_id == alice.id
    assert logs[0].target_comment_id == comment_id
    assert db_session.query(AdminLog).count() == 1


def test_admin_delete_of_comment_is_logged(client, make_user, make_movie, auth_header, db_session) -> None:
    alice = make_user("alice")
    admin = make_user("root", is_admin=True)
    post = _post_for(db_session, alice, make_movie())
    comment_id = _comment(client, auth_header(alice), post.id).json()["commentId"]

    response = client.delete(f"/api/comments/{comment_id}", headers=auth_header(admin))
    assert response.status_code == 200
    assert response.json()["message"] == "Comment deleted successfully"
    assert client.get(f"/api/comments/{comment_id}").status_code == 404

    log = db_session.query(AdminLog).one()
    assert log.action == "Deleted Comment"
    assert log.target_user_id == alice.id
    assert log.target_comment_id is None
