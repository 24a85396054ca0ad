"""Tests for the admin gate and the routes behind it."""
from __future__ import annotations

import pytest

from jobboard.core.security import NOT_AUTHORIZED_MESSAGE, authorize_admin
from jobboard.models import User

from conftest import sign_up


def admin_user() -> User:
    return User(id=1000, email="root@example.com", admin=True)


@pytest.mark.parametrize(
    ("user", "allowed"),
    [
        (None, False),
        (User(email="a@example.com", admin=None), False),
        (User(email="b@example.com", admin=False), False),
        (User(email="c@example.com", admin=True), True),
    ],
)
def test_authorize_admin(user, allowed) -> None:
    assert authorize_admin(user) is allowed


def test_anonymous_caller_is_redirected_with_notice(client) -> None:
    response = client.get("/admin/users", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"].endswith("/sign_in")

    sign_in_page = client.get("/sign_in").json()
    assert sign_in_page["flash"] == {"notice": NOT_AUTHORIZED_MESSAGE}
    assert sign_in_page["form"]["action"].endswith("/session")

    # Shown once, then gone
    assert client.get("/sign_in").json()["flash"] == {}


def test_signed_in_non_admin_is_redirected(client) -> None:
    sign_up(client, "plain@example.com")

    response = client.get("/admin/users", follow_redirects=False)

    assert response.status_code == 302
    assert client.get("/").json()["flash"] == {"notice": NOT_AUTHORIZED_MESSAGE}


def test_denied_request_changes_nothing(client, act_as) -> None:
    target = sign_up(client, "target@example.com")

    response = client.patch(f"/admin/users/{target['id']}", json={"admin": True}, follow_redirects=False)
    assert response.status_code == 302

    act_as(admin_user())
    users = client.get("/admin/users").json()
    assert [user["admin"] for user in users] == [False]


def test_admin_lists_and_promotes_users(client, act_as) -> None:
    first = sign_up(client, "first@example.com", first_name="Ada", last_name="Lovelace")
    sign_up(client, "second@example.com")
    act_as(admin_user())

    listed = client.get("/admin/users")
    assert listed.status_code == 200
    assert [user["email"] for user in listed.json()] == ["first@example.com", "second@example.com"]
    assert listed.json()[0]["first_name"] == "Ada"

    promoted = client.patch(f"/admin/users/{first['id']}", json={"admin": True})
    assert promoted.status_code == 200
    assert promoted.json()["admin"] is True

    revoked = client.patch(f"/admin/users/{first['id']}", json={"admin": False})
    assert revoked.json()["admin"] is False


def test_admin_update_unknown_user(client, act_as) -> None:
    act_as(admin_user())

    response = client.patch("/admin/users/999", json={"admin": True})

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_job_posts_stay_public(client) -> None:
    response = client.post("/job_posts", json={"title": "Open to all"})

    assert response.status_code == 201
