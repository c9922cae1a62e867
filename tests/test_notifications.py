"""Tests for in-app notifications and the dispatcher."""

from __future__ import annotations

import pytest
from flask.testing import FlaskClient
from sqlalchemy.exc import SQLAlchemyError

from models import Notification, db
from services.notifications import NotificationError, compose_message


def _notify(app, user_id, message, *, admin_only=False, read=False) -> int:
    with app.app_context():
        notification = Notification(
            user_id=user_id, message=message, type="SYSTEM", admin_only=admin_only, read=read
        )
        db.session.add(notification)
        db.session.commit()
        return notification.id


@pytest.mark.parametrize(
    "message, phone, expected",
    [
        ("Hello", None, "Hello"),
        ("Hello", "+233", "Hello Contact: +233"),
        (
            "Booking canceled",
            None,
            "Booking canceled Please contact support if you have any questions.",
        ),
    ],
)
def test_compose_message(message, phone, expected):
    assert compose_message(message, phone) == expected


def test_dispatcher_validates_input(app, make_user):
    user_id = make_user("guest@example.com", "CUSTOMER")
    notifier = app.extensions["notifier"]

    with app.app_context():
        with pytest.raises(NotificationError):
            notifier.send("1", "Hi")
        with pytest.raises(NotificationError):
            notifier.send(user_id, "Hi", "ALERT")
        assert notifier.try_send(user_id, "Hi", "ALERT") is None

        notification = notifier.send(user_id, "Welcome", "MESSAGE", {"email": "g@example.com"})
        assert notification.id is not None
        assert notification.email == "g@example.com"


def test_dispatcher_rolls_back_on_database_error(app, make_user, monkeypatch):
    user_id = make_user("guest@example.com", "CUSTOMER")
    notifier = app.extensions["notifier"]

    def _broken_commit():
        raise SQLAlchemyError("disk full")

    with app.app_context():
        monkeypatch.setattr(notifier.repository, "commit", _broken_commit)
        with pytest.raises(NotificationError):
            notifier.send(user_id, "Hi")
        monkeypatch.undo()
        assert Notification.query.count() == 0


def test_user_sees_own_notifications_only(client: FlaskClient, app, make_user, auth_headers):
    user_id = make_user("guest@example.com", "CUSTOMER")
    other_id = make_user("other@example.com", "CUSTOMER")
    admin_id = make_user("admin@example.com", "ADMIN", verified=True)
    _notify(app, user_id, "Yours")
    _notify(app, other_id, "Theirs")
    _notify(app, user_id, "Review queue", admin_only=True)

    mine = client.get("/api/notifications", headers=auth_headers(user_id)).get_json()
    everything = client.get("/api/notifications", headers=auth_headers(admin_id)).get_json()

    assert [item["message"] for item in mine] == ["Yours"]
    assert len(everything) == 3


def test_unread_count_and_mark_all_read(client: FlaskClient, make_user, app, auth_headers):
    user_id = make_user("guest@example.com", "CUSTOMER")
    _notify(app, user_id, "One")
    _notify(app, user_id, "Two")
    _notify(app, user_id, "Old", read=True)
    headers = auth_headers(user_id)

    assert client.get("/api/notifications/unread-count", headers=headers).get_json() == {
        "count": 2
    }
    assert client.post("/api/notifications/mark-all-read", headers=headers).get_json() == {
        "updated": 2
    }
    assert client.get("/api/notifications/unread-count", headers=headers).get_json() == {
        "count": 0
    }


def test_mark_read_and_delete_are_owner_only(client: FlaskClient, app, make_user, auth_headers):
    user_id = make_user("guest@example.com", "CUSTOMER")
    other_id = make_user("other@example.com", "CUSTOMER")
    notification_id = _notify(app, user_id, "Hi")

    assert (
        client.post(
            f"/api/notifications/{notification_id}/read", headers=auth_headers(other_id)
        ).status_code
        == 403
    )
    read = client.post(
        f"/api/notifications/{notification_id}/read", headers=auth_headers(user_id)
    )
    assert read.get_json()["read"] is True

    assert (
        client.delete(
            f"/api/notifications/{notification_id}", headers=auth_headers(other_id)
        ).status_code
        == 403
    )
    assert (
        client.delete(
            f"/api/notifications/{notification_id}", headers=auth_headers(user_id)
        ).status_code
        == 200
    )
    assert (
        client.delete(
            f"/api/notifications/{notification_id}", headers=auth_headers(user_id)
        ).status_code
        == 404
    )


def test_admin_creates_notification(client: FlaskClient, make_user, auth_headers):
    user_id = make_user("guest@example.com", "CUSTOMER")
    admin_id = make_user("admin@example.com", "ADMIN", verified=True)

    response = client.post(
        "/api/notifications",
        json={"user_id": user_id, "message": "Welcome aboard", "type": "message"},
        headers=auth_headers(admin_id),
    )

    assert response.status_code == 201
    assert response.get_json()["type"] == "MESSAGE"

    forbidden = client.post(
        "/api/notifications",
        json={"user_id": user_id, "message": "Hi", "type": "SYSTEM"},
        headers=auth_headers(user_id),
    )
    assert forbidden.status_code == 403

    bad_type = client.post(
        "/api/notifications",
        json={"user_id": user_id, "message": "Hi", "type": "ALERT"},
        headers=auth_headers(admin_id),
    )
    assert bad_type.status_code == 400
