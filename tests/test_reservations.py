"""Tests for booking, approval and cancellation of reservations."""

from __future__ import annotations

from datetime import datetime

import pytest
from flask.testing import FlaskClient

from models import Notification, Reservation, db


@pytest.fixture()
def booking_setup(make_user, make_listing):
    owner_id = make_user(
        "pro@example.com", "PROVIDER", verified=True, contact_phone="+233201111111"
    )
    customer_id = make_user("guest@example.com", "CUSTOMER", contact_phone="+233202222222")
    listing_id = make_listing(owner_id, title="Lagoon villa")
    return owner_id, customer_id, listing_id


def _book(client, headers, listing_id, start="2030-07-01T14:00:00", end="2030-07-04T10:00:00"):
    return client.post(
        "/api/reservations",
        json={
            "listing_id": listing_id,
            "start_date": start,
            "end_date": end,
            "total_price": 300,
        },
        headers=headers,
    )


def test_create_reservation_is_pending_and_notifies_owner(
    client: FlaskClient, app, booking_setup, auth_headers
):
    owner_id, customer_id, listing_id = booking_setup

    response = _book(client, auth_headers(customer_id), listing_id)

    assert response.status_code == 201
    payload = response.get_json()
    assert payload["status"] == "PENDING"
    assert payload["user_id"] == customer_id
    assert payload["contact_phone"] == "+233202222222"

    with app.app_context():
        note = Notification.query.filter_by(user_id=owner_id).one()
    assert note.type == "BOOKING"
    assert "Lagoon villa" in note.message
    assert note.message.endswith("Contact: +233202222222")


@pytest.mark.parametrize(
    "start, end",
    [
        ("2030-07-04T10:00:00", "2030-07-01T14:00:00"),
        ("2030-07-01T14:00:00", "2030-07-01T14:00:00"),
        ("not-a-date", "2030-07-01T14:00:00"),
    ],
)
def test_create_reservation_rejects_bad_ranges(
    client: FlaskClient, booking_setup, auth_headers, start, end
):
    _, customer_id, listing_id = booking_setup

    response = _book(client, auth_headers(customer_id), listing_id, start, end)

    assert response.status_code == 400


def test_create_reservation_validation(client: FlaskClient, booking_setup, auth_headers):
    _, customer_id, listing_id = booking_setup
    headers = auth_headers(customer_id)

    missing = client.post(
        "/api/reservations", json={"listing_id": listing_id}, headers=headers
    )
    assert missing.status_code == 400
    assert "Missing required fields" in missing.get_json()["detail"]

    free = client.post(
        "/api/reservations",
        json={
            "listing_id": listing_id,
            "start_date": "2030-07-01",
            "end_date": "2030-07-03",
            "total_price": -5,
        },
        headers=headers,
    )
    assert free.status_code == 400

    unknown = _book(client, headers, 999)
    assert unknown.status_code == 404


def test_cannot_book_unapproved_listing(
    client: FlaskClient, booking_setup, make_listing, auth_headers
):
    owner_id, customer_id, _ = booking_setup
    pending_id = make_listing(owner_id, status="PENDING")

    response = _book(client, auth_headers(customer_id), pending_id)

    assert response.status_code == 400


def test_overlapping_reservation_is_rejected(
    client: FlaskClient, app, booking_setup, make_user, auth_headers
):
    _, customer_id, listing_id = booking_setup
    other_id = make_user("other@example.com", "CUSTOMER")

    assert _book(client, auth_headers(customer_id), listing_id).status_code == 201

    clash = _book(
        client,
        auth_headers(other_id),
        listing_id,
        "2030-07-03T12:00:00",
        "2030-07-06T10:00:00",
    )
    assert clash.status_code == 409
    assert clash.get_json()["detail"] == "Listing already reserved for selected dates."

    later = _book(
        client,
        auth_headers(other_id),
        listing_id,
        "2030-07-05T12:00:00",
        "2030-07-06T10:00:00",
    )
    assert later.status_code == 201

    with app.app_context():
        assert Reservation.query.count() == 2


def test_cancelled_reservation_frees_the_dates(
    client: FlaskClient, booking_setup, make_user, make_reservation, auth_headers
):
    _, customer_id, listing_id = booking_setup
    other_id = make_user("other@example.com", "CUSTOMER")
    make_reservation(
        listing_id,
        customer_id,
        datetime(2030, 7, 1, 14),
        datetime(2030, 7, 4, 10),
        status="CANCELLED",
    )

    response = _book(client, auth_headers(other_id), listing_id)

    assert response.status_code == 201


def test_owner_approves_reservation(
    client: FlaskClient, app, booking_setup, make_reservation, auth_headers
):
    owner_id, customer_id, listing_id = booking_setup
    reservation_id = make_reservation(
        listing_id, customer_id, datetime(2030, 7, 1, 14), datetime(2030, 7, 4, 10)
    )

    by_customer = client.patch(
        f"/api/reservations/{reservation_id}/approve", headers=auth_headers(customer_id)
    )
    assert by_customer.status_code == 403

    response = client.patch(
        f"/api/reservations/{reservation_id}/approve", headers=auth_headers(owner_id)
    )
    assert response.status_code == 200
    assert response.get_json()["status"] == "CONFIRMED"

    with app.app_context():
        note = Notification.query.filter_by(user_id=customer_id).one()
    assert "has been approved" in note.message
    assert "Mon Jul 01 2030" in note.message
    assert note.contact_phone == "+233201111111"


def test_approval_blocked_by_confirmed_overlap(
    client: FlaskClient, booking_setup, make_user, make_reservation, auth_headers
):
    owner_id, customer_id, listing_id = booking_setup
    other_id = make_user("other@example.com", "CUSTOMER")
    make_reservation(
        listing_id,
        other_id,
        datetime(2030, 7, 2),
        datetime(2030, 7, 5),
        status="CONFIRMED",
    )
    reservation_id = make_reservation(
        listing_id, customer_id, datetime(2030, 7, 1, 14), datetime(2030, 7, 4, 10)
    )

    response = client.patch(
        f"/api/reservations/{reservation_id}/approve", headers=auth_headers(owner_id)
    )

    assert response.status_code == 409


def test_cancelled_reservation_cannot_be_approved(
    client: FlaskClient, booking_setup, make_reservation, auth_headers
):
    owner_id, customer_id, listing_id = booking_setup
    reservation_id = make_reservation(
        listing_id,
        customer_id,
        datetime(2030, 7, 1),
        datetime(2030, 7, 4),
        status="CANCELLED",
    )

    response = client.patch(
        f"/api/reservations/{reservation_id}/approve", headers=auth_headers(owner_id)
    )

    assert response.status_code == 409


def test_owner_cancels_with_reason(
    client: FlaskClient, app, booking_setup, make_user, make_reservation, auth_headers
):
    owner_id, customer_id, listing_id = booking_setup
    stranger_id = make_user("stranger@example.com", "CUSTOMER")
    reservation_id = make_reservation(
        listing_id, customer_id, datetime(2030, 7, 1), datetime(2030, 7, 4)
    )

    forbidden = client.patch(
        f"/api/reservations/{reservation_id}/cancel", headers=auth_headers(stranger_id)
    )
    assert forbidden.status_code == 403

    response = client.patch(
        f"/api/reservations/{reservation_id}/cancel",
        json={"reason": "Maintenance"},
        headers=auth_headers(owner_id),
    )
    assert response.status_code == 200
    assert response.get_json()["status"] == "CANCELLED"

    with app.app_context():
        note = Notification.query.filter_by(user_id=customer_id).one()
    assert "Reason: Maintenance" in note.message
    assert "Please contact support" in note.message
    assert note.message.endswith("Contact: +233201111111")


def test_customer_cancels_without_body(
    client: FlaskClient, booking_setup, make_reservation, auth_headers
):
    _, customer_id, listing_id = booking_setup
    reservation_id = make_reservation(
        listing_id, customer_id, datetime(2030, 7, 1), datetime(2030, 7, 4)
    )

    response = client.patch(
        f"/api/reservations/{reservation_id}/cancel", headers=auth_headers(customer_id)
    )

    assert response.status_code == 200


def test_get_reservation_caches_risk_scores(
    client: FlaskClient, app, booking_setup, make_reservation, auth_headers
):
    owner_id, customer_id, listing_id = booking_setup
    reservation_id = make_reservation(
        listing_id,
        customer_id,
        datetime(2030, 7, 1),
        datetime(2030, 7, 2),
        created_at=datetime(2030, 6, 30, 15),
    )

    response = client.get(
        f"/api/reservations/{reservation_id}", headers=auth_headers(owner_id)
    )

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["cancellation_risk"] == pytest.approx(0.4)
    assert payload["overbooking_risk"] == 0.0
    assert 0.0 <= payload["fraud_risk"] <= 1.0

    with app.app_context():
        stored = db.session.get(Reservation, reservation_id)
        assert stored.cancellation_risk == pytest.approx(0.4)


def test_reservation_lists(
    client: FlaskClient, booking_setup, make_reservation, auth_headers
):
    owner_id, customer_id, listing_id = booking_setup
    make_reservation(listing_id, customer_id, datetime(2030, 7, 1), datetime(2030, 7, 4))

    incoming = client.get("/api/reservations", headers=auth_headers(owner_id)).get_json()
    mine = client.get("/api/reservations/mine", headers=auth_headers(customer_id)).get_json()

    assert len(incoming) == 1
    assert incoming[0]["listing"]["title"] == "Lagoon villa"
    assert len(mine) == 1
    assert client.get("/api/reservations/mine", headers=auth_headers(owner_id)).get_json() == []


def test_only_customer_deletes_reservation(
    client: FlaskClient, app, booking_setup, make_reservation, auth_headers
):
    owner_id, customer_id, listing_id = booking_setup
    reservation_id = make_reservation(
        listing_id, customer_id, datetime(2030, 7, 1), datetime(2030, 7, 4)
    )

    assert (
        client.delete(
            f"/api/reservations/{reservation_id}", headers=auth_headers(owner_id)
        ).status_code
        == 403
    )
    assert (
        client.delete(
            f"/api/reservations/{reservation_id}", headers=auth_headers(customer_id)
        ).status_code
        == 200
    )
    with app.app_context():
        assert db.session.get(Reservation, reservation_id) is None
