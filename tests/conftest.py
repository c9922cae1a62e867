"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import Listing, Reservation, User, db  # noqa: E402
from routes.auth import issue_token  # noqa: E402
from services.mailer import EmailSender  # noqa: E402

DEFAULT_PASSWORD = "Passw0rd!"


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    RATE_LIMIT = "1000 per minute"
    EMAIL_HOST = None
    APP_URL = "https://bookloop.test"


class RecordingEmailSender(EmailSender):
    """Keeps sent emails in memory."""

    def __init__(self):
        self.sent: list[dict] = []

    def send(self, to: str, subject: str, body: str) -> None:
        self.sent.append({"to": to, "subject": subject, "body": body})


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def outbox(app: Flask) -> list[dict]:
    """Capture outgoing email instead of logging it."""

    sender = RecordingEmailSender()
    app.extensions["email_sender"] = sender
    return sender.sent


@pytest.fixture()
def make_user(app: Flask):
    """Persist a user and return its id."""

    def _make_user(
        email: str,
        role: str | None = None,
        *,
        password: str = DEFAULT_PASSWORD,
        verified: bool = False,
        name: str | None = None,
        contact_phone: str | None = None,
        created_at: datetime | None = None,
    ) -> int:
        with app.app_context():
            user = User(
                email=email,
                role=role,
                verified=verified,
                business_verified=verified and role == "PROVIDER",
                name=name,
                contact_phone=contact_phone,
            )
            if created_at is not None:
                user.created_at = created_at
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make_user


@pytest.fixture()
def make_listing(app: Flask):
    """Persist a listing and return its id."""

    def _make_listing(
        owner_id: int,
        *,
        title: str = "Sea view apartment",
        category: str = "apartments",
        price: int = 100,
        address: str = "12 Beach Road, Accra, Ghana",
        status: str = "APPROVED",
        views: int = 0,
    ) -> int:
        with app.app_context():
            listing = Listing(
                user_id=owner_id,
                title=title,
                description="A quiet place to stay.",
                category=category,
                price=price,
                address=address,
                status=status,
                views=views,
            )
            db.session.add(listing)
            db.session.commit()
            return listing.id

    return _make_listing


@pytest.fixture()
def make_reservation(app: Flask):
    """Persist a reservation and return its id."""

    def _make_reservation(
        listing_id: int,
        user_id: int,
        start_date: datetime,
        end_date: datetime,
        *,
        status: str = "PENDING",
        total_price: int = 300,
        created_at: datetime | None = None,
    ) -> int:
        with app.app_context():
            reservation = Reservation(
                listing_id=listing_id,
                user_id=user_id,
                start_date=start_date,
                end_date=end_date,
                status=status,
                total_price=total_price,
            )
            if created_at is not None:
                reservation.created_at = created_at
            db.session.add(reservation)
            db.session.commit()
            return reservation.id

    return _make_reservation


@pytest.fixture()
def auth_headers(app: Flask):
    """Return an Authorization header for a stored user."""

    def _auth_headers(user_id: int) -> dict:
        with app.app_context():
            user = db.session.get(User, user_id)
            return {"Authorization": f"Bearer {issue_token(user)}"}

    return _auth_headers
