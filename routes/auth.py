"""Authentication blueprint providing register, login and password reset endpoints."""

from __future__ import annotations

import secrets
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, jwt_required
from werkzeug.exceptions import BadRequest, Conflict, Unauthorized

from models import User
from repositories import get_repository
from services.mailer import get_email_sender, password_reset_email
from utils.identity import require_user
from utils.request_validation import parse_json_request

auth_bp = Blueprint("auth", __name__)

MIN_PASSWORD_LENGTH = 6


def _normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def issue_token(user: User) -> str:
    """Create an access token carrying the user's role and verification claims."""
    return create_access_token(identity=str(user.id), additional_claims=user.token_claims())


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a new user. The role is chosen later through /api/role."""
    payload = parse_json_request(request)
    email = _normalize_email(payload.get("email"))
    password = (payload.get("password") or "").strip()

    if not email or not password:
        raise BadRequest("Email and password are required.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    repository = get_repository()
    if repository.get_user_by_email(email) is not None:
        raise Conflict("A user with that email already exists.")

    user = User(
        email=email,
        name=(payload.get("name") or "").strip() or None,
        contact_phone=(payload.get("contact_phone") or "").strip() or None,
    )
    user.set_password(password)

    repository.add(user)
    repository.commit()
    current_app.logger.info("Registered user %s", user.id)

    return (
        jsonify(
            {
                "message": "User registered successfully.",
                "user": user.to_dict(),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return a JWT access token."""
    payload = parse_json_request(request)
    email = _normalize_email(payload.get("email"))
    password = (payload.get("password") or "").strip()

    if not email or not password:
        raise BadRequest("Email and password are required.")

    user = get_repository().get_user_by_email(email)
    if user is None or not user.check_password(password):
        raise Unauthorized("Invalid email or password.")

    return (
        jsonify({"access_token": issue_token(user), "user": user.to_dict()}),
        HTTPStatus.OK,
    )


@auth_bp.route("/refresh", methods=["POST"])
@jwt_required()
def refresh() -> tuple:
    """Re-issue a token so that claims reflect the latest role and verification."""
    user = require_user()
    return (
        jsonify({"access_token": issue_token(user), "user": user.to_dict()}),
        HTTPStatus.OK,
    )


@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password() -> tuple:
    """Email a one-hour reset link. The response never reveals whether the email exists."""
    payload = parse_json_request(request)
    email = payload.get("email")
    if not email or not isinstance(email, str):
        raise BadRequest("Email is required.")

    response = {"message": "If that email exists, a reset link has been sent."}

    repository = get_repository()
    user = repository.get_user_by_email(email)
    if user is None:
        return jsonify(response), HTTPStatus.OK

    token = secrets.token_hex(32)
    user.issue_reset_token(token, current_app.config.get("PASSWORD_RESET_TTL_MINUTES", 60))
    repository.commit()

    reset_url = f"{current_app.config.get('APP_URL', '').rstrip('/')}/reset-password?token={token}"
    subject, body = password_reset_email(reset_url)
    get_email_sender().send(user.email, subject, body)

    return jsonify(response), HTTPStatus.OK


@auth_bp.route("/reset-password", methods=["POST"])
def reset_password() -> tuple:
    """Set a new password using a token from the reset email."""
    payload = parse_json_request(request)
    token = payload.get("token")
    new_password = (payload.get("new_password") or "").strip()

    if not token or not new_password:
        raise BadRequest("Missing token or new password.")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    repository = get_repository()
    user = repository.get_user_by_reset_token(token)
    if user is None or not user.reset_token_valid():
        raise BadRequest("Invalid or expired token.")

    user.set_password(new_password)
    user.clear_reset_token()
    repository.commit()
    current_app.logger.info("Password reset for user %s", user.id)

    return jsonify({"message": "Password has been reset successfully."}), HTTPStatus.OK
