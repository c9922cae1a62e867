"""Helpers resolving the caller from the JWT on the current request."""

from __future__ import annotations

from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from werkzeug.exceptions import Forbidden, NotFound

from models import User
from repositories import get_repository
from services.access_policy import ANONYMOUS, KNOWN_ROLES, ROLE_ADMIN, Principal


def _identity_as_int() -> int | None:
    try:
        identity = get_jwt_identity()
    except RuntimeError:
        return None
    if identity is None:
        return None
    try:
        return int(identity)
    except (TypeError, ValueError):
        return None


def current_principal() -> Principal:
    """Return the caller for policy checks; never raises on a bad token.

    Claims are taken from the token. When the token carries no role the user
    row is consulted instead.
    """

    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return ANONYMOUS

    user_id = _identity_as_int()
    if user_id is None:
        return ANONYMOUS

    claims = get_jwt()
    role = claims.get("role")
    if role in KNOWN_ROLES:
        return Principal(
            user_id=user_id,
            role=role,
            verified=bool(claims.get("verified")),
            is_face_verified=bool(claims.get("is_face_verified")),
            is_otp_verified=bool(claims.get("is_otp_verified")),
        )

    user = get_repository().get_user(user_id)
    if user is None:
        return ANONYMOUS
    return Principal(
        user_id=user.id,
        role=user.role,
        verified=bool(user.verified),
        is_face_verified=bool(user.is_face_verified),
        is_otp_verified=bool(user.is_otp_verified),
    )


def current_user() -> User | None:
    """Return the user behind a verified JWT, if any."""

    user_id = _identity_as_int()
    if user_id is None:
        return None
    return get_repository().get_user(user_id)


def require_user() -> User:
    user = current_user()
    if user is None:
        raise NotFound("User not found.")
    return user


def require_admin() -> User:
    user = require_user()
    if user.role != ROLE_ADMIN:
        raise Forbidden("Admin privileges required.")
    return user


def require_role(*roles: str) -> User:
    user = require_user()
    if user.role not in roles:
        raise Forbidden("Only {} accounts may do this.".format(" or ".join(roles).lower()))
    return user
