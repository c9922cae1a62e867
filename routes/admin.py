"""Admin blueprint for provider verification and user management."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import BadRequest, NotFound

from models import User
from models.user import USER_ROLES
from repositories import get_repository
from services.access_policy import ROLE_PROVIDER
from services.notifications import get_notifier
from utils.identity import require_admin
from utils.request_validation import parse_bool, parse_json_request

admin_bp = Blueprint("admin", __name__)

VERIFICATION_FLAGS = ("verified", "is_face_verified", "is_otp_verified")


def _get_user_or_404(user_id: int) -> User:
    user = get_repository().get_user(user_id)
    if user is None:
        raise NotFound("User not found.")
    return user


def _serialize_provider(user: User) -> dict:
    record = user.business_verification
    approved = bool((record and record.verified) or user.verified)
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.contact_phone,
        "status": "APPROVED" if approved else "PENDING",
        "submitted_at": record.submitted_at.isoformat() if record and record.submitted_at else None,
        "business": record.to_dict() if record else None,
    }


@admin_bp.route("/business-verifications", methods=["GET"])
@jwt_required()
def list_business_verifications():
    require_admin()
    records = get_repository().list_business_verifications()
    return jsonify([record.to_dict() for record in records])


@admin_bp.route("/business-verifications/<int:user_id>", methods=["GET"])
@jwt_required()
def get_business_verification(user_id: int):
    require_admin()
    record = get_repository().get_business_verification(user_id)
    if record is None:
        raise NotFound("Business verification record not found for this user.")
    return jsonify(record.to_dict())


@admin_bp.route("/providers", methods=["GET"])
@jwt_required()
def list_providers():
    require_admin()
    providers = get_repository().list_users(role=ROLE_PROVIDER)
    return jsonify([_serialize_provider(user) for user in providers])


@admin_bp.route("/providers/<int:user_id>/status", methods=["PATCH"])
@jwt_required()
def set_provider_business_status(user_id: int):
    """Approve or reject a provider's business.

    The provider's flags and the verification record change together or not at
    all; the provider is notified afterwards on a best-effort basis.
    """

    admin = require_admin()
    payload = parse_json_request(request)
    business_verified = payload.get("businessVerified", payload.get("business_verified"))
    if not isinstance(business_verified, bool):
        raise BadRequest("Invalid 'businessVerified' value. Must be boolean.")
    notes = payload.get("notes") or None

    repository = get_repository()
    record = repository.get_business_verification(user_id)
    if record is None:
        raise NotFound("Business verification record not found for this user.")
    provider = _get_user_or_404(user_id)

    with repository.transaction():
        provider.business_verified = business_verified
        provider.verified = business_verified
        record.verified = business_verified
        record.verification_notes = notes or (
            "Business approved by admin." if business_verified else "Business rejected by admin."
        )

    current_app.logger.info(
        "Business of user %s %s by admin %s",
        provider.id,
        "approved" if business_verified else "rejected",
        admin.id,
    )

    if business_verified:
        message = "Your business application has been approved. You can now list your services!"
    else:
        message = "Your business application was rejected."
        if notes:
            message += f" Reason: {notes}"
    get_notifier().try_send(provider.id, message, "SYSTEM", {"email": provider.email})

    return jsonify(
        {
            "success": True,
            "business_verified": provider.business_verified,
            "verification": record.to_dict(),
        }
    )


@admin_bp.route("/users", methods=["GET"])
@jwt_required()
def list_users():
    require_admin()
    role = request.args.get("role")
    if role is not None:
        role = role.upper()
        if role not in USER_ROLES:
            raise BadRequest("Invalid role.")
    users = get_repository().list_users(role=role)
    return jsonify([user.to_dict(include_private=True) for user in users])


@admin_bp.route("/users/<int:user_id>", methods=["GET"])
@jwt_required()
def get_user(user_id: int):
    require_admin()
    return jsonify(_get_user_or_404(user_id).to_dict(include_private=True))


@admin_bp.route("/users/<int:user_id>/verification", methods=["PATCH"])
@jwt_required()
def set_user_verification(user_id: int):
    """Set identity verification flags after an external check."""

    admin = require_admin()
    user = _get_user_or_404(user_id)
    payload = parse_json_request(request)

    updates = {}
    for flag in VERIFICATION_FLAGS:
        if flag not in payload:
            continue
        value = parse_bool(payload.get(flag))
        if value is None:
            raise BadRequest(f"{flag} must be boolean")
        updates[flag] = value
    if not updates:
        raise BadRequest(
            "Provide at least one of: {}.".format(", ".join(VERIFICATION_FLAGS))
        )

    for flag, value in updates.items():
        setattr(user, flag, value)
    get_repository().commit()
    current_app.logger.info(
        "Verification flags of user %s set by admin %s: %s", user.id, admin.id, updates
    )

    return jsonify(user.to_dict(include_private=True))

