"""Account blueprint: role selection, profile, business details and page access."""

from __future__ import annotations

from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import BadRequest, Forbidden

from models import BusinessVerification
from models.user import SELECTABLE_ROLES
from repositories import get_repository
from routes.auth import issue_token
from services.access_policy import ROLE_PROVIDER, PolicyPaths, evaluate
from services.notifications import get_notifier
from utils.identity import current_principal, require_role, require_user
from utils.request_validation import parse_json_request

account_bp = Blueprint("account", __name__)

BUSINESS_FIELDS = (
    "business_name",
    "business_type",
    "business_address",
    "tin_number",
    "registration_number",
    "tin_certificate_url",
    "incorporation_cert_url",
    "vat_certificate_url",
    "ssnit_cert_url",
)


def _landing_path(role: str) -> str:
    paths = PolicyPaths.from_config(current_app.config)
    return paths.verification if role == ROLE_PROVIDER else paths.home


@account_bp.route("/role", methods=["POST"])
@jwt_required()
def select_role():
    """Set the caller's role. A role can be chosen once and never changed."""

    user = require_user()
    payload = parse_json_request(request)
    role = (payload.get("role") or "").strip().upper()

    if not role:
        raise BadRequest("Role is required.")
    if role not in SELECTABLE_ROLES:
        raise BadRequest("Invalid role. Allowed roles: CUSTOMER, PROVIDER.")

    if user.role and user.role != role:
        raise Forbidden(f"Role change not allowed. Your role is already set to '{user.role}'.")

    if user.role == role:
        message = f"Role already set to {role}."
    else:
        user.role = role
        get_repository().commit()
        current_app.logger.info("User %s selected role %s", user.id, role)
        message = "Role updated successfully."

    return jsonify(
        {
            "success": True,
            "message": message,
            "redirect": _landing_path(role),
            "access_token": issue_token(user),
            "user": user.to_dict(),
        }
    )


@account_bp.route("/user/me", methods=["GET"])
@jwt_required()
def me():
    user = require_user()
    return jsonify(user.to_dict(include_private=True))


@account_bp.route("/user/business-info", methods=["POST"])
@jwt_required()
def submit_business_info():
    """Create or update the caller's business details and queue them for review."""

    user = require_role(ROLE_PROVIDER)
    payload = parse_json_request(request, required_keys=("business_name",))

    repository = get_repository()
    record = repository.get_business_verification(user.id)
    created = record is None
    if created:
        record = BusinessVerification(user_id=user.id)
        repository.add(record)

    for field in BUSINESS_FIELDS:
        if field in payload:
            value = payload.get(field)
            setattr(record, field, value.strip() if isinstance(value, str) else value)

    # Resubmitting sends the business back for review.
    record.verified = False
    record.submitted_at = datetime.utcnow()
    user.verified = False
    user.business_verified = False
    repository.commit()
    current_app.logger.info("Business details submitted by user %s", user.id)

    notifier = get_notifier()
    for admin in repository.list_users(role="ADMIN"):
        notifier.try_send(
            admin.id,
            f'Business "{record.business_name}" submitted for verification by {user.name or user.email}.',
            "SYSTEM",
            {"admin_only": True, "email": user.email},
        )

    return jsonify(record.to_dict()), 201 if created else 200


@account_bp.route("/access", methods=["GET"])
def access_decision():
    """Report how the page access policy treats the caller on a given path."""

    path = request.args.get("path")
    if not path:
        raise BadRequest("Missing path.")
    if not path.startswith("/"):
        raise BadRequest("path must start with '/'.")

    decision = evaluate(
        current_principal(), path, PolicyPaths.from_config(current_app.config)
    )
    return jsonify({"path": path, **decision.to_dict()})
