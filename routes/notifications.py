"""Notifications blueprint."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from models import Notification, User
from models.notification import NOTIFICATION_TYPES
from repositories import get_repository
from services.access_policy import ROLE_ADMIN
from services.notifications import NotificationError, get_notifier
from utils.identity import require_admin, require_user
from utils.request_validation import parse_bool, parse_int, parse_json_request

notifications_bp = Blueprint("notifications", __name__)


def _owned_notification_or_404(notification_id: int, user: User) -> Notification:
    notification = get_repository().get_notification(notification_id)
    if notification is None:
        raise NotFound("Notification not found.")
    if notification.user_id != user.id and user.role != ROLE_ADMIN:
        raise Forbidden("Not authorized to access this notification.")
    return notification


@notifications_bp.route("", methods=["GET"])
@jwt_required()
def list_notifications():
    """Admins see every notification; other users see their own."""

    user = require_user()
    scope = None if user.role == ROLE_ADMIN else user.id
    notifications = get_repository().notifications_for(scope)
    return jsonify([item.to_dict() for item in notifications])


@notifications_bp.route("", methods=["POST"])
@jwt_required()
def create_notification():
    require_admin()
    payload = parse_json_request(request, required_keys=("user_id", "message", "type"))

    notification_type = str(payload["type"]).upper()
    if notification_type not in NOTIFICATION_TYPES:
        raise BadRequest("type must be one of {}.".format(", ".join(NOTIFICATION_TYPES)))

    user_id = parse_int(payload["user_id"], "user_id")
    if get_repository().get_user(user_id) is None:
        raise NotFound("User not found.")

    try:
        notification = get_notifier().send(
            user_id,
            str(payload["message"]),
            notification_type,
            {
                "email": payload.get("email"),
                "contact_phone": payload.get("contact_phone"),
                "admin_only": bool(parse_bool(payload.get("admin_only"))),
            },
        )
    except NotificationError as exc:
        raise BadRequest(str(exc)) from exc

    return jsonify(notification.to_dict()), 201


@notifications_bp.route("/unread-count", methods=["GET"])
@jwt_required()
def unread_count():
    user = require_user()
    return jsonify({"count": get_repository().count_unread_notifications(user.id)})


@notifications_bp.route("/mark-all-read", methods=["POST"])
@jwt_required()
def mark_all_read():
    user = require_user()
    repository = get_repository()
    updated = repository.mark_all_notifications_read(user.id)
    repository.commit()
    return jsonify({"updated": updated})


@notifications_bp.route("/<int:notification_id>/read", methods=["POST"])
@jwt_required()
def mark_read(notification_id: int):
    user = require_user()
    notification = _owned_notification_or_404(notification_id, user)
    notification.read = True
    get_repository().commit()
    return jsonify(notification.to_dict())


@notifications_bp.route("/<int:notification_id>", methods=["DELETE"])
@jwt_required()
def delete_notification(notification_id: int):
    user = require_user()
    notification = _owned_notification_or_404(notification_id, user)
    repository = get_repository()
    repository.delete(notification)
    repository.commit()
    return jsonify({"message": "Notification deleted."})
