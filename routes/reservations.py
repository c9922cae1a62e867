"""Reservations blueprint: booking, approval and cancellation."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import BadRequest, Conflict, Forbidden, NotFound

from models import Reservation, User
from repositories import get_repository
from services.access_policy import ROLE_ADMIN
from services.notifications import get_notifier
from services.risk_service import LIVE_STATUSES, fill_missing_risks
from utils.identity import require_user
from utils.request_validation import (
    parse_datetime,
    parse_int,
    parse_json_request,
    parse_optional_json,
)

reservations_bp = Blueprint("reservations", __name__)

REQUIRED_FIELDS = ("listing_id", "start_date", "end_date", "total_price")


def _get_reservation_or_404(reservation_id: int) -> Reservation:
    reservation = get_repository().get_reservation(reservation_id)
    if reservation is None:
        raise NotFound("Reservation not found.")
    return reservation


def _date_label(value) -> str:
    return value.strftime("%a %b %d %Y")


@reservations_bp.route("", methods=["POST"])
@jwt_required()
def create_reservation():
    """Book a listing for a date range. The booking starts out PENDING."""

    user = require_user()
    data = parse_json_request(request, required_keys=REQUIRED_FIELDS)

    listing_id = parse_int(data["listing_id"], "listing_id")
    total_price = parse_int(data["total_price"], "total_price")
    if total_price <= 0:
        raise BadRequest("total_price must be greater than zero.")
    start_date = parse_datetime(data["start_date"], "start_date")
    end_date = parse_datetime(data["end_date"], "end_date")
    if start_date >= end_date:
        raise BadRequest("Start date must be before end date.")

    repository = get_repository()
    listing = repository.get_listing(listing_id)
    if listing is None:
        raise NotFound("Listing not found.")
    if listing.status != "APPROVED":
        raise BadRequest("Listing is not open for reservations.")

    conflicting = repository.find_overlapping_reservations(
        listing.id, start_date, end_date, statuses=LIVE_STATUSES
    )
    if conflicting:
        raise Conflict("Listing already reserved for selected dates.")

    reservation = Reservation(
        listing_id=listing.id,
        user_id=user.id,
        start_date=start_date,
        end_date=end_date,
        total_price=total_price,
        contact_phone=data.get("contact_phone") or user.contact_phone,
        status="PENDING",
    )
    repository.add(reservation)
    repository.commit()
    current_app.logger.info(
        "Reservation %s created on listing %s by user %s",
        reservation.id,
        listing.id,
        user.id,
    )

    get_notifier().try_send(
        listing.user_id,
        f"You have a new reservation for {listing.title}",
        "BOOKING",
        {"contact_phone": user.contact_phone},
    )

    return jsonify(reservation.to_dict()), 201


@reservations_bp.route("", methods=["GET"])
@jwt_required()
def reservations_on_my_listings():
    """Reservations made on the caller's listings, newest first."""

    user = require_user()
    reservations = get_repository().reservations_for_owner(user.id)
    return jsonify([item.to_dict(include_listing=True) for item in reservations])


@reservations_bp.route("/mine", methods=["GET"])
@jwt_required()
def my_reservations():
    user = require_user()
    reservations = get_repository().reservations_for_user(user.id)
    return jsonify([item.to_dict(include_listing=True) for item in reservations])


@reservations_bp.route("/<int:reservation_id>", methods=["GET"])
@jwt_required()
def get_reservation(reservation_id: int):
    """Return one reservation, computing any risk score not cached yet."""

    user = require_user()
    reservation = _get_reservation_or_404(reservation_id)
    if not _is_party(reservation, user) and user.role != ROLE_ADMIN:
        raise Forbidden("Not authorized to view this reservation.")

    repository = get_repository()
    if fill_missing_risks(repository, reservation):
        repository.commit()

    return jsonify(reservation.to_dict(include_listing=True))


def _is_party(reservation: Reservation, user: User) -> bool:
    return user.id in (reservation.user_id, reservation.listing.user_id)


@reservations_bp.route("/<int:reservation_id>/approve", methods=["PATCH"])
@jwt_required()
def approve_reservation(reservation_id: int):
    """Confirm a reservation. Only the listing owner may approve."""

    user = require_user()
    reservation = _get_reservation_or_404(reservation_id)
    listing = reservation.listing

    if listing.user_id != user.id:
        raise Forbidden("You can only approve reservations on your own listings.")
    if reservation.status == "CANCELLED":
        raise Conflict("Cancelled reservations cannot be approved.")

    repository = get_repository()
    clashes = repository.find_overlapping_reservations(
        listing.id,
        reservation.start_date,
        reservation.end_date,
        exclude_id=reservation.id,
        statuses=("CONFIRMED",),
    )
    if clashes:
        raise Conflict("Another confirmed reservation overlaps these dates.")

    reservation.status = "CONFIRMED"
    repository.commit()
    current_app.logger.info("Reservation %s confirmed by user %s", reservation.id, user.id)

    get_notifier().try_send(
        reservation.user_id,
        f"Your reservation for {listing.title} from {_date_label(reservation.start_date)} "
        f"to {_date_label(reservation.end_date)} has been approved!",
        "BOOKING",
        {"email": user.email, "contact_phone": user.contact_phone},
    )

    return jsonify(reservation.to_dict())


@reservations_bp.route("/<int:reservation_id>/cancel", methods=["PATCH"])
@jwt_required()
def cancel_reservation(reservation_id: int):
    """Cancel a reservation as either the customer or the listing owner."""

    user = require_user()
    reservation = _get_reservation_or_404(reservation_id)
    if not _is_party(reservation, user):
        raise Forbidden("Unauthorized to cancel this reservation.")

    reason = parse_optional_json(request).get("reason")

    reservation.status = "CANCELLED"
    get_repository().commit()
    current_app.logger.info("Reservation %s cancelled by user %s", reservation.id, user.id)

    provider = reservation.listing.owner
    message = f'Your booking for "{reservation.listing.title}" has been cancelled.'
    if reason:
        message += f" Reason: {reason}"
    get_notifier().try_send(
        reservation.user_id,
        message,
        "BOOKING",
        {
            "email": provider.email if provider else None,
            "contact_phone": provider.contact_phone if provider else None,
        },
    )

    return jsonify(reservation.to_dict(include_listing=True))


@reservations_bp.route("/<int:reservation_id>", methods=["DELETE"])
@jwt_required()
def delete_reservation(reservation_id: int):
    """Delete a reservation. Only the customer who made it may delete it."""

    user = require_user()
    reservation = _get_reservation_or_404(reservation_id)
    if reservation.user_id != user.id:
        raise Forbidden("Not authorized to delete this reservation.")

    repository = get_repository()
    repository.delete(reservation)
    repository.commit()
    current_app.logger.info("Reservation %s deleted by user %s", reservation_id, user.id)

    return jsonify({"message": "Reservation deleted successfully."})
