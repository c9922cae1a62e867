"""Reviews and favourites blueprints."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import BadRequest, Conflict, Forbidden, NotFound

from models import Favourite, Listing, Review
from repositories import get_repository
from utils.identity import require_user
from utils.request_validation import parse_int, parse_json_request

reviews_bp = Blueprint("reviews", __name__)
favourites_bp = Blueprint("favourites", __name__)


def _get_listing_or_404(listing_id: int) -> Listing:
    listing = get_repository().get_listing(listing_id)
    if listing is None:
        raise NotFound("Listing not found.")
    return listing


@reviews_bp.route("", methods=["POST"])
@jwt_required()
def create_review():
    """Rate a listing from 1 to 5. One review per user and listing."""

    user = require_user()
    payload = parse_json_request(request, required_keys=("listing_id", "rating"))

    listing = _get_listing_or_404(parse_int(payload["listing_id"], "listing_id"))
    rating = parse_int(payload["rating"], "rating")
    if not 1 <= rating <= 5:
        raise BadRequest("rating must be between 1 and 5.")

    repository = get_repository()
    reservation_id = None
    if payload.get("reservation_id") not in (None, ""):
        reservation = repository.get_reservation(
            parse_int(payload["reservation_id"], "reservation_id")
        )
        if reservation is None:
            raise NotFound("Reservation not found.")
        if reservation.user_id != user.id or reservation.listing_id != listing.id:
            raise Forbidden("You can only review your own reservations of this listing.")
        reservation_id = reservation.id

    if repository.get_review(user.id, listing.id) is not None:
        raise Conflict("You have already reviewed this listing.")

    review = Review(
        user_id=user.id,
        listing_id=listing.id,
        reservation_id=reservation_id,
        rating=rating,
        comment=payload.get("comment"),
    )
    repository.add(review)
    repository.commit()
    return jsonify(review.to_dict()), 201


@favourites_bp.route("", methods=["GET"])
@jwt_required()
def list_favourites():
    user = require_user()
    favourites = get_repository().favourites_for(user.id)
    return jsonify([favourite.listing.to_dict() for favourite in favourites])


@favourites_bp.route("/<int:listing_id>", methods=["POST"])
@jwt_required()
def add_favourite(listing_id: int):
    user = require_user()
    listing = _get_listing_or_404(listing_id)

    repository = get_repository()
    if repository.get_favourite(user.id, listing.id) is None:
        repository.add(Favourite(user_id=user.id, listing_id=listing.id))
        repository.commit()

    ids = [favourite.listing_id for favourite in repository.favourites_for(user.id)]
    return jsonify({"favourite_ids": ids})


@favourites_bp.route("/<int:listing_id>", methods=["DELETE"])
@jwt_required()
def remove_favourite(listing_id: int):
    user = require_user()
    repository = get_repository()
    favourite = repository.get_favourite(user.id, listing_id)
    if favourite is not None:
        repository.delete(favourite)
        repository.commit()

    ids = [item.listing_id for item in repository.favourites_for(user.id)]
    return jsonify({"favourite_ids": ids})
