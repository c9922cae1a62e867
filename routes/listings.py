"""Listings blueprint with search, CRUD and admin moderation."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required, verify_jwt_in_request
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from models import Listing, User
from models.listing import LISTING_CATEGORIES
from repositories import get_repository
from services.access_policy import ROLE_ADMIN, ROLE_PROVIDER
from services.notifications import get_notifier
from utils.identity import current_user, require_admin, require_role, require_user
from utils.request_validation import parse_int, parse_json_request

listings_bp = Blueprint("listings", __name__)

REQUIRED_FIELDS = ("title", "description", "category", "price", "address")
EDITABLE_FIELDS = (
    "title",
    "description",
    "image_src",
    "category",
    "address",
    "contact_phone",
    "email",
)
MODERATION_STATUSES = ("APPROVED", "REJECTED")


def _optional_user() -> User | None:
    verify_jwt_in_request(optional=True)
    return current_user()


def _can_modify_listing(listing: Listing, user: User | None) -> bool:
    if user is None:
        return False
    return user.role == ROLE_ADMIN or user.id == listing.user_id


def _can_view_listing(listing: Listing, user: User | None) -> bool:
    return listing.status == "APPROVED" or _can_modify_listing(listing, user)


def _get_listing_or_404(listing_id: int) -> Listing:
    listing = get_repository().get_listing(listing_id)
    if listing is None:
        raise NotFound("Listing not found.")
    return listing


def _validate_listing_payload(data: dict, partial: bool = False) -> tuple[list[str], int | None]:
    errors = []

    if not partial:
        for field in REQUIRED_FIELDS:
            if data.get(field) in (None, ""):
                errors.append(f"{field} is required")

    category = data.get("category")
    if category and category not in LISTING_CATEGORIES:
        errors.append("category must be one of {}".format(", ".join(LISTING_CATEGORIES)))

    price = None
    if data.get("price") not in (None, ""):
        try:
            price = parse_int(data.get("price"), "price")
        except BadRequest:
            errors.append("price must be an integer")
        else:
            if price <= 0:
                errors.append("price must be greater than zero")

    return errors, price


@listings_bp.route("", methods=["GET"])
def search_listings():
    """Return approved listings with optional filters."""

    category = request.args.get("category")
    if category and category not in LISTING_CATEGORIES:
        raise BadRequest("Invalid category.")

    listings = get_repository().search_listings(
        status="APPROVED",
        category=category,
        term=request.args.get("q"),
        city=request.args.get("city"),
    )
    payload = [listing.to_dict() for listing in listings]
    return jsonify({"results": payload, "count": len(payload)})


@listings_bp.route("/mine", methods=["GET"])
@jwt_required()
def my_listings():
    user = require_user()
    listings = get_repository().search_listings(owner_id=user.id)
    payload = [listing.to_dict(include_contact=True) for listing in listings]
    return jsonify({"results": payload, "count": len(payload)})


@listings_bp.route("", methods=["POST"])
@jwt_required()
def create_listing():
    """Create a listing pending admin review. Verified providers and admins only."""

    user = require_role(ROLE_PROVIDER, ROLE_ADMIN)
    if user.role == ROLE_PROVIDER and not user.verified:
        raise Forbidden("Business verification is required before listing services.")

    data = parse_json_request(request)
    errors, price = _validate_listing_payload(data)
    if errors:
        raise BadRequest("; ".join(errors))

    listing = Listing(
        user_id=user.id,
        title=str(data["title"]).strip(),
        description=str(data["description"]).strip(),
        image_src=data.get("image_src"),
        category=data["category"],
        price=price,
        address=str(data["address"]).strip(),
        contact_phone=data.get("contact_phone") or user.contact_phone,
        email=data.get("email") or user.email,
        status="PENDING",
    )
    repository = get_repository()
    repository.add(listing)
    repository.commit()
    current_app.logger.info("Listing %s submitted by user %s", listing.id, user.id)

    notifier = get_notifier()
    notifier.try_send(
        user.id,
        f'Your listing "{listing.title}" has been submitted for admin review.',
    )
    for admin in repository.list_users(role=ROLE_ADMIN):
        if admin.id == user.id:
            continue
        notifier.try_send(
            admin.id,
            f'New listing "{listing.title}" submitted by {user.name or "a user"}.',
        )

    return jsonify(listing.to_dict(include_contact=True)), 201


@listings_bp.route("/<int:listing_id>", methods=["GET"])
def get_listing(listing_id: int):
    listing = _get_listing_or_404(listing_id)
    user = _optional_user()

    if not _can_view_listing(listing, user):
        raise NotFound("Listing not found.")

    if user is None or user.id != listing.user_id:
        listing.views = (listing.views or 0) + 1
        get_repository().commit()

    return jsonify(listing.to_dict(include_contact=user is not None))


@listings_bp.route("/<int:listing_id>", methods=["PATCH"])
@jwt_required()
def update_listing(listing_id: int):
    listing = _get_listing_or_404(listing_id)
    user = require_user()
    if not _can_modify_listing(listing, user):
        raise Forbidden("You do not have permission to update this listing.")

    data = parse_json_request(request)
    errors, price = _validate_listing_payload(data, partial=True)
    if errors:
        raise BadRequest("; ".join(errors))

    for field in EDITABLE_FIELDS:
        if field in data and data[field] is not None:
            setattr(listing, field, data[field])
    if price is not None:
        listing.price = price

    # Owner edits go back through moderation.
    if user.role != ROLE_ADMIN:
        listing.status = "PENDING"

    get_repository().commit()
    return jsonify(listing.to_dict(include_contact=True))


@listings_bp.route("/<int:listing_id>", methods=["DELETE"])
@jwt_required()
def delete_listing(listing_id: int):
    listing = _get_listing_or_404(listing_id)
    user = require_user()
    if not _can_modify_listing(listing, user):
        raise Forbidden("Unauthorized to delete this listing.")

    repository = get_repository()
    with repository.transaction():
        repository.delete_listing_links(listing.id)
        repository.delete(listing)
    current_app.logger.info("Listing %s deleted by user %s", listing_id, user.id)

    return jsonify({"message": "Listing deleted successfully."})


@listings_bp.route("/<int:listing_id>/status", methods=["PATCH"])
@jwt_required()
def moderate_listing(listing_id: int):
    """Approve or reject a listing. Admins only."""

    admin = require_admin()
    listing = _get_listing_or_404(listing_id)

    data = parse_json_request(request, required_keys=("status",))
    status = str(data["status"]).strip().upper()
    if status not in MODERATION_STATUSES:
        raise BadRequest("Invalid status.")

    listing.status = status
    get_repository().commit()
    current_app.logger.info(
        "Listing %s marked %s by admin %s", listing.id, status, admin.id
    )

    if status == "APPROVED":
        owner = listing.owner
        get_notifier().try_send(
            listing.user_id,
            f'Your listing "{listing.title}" has been approved.',
            "SYSTEM",
            {
                "email": owner.email if owner else None,
                "contact_phone": owner.contact_phone if owner else None,
            },
        )

    return jsonify(listing.to_dict(include_contact=True))


@listings_bp.route("/<int:listing_id>/reviews", methods=["GET"])
def listing_reviews(listing_id: int):
    listing = _get_listing_or_404(listing_id)
    reviews = get_repository().reviews_for_listing(listing.id)
    return jsonify([review.to_dict() for review in reviews])
