"""Scoring blueprint exposing the booking heuristics."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import verify_jwt_in_request
from werkzeug.exceptions import NotFound

from models import Listing, Reservation, User
from repositories import get_repository
from services import risk_scoring, risk_service
from utils.identity import require_user
from utils.request_validation import query_int

ai_bp = Blueprint("ai", __name__)


@ai_bp.before_request
def _require_token():
    verify_jwt_in_request()


def _reservation_from_query() -> Reservation:
    reservation_id = query_int(request, "reservationId", "reservation_id")
    reservation = get_repository().get_reservation(reservation_id)
    if reservation is None:
        raise NotFound("Reservation not found.")
    return reservation


def _listing_from_query() -> Listing:
    listing_id = query_int(request, "listingId", "listing_id")
    listing = get_repository().get_listing(listing_id)
    if listing is None:
        raise NotFound("Listing not found.")
    return listing


def _user_from_query() -> User:
    user_id = query_int(request, "userId", "user_id")
    user = get_repository().get_user(user_id)
    if user is None:
        raise NotFound("User not found.")
    return user


@ai_bp.route("/cancellation-risk", methods=["GET"])
def cancellation_risk():
    reservation = _reservation_from_query()
    repository = get_repository()
    score = risk_service.score_cancellation(repository, reservation)
    repository.commit()
    return jsonify({"reservation_id": reservation.id, "cancellation_risk": score})


@ai_bp.route("/fraud-score", methods=["GET"])
def fraud_score():
    reservation = _reservation_from_query()
    repository = get_repository()
    score = risk_service.score_fraud(repository, reservation)
    repository.commit()
    return jsonify({"reservation_id": reservation.id, "fraud_risk": score})


@ai_bp.route("/overbooking-risk", methods=["GET"])
def overbooking_risk():
    reservation = _reservation_from_query()
    repository = get_repository()
    score = risk_service.score_overbooking(repository, reservation)
    repository.commit()
    return jsonify({"reservation_id": reservation.id, "overbooking_risk": score})


@ai_bp.route("/trust-score", methods=["GET"])
def trust_score():
    user = _user_from_query()
    repository = get_repository()
    score = risk_service.score_trust(repository, user)
    repository.commit()
    return jsonify({"user_id": user.id, "trust_score": score})


@ai_bp.route("/dynamic-price", methods=["GET"])
def dynamic_price():
    listing = _listing_from_query()
    repository = get_repository()
    suggested = risk_service.suggest_price(repository, listing)
    repository.commit()
    return jsonify({"listing_id": listing.id, "suggested_price": suggested})


@ai_bp.route("/occupancy", methods=["GET"])
def occupancy():
    listing_id = query_int(request, "listingId", "listing_id")
    return jsonify(risk_service.forecast_occupancy(get_repository(), listing_id))


@ai_bp.route("/pricing", methods=["GET"])
def pricing():
    listing = _listing_from_query()
    forecast = risk_service.forecast_occupancy(get_repository(), listing.id)
    return jsonify(risk_scoring.price_suggestions(listing.price, forecast))


@ai_bp.route("/recommendations", methods=["GET"])
def recommendations():
    user = require_user()
    listings = risk_service.recommend_listings(get_repository(), user.id)
    return jsonify([listing.to_dict() for listing in listings])
