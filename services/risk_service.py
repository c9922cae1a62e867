"""Compute booking scores from repository data and store them on the entity.

Nothing here commits; callers own the unit of work.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from models import Listing, Reservation, User
from repositories import AbstractRepository

from . import risk_scoring

COMPARABLE_WINDOW = timedelta(days=30)
LIVE_STATUSES = ("PENDING", "CONFIRMED")


def score_cancellation(repository: AbstractRepository, reservation: Reservation) -> float:
    cancellations = repository.count_reservations(reservation.user_id, status="CANCELLED")
    score = risk_scoring.cancellation_risk(
        reservation.start_date,
        reservation.end_date,
        reservation.created_at,
        cancellations,
    )
    reservation.cancellation_risk = score
    return score


def score_fraud(
    repository: AbstractRepository,
    reservation: Reservation,
    now: datetime | None = None,
) -> float:
    user = reservation.user or repository.get_user(reservation.user_id)
    cancellations = repository.count_reservations(reservation.user_id, status="CANCELLED")
    score = risk_scoring.fraud_risk(
        reservation.created_at,
        user.created_at,
        cancellations,
        now or datetime.utcnow(),
    )
    reservation.fraud_risk = score
    return score


def score_overbooking(repository: AbstractRepository, reservation: Reservation) -> float:
    overlapping = repository.find_overlapping_reservations(
        reservation.listing_id,
        reservation.start_date,
        reservation.end_date,
        exclude_id=reservation.id,
        statuses=LIVE_STATUSES,
    )
    score = risk_scoring.overbooking_risk(
        reservation.start_date,
        reservation.end_date,
        [(other.start_date, other.end_date) for other in overlapping],
    )
    reservation.overbooking_risk = score
    return score


def fill_missing_risks(repository: AbstractRepository, reservation: Reservation) -> bool:
    """Compute any risk field that has not been cached yet.

    Returns True when something was computed and needs to be persisted.
    """

    changed = False
    if reservation.cancellation_risk is None:
        score_cancellation(repository, reservation)
        changed = True
    if reservation.fraud_risk is None:
        score_fraud(repository, reservation)
        changed = True
    if reservation.overbooking_risk is None:
        score_overbooking(repository, reservation)
        changed = True
    return changed


def score_trust(repository: AbstractRepository, user: User) -> float:
    total = repository.count_reservations(user.id)
    cancelled = repository.count_reservations(user.id, status="CANCELLED")
    ratings = repository.ratings_for_user_reservations(user.id)
    score = risk_scoring.trust_score(total, cancelled, ratings)
    user.trust_score = score
    return score


def suggest_price(
    repository: AbstractRepository,
    listing: Listing,
    now: datetime | None = None,
) -> int:
    since = (now or datetime.utcnow()) - COMPARABLE_WINDOW
    prices = repository.comparable_booking_prices(listing.category, listing.city, since)
    suggested = risk_scoring.dynamic_price(listing.price, prices, listing.views)
    listing.suggested_price = suggested
    return suggested


def forecast_occupancy(
    repository: AbstractRepository,
    listing_id: int,
    now: datetime | None = None,
) -> list[dict]:
    now = now or datetime.utcnow()
    past = repository.past_reservations(listing_id, now, statuses=LIVE_STATUSES)
    return risk_scoring.occupancy_forecast(
        [(item.start_date, item.end_date) for item in past], now.date()
    )


def recommend_listings(repository: AbstractRepository, user_id: int) -> list[Listing]:
    own_ids = set(repository.booked_listing_ids([user_id]))
    neighbours = repository.bookers_of(own_ids, exclude_user_id=user_id)
    ranked = risk_scoring.recommend_listing_ids(
        own_ids, repository.booked_listing_ids(neighbours)
    )
    by_id = {listing.id: listing for listing in repository.get_listings(ranked)}
    return [by_id[listing_id] for listing_id in ranked if listing_id in by_id]
