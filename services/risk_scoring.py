"""Heuristic booking scores.

All functions are pure: they take plain values already fetched from the
repository and return numbers. Risk and trust scores are clamped to [0, 1].
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

SECONDS_PER_DAY = 24 * 60 * 60
ASSUMED_STAY_DAYS = 3
FORECAST_DAYS = 30
TIGHT_GAP_MINUTES = 120
POPULAR_VIEWS_THRESHOLD = 50
RECOMMENDATION_LIMIT = 5


def clamp(score: float) -> float:
    return min(1.0, max(0.0, score))


def _whole_days(delta: timedelta) -> int:
    return int(delta.total_seconds() / SECONDS_PER_DAY)


def _whole_minutes(delta: timedelta) -> int:
    return int(delta.total_seconds() / 60)


def cancellation_risk(
    start_date: datetime,
    end_date: datetime,
    created_at: datetime,
    user_cancellations: int,
) -> float:
    """Likelihood that a reservation will be cancelled."""

    score = 0.0

    lead_time = _whole_days(start_date - created_at)
    if lead_time > 30:
        score += 0.1
    if lead_time < 3:
        score += 0.3

    if user_cancellations > 2:
        score += 0.4
    elif user_cancellations > 0:
        score += 0.2

    if _whole_days(end_date - start_date) <= 2:
        score += 0.1

    return clamp(score)


def fraud_risk(
    reservation_created_at: datetime,
    user_created_at: datetime,
    user_cancellations: int,
    now: datetime,
) -> float:
    """Likelihood that a reservation was placed by a throwaway account."""

    score = 0.0

    account_age = _whole_minutes(now - user_created_at)
    if account_age < 24 * 60:
        score += 0.3

    # 00:00 to 04:59
    if reservation_created_at.hour < 5:
        score += 0.2

    # booked within the most recent tenth of the account's life
    since_booking = _whole_minutes(now - reservation_created_at)
    if account_age > 0 and since_booking / account_age < 0.1:
        score += 0.2

    if user_cancellations > 2:
        score += 0.3

    return clamp(score)


def overbooking_risk(
    start_date: datetime,
    end_date: datetime,
    overlapping: Iterable[tuple[datetime, datetime]],
) -> float:
    """Likelihood that a listing is double-booked around a reservation.

    ``overlapping`` holds the (start, end) ranges of the other live
    reservations whose range touches this one.
    """

    others = list(overlapping)
    if not others:
        return 0.0

    score = 0.4
    for other_start, other_end in others:
        gap_before = _whole_minutes(start_date - other_end)
        gap_after = _whole_minutes(other_start - end_date)
        if 0 <= gap_before < TIGHT_GAP_MINUTES:
            score += 0.3
        if 0 <= gap_after < TIGHT_GAP_MINUTES:
            score += 0.3

    return clamp(score)


def trust_score(total: int, cancelled: int, ratings: Sequence[int]) -> float:
    """Reliability of a customer from cancellations and review ratings."""

    if total <= 0:
        return 0.0

    score = 1.0 - (cancelled / total) * 0.5
    if ratings:
        average = sum(ratings) / len(ratings)
        score += (average - 3) / 4 * 0.4

    return clamp(score)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def dynamic_price(base_price: int, comparable_prices: Sequence[int], views: int) -> int:
    """Price suggestion from recent bookings of similar listings."""

    if comparable_prices:
        average = sum(comparable_prices) / len(comparable_prices)
    else:
        average = base_price
    boost = 1.1 if (views or 0) > POPULAR_VIEWS_THRESHOLD else 1.0
    return _round_half_up(average * boost)


def weekday_occupancy(stays: Iterable[tuple[datetime, datetime]]) -> list[float]:
    """Occupancy probability per weekday (Monday first) from past stays."""

    counts = [0] * 7
    total_stays = 0
    for start, end in stays:
        total_stays += 1
        day = start.date()
        last = end.date()
        while day <= last:
            counts[day.weekday()] += 1
            day += timedelta(days=1)

    assumed_days = total_stays * ASSUMED_STAY_DAYS
    if not assumed_days:
        return [0.0] * 7
    return [clamp(count / assumed_days) for count in counts]


def occupancy_forecast(
    stays: Iterable[tuple[datetime, datetime]],
    today: date,
    days: int = FORECAST_DAYS,
) -> list[dict]:
    """Project weekday occupancy over the next ``days`` days."""

    probabilities = weekday_occupancy(stays)
    forecast = []
    for offset in range(days):
        day = today + timedelta(days=offset)
        forecast.append(
            {
                "date": day.isoformat(),
                "occupied_probability": round(probabilities[day.weekday()], 2),
            }
        )
    return forecast


def price_multiplier(probability: float) -> float:
    if probability > 0.8:
        return 1.2
    if probability > 0.6:
        return 1.1
    if probability < 0.3:
        return 0.9
    return 1.0


def price_suggestions(base_price: int, forecast: Sequence[dict]) -> list[dict]:
    """Per-day price suggestions following forecast occupancy."""

    suggestions = []
    for entry in forecast:
        probability = entry["occupied_probability"]
        suggestions.append(
            {
                "date": entry["date"],
                "base_price": base_price,
                "suggested_price": round(base_price * price_multiplier(probability), 2),
                "occupancy_probability": probability,
            }
        )
    return suggestions


def recommend_listing_ids(
    own_listing_ids: Iterable[int],
    neighbour_bookings: Iterable[int],
    limit: int = RECOMMENDATION_LIMIT,
) -> list[int]:
    """Listings most often booked by similar users that the user has not booked."""

    own = set(own_listing_ids)
    frequency = Counter(
        listing_id for listing_id in neighbour_bookings if listing_id not in own
    )
    return [listing_id for listing_id, _ in frequency.most_common(limit)]
