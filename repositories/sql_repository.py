"""SQLAlchemy-backed repository implementation."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Iterator, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, or_

from models import (
    BusinessVerification,
    Favourite,
    Listing,
    Notification,
    Reservation,
    Review,
    User,
)

from .abstract_repository import AbstractRepository


class SqlAlchemyRepository(AbstractRepository):
    """Persist entities through the Flask-SQLAlchemy scoped session."""

    def __init__(self, database: SQLAlchemy):
        self.database = database

    @property
    def session(self):
        return self.database.session

    def add(self, entity: object) -> None:
        self.session.add(entity)

    def delete(self, entity: object) -> None:
        self.session.delete(entity)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @contextmanager
    def transaction(self) -> Iterator["SqlAlchemyRepository"]:
        try:
            yield self
            self.commit()
        except Exception:
            self.rollback()
            raise

    # Users

    def get_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        normalized = (email or "").strip().lower()
        return User.query.filter(func.lower(User.email) == normalized).first()

    def get_user_by_reset_token(self, token: str) -> User | None:
        return User.query.filter_by(reset_token=token).first()

    def list_users(self, role: str | None = None) -> list[User]:
        query = User.query
        if role is not None:
            query = query.filter(User.role == role)
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    # Listings

    def get_listing(self, listing_id: int) -> Listing | None:
        return self.session.get(Listing, listing_id)

    def get_listings(self, listing_ids: Iterable[int]) -> list[Listing]:
        ids = list(listing_ids)
        if not ids:
            return []
        return Listing.query.filter(Listing.id.in_(ids)).all()

    def search_listings(
        self,
        *,
        status: str | None = None,
        category: str | None = None,
        term: str | None = None,
        city: str | None = None,
        owner_id: int | None = None,
    ) -> list[Listing]:
        query = Listing.query
        if status is not None:
            query = query.filter(Listing.status == status)
        if category:
            query = query.filter(Listing.category == category)
        if owner_id is not None:
            query = query.filter(Listing.user_id == owner_id)
        if term:
            like = f"%{term.lower()}%"
            query = query.filter(
                or_(
                    func.lower(Listing.title).like(like),
                    func.lower(Listing.description).like(like),
                )
            )
        if city:
            query = query.filter(func.lower(Listing.address).like(f"%{city.lower()}%"))
        return query.order_by(Listing.created_at.desc(), Listing.id.desc()).all()

    # Reservations

    def get_reservation(self, reservation_id: int) -> Reservation | None:
        return self.session.get(Reservation, reservation_id)

    def find_overlapping_reservations(
        self,
        listing_id: int,
        start_date: datetime,
        end_date: datetime,
        *,
        exclude_id: int | None = None,
        statuses: Sequence[str] | None = None,
    ) -> list[Reservation]:
        query = Reservation.query.filter(
            Reservation.listing_id == listing_id,
            Reservation.start_date <= end_date,
            Reservation.end_date >= start_date,
        )
        if exclude_id is not None:
            query = query.filter(Reservation.id != exclude_id)
        if statuses is not None:
            query = query.filter(Reservation.status.in_(list(statuses)))
        return query.order_by(Reservation.start_date.asc()).all()

    def reservations_for_owner(self, owner_id: int) -> list[Reservation]:
        return (
            Reservation.query.join(Listing)
            .filter(Listing.user_id == owner_id)
            .order_by(Reservation.created_at.desc(), Reservation.id.desc())
            .all()
        )

    def reservations_for_user(self, user_id: int) -> list[Reservation]:
        return (
            Reservation.query.filter_by(user_id=user_id)
            .order_by(Reservation.created_at.desc(), Reservation.id.desc())
            .all()
        )

    def count_reservations(self, user_id: int, status: str | None = None) -> int:
        query = Reservation.query.filter_by(user_id=user_id)
        if status is not None:
            query = query.filter(Reservation.status == status)
        return query.count()

    def past_reservations(
        self,
        listing_id: int,
        before: datetime,
        *,
        statuses: Sequence[str] | None = None,
    ) -> list[Reservation]:
        query = Reservation.query.filter(
            Reservation.listing_id == listing_id,
            Reservation.end_date < before,
        )
        if statuses is not None:
            query = query.filter(Reservation.status.in_(list(statuses)))
        return query.all()

    def comparable_booking_prices(
        self, category: str, city: str, since: datetime
    ) -> list[int]:
        rows = (
            self.session.query(Listing.price)
            .join(Reservation, Reservation.listing_id == Listing.id)
            .filter(
                Listing.category == category,
                Listing.address.like(f"%{city}%"),
                Reservation.created_at >= since,
            )
            .all()
        )
        return [price or 0 for (price,) in rows]

    def booked_listing_ids(self, user_ids: Iterable[int]) -> list[int]:
        ids = list(user_ids)
        if not ids:
            return []
        rows = (
            self.session.query(Reservation.listing_id)
            .filter(Reservation.user_id.in_(ids))
            .order_by(Reservation.id.asc())
            .all()
        )
        return [listing_id for (listing_id,) in rows]

    def bookers_of(self, listing_ids: Iterable[int], exclude_user_id: int) -> set[int]:
        ids = list(listing_ids)
        if not ids:
            return set()
        rows = (
            self.session.query(Reservation.user_id)
            .filter(
                Reservation.listing_id.in_(ids),
                Reservation.user_id != exclude_user_id,
            )
            .distinct()
            .all()
        )
        return {user_id for (user_id,) in rows}

    # Reviews

    def get_review(self, user_id: int, listing_id: int) -> Review | None:
        return Review.query.filter_by(user_id=user_id, listing_id=listing_id).first()

    def reviews_for_listing(self, listing_id: int) -> list[Review]:
        return (
            Review.query.filter_by(listing_id=listing_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    def ratings_for_user_reservations(self, user_id: int) -> list[int]:
        rows = (
            self.session.query(Review.rating)
            .join(Reservation, Review.reservation_id == Reservation.id)
            .filter(Reservation.user_id == user_id)
            .all()
        )
        return [rating for (rating,) in rows if rating]

    # Favourites

    def get_favourite(self, user_id: int, listing_id: int) -> Favourite | None:
        return self.session.get(Favourite, (user_id, listing_id))

    def favourites_for(self, user_id: int) -> list[Favourite]:
        return (
            Favourite.query.filter_by(user_id=user_id)
            .order_by(Favourite.created_at.desc())
            .all()
        )

    def delete_listing_links(self, listing_id: int) -> None:
        Favourite.query.filter_by(listing_id=listing_id).delete()
        Review.query.filter_by(listing_id=listing_id).delete()

    # Business verification

    def get_business_verification(self, user_id: int) -> BusinessVerification | None:
        return BusinessVerification.query.filter_by(user_id=user_id).first()

    def list_business_verifications(self) -> list[BusinessVerification]:
        return BusinessVerification.query.order_by(
            BusinessVerification.submitted_at.desc()
        ).all()

    # Notifications

    def get_notification(self, notification_id: int) -> Notification | None:
        return self.session.get(Notification, notification_id)

    def notifications_for(self, user_id: int | None) -> list[Notification]:
        query = Notification.query
        if user_id is not None:
            query = query.filter(
                Notification.user_id == user_id,
                Notification.admin_only.is_(False),
            )
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    def count_unread_notifications(self, user_id: int) -> int:
        return Notification.query.filter_by(user_id=user_id, read=False).count()

    def mark_all_notifications_read(self, user_id: int) -> int:
        return Notification.query.filter_by(user_id=user_id, read=False).update(
            {"read": True}, synchronize_session=False
        )
