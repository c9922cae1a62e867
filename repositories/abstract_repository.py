"""Persistence abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Iterable, Sequence

from models import (
    BusinessVerification,
    Favourite,
    Listing,
    Notification,
    Reservation,
    Review,
    User,
)


class AbstractRepository(ABC):
    """Interface for the persistence service used by request handlers."""

    # Unit of work

    @abstractmethod
    def add(self, entity: object) -> None:
        """Stage a new or modified entity."""

    @abstractmethod
    def delete(self, entity: object) -> None:
        """Stage an entity for deletion."""

    @abstractmethod
    def commit(self) -> None:
        """Persist staged changes."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard staged changes."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager["AbstractRepository"]:
        """Commit every change made inside the block, or none of them."""

    # Users

    @abstractmethod
    def get_user(self, user_id: int) -> User | None:
        """Return the user with the given primary key."""

    @abstractmethod
    def get_user_by_email(self, email: str) -> User | None:
        """Return the user with the given email, compared case-insensitively."""

    @abstractmethod
    def get_user_by_reset_token(self, token: str) -> User | None:
        """Return the user holding the given password reset token."""

    @abstractmethod
    def list_users(self, role: str | None = None) -> list[User]:
        """Return users, newest first, optionally filtered by role."""

    # Listings

    @abstractmethod
    def get_listing(self, listing_id: int) -> Listing | None:
        """Return the listing with the given primary key."""

    @abstractmethod
    def get_listings(self, listing_ids: Iterable[int]) -> list[Listing]:
        """Return the listings with the given primary keys."""

    @abstractmethod
    def search_listings(
        self,
        *,
        status: str | None = None,
        category: str | None = None,
        term: str | None = None,
        city: str | None = None,
        owner_id: int | None = None,
    ) -> list[Listing]:
        """Return listings matching every given filter, newest first."""

    # Reservations

    @abstractmethod
    def get_reservation(self, reservation_id: int) -> Reservation | None:
        """Return the reservation with the given primary key."""

    @abstractmethod
    def find_overlapping_reservations(
        self,
        listing_id: int,
        start_date: datetime,
        end_date: datetime,
        *,
        exclude_id: int | None = None,
        statuses: Sequence[str] | None = None,
    ) -> list[Reservation]:
        """Return reservations on a listing whose range touches the given one."""

    @abstractmethod
    def reservations_for_owner(self, owner_id: int) -> list[Reservation]:
        """Return reservations made on listings owned by a user."""

    @abstractmethod
    def reservations_for_user(self, user_id: int) -> list[Reservation]:
        """Return reservations made by a user."""

    @abstractmethod
    def count_reservations(self, user_id: int, status: str | None = None) -> int:
        """Count a user's reservations, optionally only those in one status."""

    @abstractmethod
    def past_reservations(
        self,
        listing_id: int,
        before: datetime,
        *,
        statuses: Sequence[str] | None = None,
    ) -> list[Reservation]:
        """Return a listing's reservations that ended before a moment."""

    @abstractmethod
    def comparable_booking_prices(
        self, category: str, city: str, since: datetime
    ) -> list[int]:
        """Return listing prices for bookings in a category and city since a moment."""

    @abstractmethod
    def booked_listing_ids(self, user_ids: Iterable[int]) -> list[int]:
        """Return the listing id of every reservation made by the given users."""

    @abstractmethod
    def bookers_of(self, listing_ids: Iterable[int], exclude_user_id: int) -> set[int]:
        """Return users, other than one, who booked any of the given listings."""

    # Reviews

    @abstractmethod
    def get_review(self, user_id: int, listing_id: int) -> Review | None:
        """Return a user's review of a listing."""

    @abstractmethod
    def reviews_for_listing(self, listing_id: int) -> list[Review]:
        """Return a listing's reviews, newest first."""

    @abstractmethod
    def ratings_for_user_reservations(self, user_id: int) -> list[int]:
        """Return ratings attached to reservations made by a user."""

    # Favourites

    @abstractmethod
    def get_favourite(self, user_id: int, listing_id: int) -> Favourite | None:
        """Return a bookmark if the user saved the listing."""

    @abstractmethod
    def favourites_for(self, user_id: int) -> list[Favourite]:
        """Return a user's bookmarks."""

    @abstractmethod
    def delete_listing_links(self, listing_id: int) -> None:
        """Stage deletion of the favourites and reviews pointing at a listing."""

    # Business verification

    @abstractmethod
    def get_business_verification(self, user_id: int) -> BusinessVerification | None:
        """Return a provider's business verification record."""

    @abstractmethod
    def list_business_verifications(self) -> list[BusinessVerification]:
        """Return every business verification record, newest submission first."""

    # Notifications

    @abstractmethod
    def get_notification(self, notification_id: int) -> Notification | None:
        """Return the notification with the given primary key."""

    @abstractmethod
    def notifications_for(self, user_id: int | None) -> list[Notification]:
        """Return a user's visible notifications, or all of them for None."""

    @abstractmethod
    def count_unread_notifications(self, user_id: int) -> int:
        """Count a user's unread notifications."""

    @abstractmethod
    def mark_all_notifications_read(self, user_id: int) -> int:
        """Mark a user's notifications read and return how many changed."""
