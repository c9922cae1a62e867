"""Database initialization and model exports."""

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .listing import Listing  # noqa: E402,F401
from .reservation import Reservation  # noqa: E402,F401
from .business_verification import BusinessVerification  # noqa: E402,F401
from .notification import Notification  # noqa: E402,F401
from .review import Review  # noqa: E402,F401
from .favourite import Favourite  # noqa: E402,F401

__all__ = [
    "db",
    "User",
    "Listing",
    "Reservation",
    "BusinessVerification",
    "Notification",
    "Review",
    "Favourite",
]
