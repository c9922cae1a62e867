"""Listing model definition."""

from datetime import datetime

from . import db

LISTING_CATEGORIES = (
    "apartments",
    "cars",
    "event_centers",
    "restaurants",
    "services",
)
LISTING_STATUSES = ("PENDING", "APPROVED", "REJECTED")


class Listing(db.Model):
    """A bookable item or service owned by a provider."""

    __tablename__ = "listings"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    image_src = db.Column(db.String(512), nullable=True)
    category = db.Column(
        db.Enum(*LISTING_CATEGORIES, name="listing_category_enum"), nullable=False
    )
    price = db.Column(db.Integer, nullable=False)
    address = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    views = db.Column(db.Integer, nullable=False, default=0)
    suggested_price = db.Column(db.Integer, nullable=True)
    status = db.Column(
        db.Enum(*LISTING_STATUSES, name="listing_status_enum"),
        nullable=False,
        default="PENDING",
        server_default=db.text("'PENDING'"),
    )
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    owner = db.relationship("User", backref=db.backref("listings", lazy="dynamic"))
    reservations = db.relationship(
        "Reservation",
        back_populates="listing",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    @property
    def city(self) -> str:
        """Second comma-separated address component, e.g. "12 Main St, Accra"."""

        parts = [part.strip() for part in (self.address or "").split(",")]
        return parts[1] if len(parts) > 1 else ""

    def to_dict(self, include_contact: bool = False) -> dict:
        """Serialize the listing to a dictionary."""

        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "image_src": self.image_src,
            "category": self.category,
            "price": self.price,
            "address": self.address,
            "contact_phone": self.contact_phone if include_contact else None,
            "email": self.email if include_contact else None,
            "views": self.views,
            "suggested_price": self.suggested_price,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
