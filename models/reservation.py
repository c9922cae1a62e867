"""Reservation model definition."""

from datetime import datetime

from . import db


RESERVATION_STATUSES = ("PENDING", "CONFIRMED", "CANCELLED")


class Reservation(db.Model):
    """A booking request against a listing for a date range."""

    __tablename__ = "reservations"

    id = db.Column(db.Integer, primary_key=True)
    listing_id = db.Column(
        db.Integer, db.ForeignKey("listings.id"), nullable=False, index=True
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    status = db.Column(
        db.Enum(*RESERVATION_STATUSES, name="reservation_status_enum"),
        nullable=False,
        default="PENDING",
        server_default=db.text("'PENDING'"),
    )
    total_price = db.Column(db.Integer, nullable=False)
    contact_phone = db.Column(db.String(32), nullable=True)
    cancellation_risk = db.Column(db.Float, nullable=True)
    fraud_risk = db.Column(db.Float, nullable=True)
    overbooking_risk = db.Column(db.Float, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    listing = db.relationship("Listing", back_populates="reservations")
    user = db.relationship(
        "User", backref=db.backref("reservations", lazy="dynamic")
    )

    def __repr__(self) -> str:
        return (
            f"<Reservation id={self.id} listing_id={self.listing_id} status={self.status}>"
        )

    def to_dict(self, include_listing: bool = False) -> dict:
        data = {
            "id": self.id,
            "listing_id": self.listing_id,
            "user_id": self.user_id,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "status": self.status,
            "total_price": self.total_price,
            "contact_phone": self.contact_phone,
            "cancellation_risk": self.cancellation_risk,
            "fraud_risk": self.fraud_risk,
            "overbooking_risk": self.overbooking_risk,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_listing and self.listing is not None:
            data["listing"] = self.listing.to_dict()
        return data
