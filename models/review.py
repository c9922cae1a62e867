"""Review model definition."""

from datetime import datetime

from . import db


class Review(db.Model):
    """A customer's rating of a listing."""

    __tablename__ = "reviews"
    __table_args__ = (
        db.UniqueConstraint("user_id", "listing_id", name="uq_reviews_user_listing"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    listing_id = db.Column(
        db.Integer, db.ForeignKey("listings.id"), nullable=False, index=True
    )
    reservation_id = db.Column(
        db.Integer, db.ForeignKey("reservations.id"), nullable=True
    )
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "listing_id": self.listing_id,
            "reservation_id": self.reservation_id,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
