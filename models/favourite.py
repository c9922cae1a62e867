"""Favourite model definition."""

from datetime import datetime

from . import db


class Favourite(db.Model):
    """A listing bookmarked by a user."""

    __tablename__ = "favourites"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    listing_id = db.Column(db.Integer, db.ForeignKey("listings.id"), primary_key=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    listing = db.relationship("Listing")
