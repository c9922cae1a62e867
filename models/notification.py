"""Notification model definition."""

from datetime import datetime

from . import db


NOTIFICATION_TYPES = ("BOOKING", "SYSTEM", "MESSAGE")


class Notification(db.Model):
    """An in-app message addressed to a user."""

    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    message = db.Column(db.Text, nullable=False)
    type = db.Column(
        db.Enum(*NOTIFICATION_TYPES, name="notification_type_enum"),
        nullable=False,
        default="SYSTEM",
    )
    read = db.Column(db.Boolean, nullable=False, default=False)
    admin_only = db.Column(db.Boolean, nullable=False, default=False)
    email = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(32), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "message": self.message,
            "type": self.type,
            "read": self.read,
            "admin_only": self.admin_only,
            "email": self.email,
            "contact_phone": self.contact_phone,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
