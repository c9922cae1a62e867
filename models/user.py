"""User model definition."""

from datetime import datetime, timedelta
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


USER_ROLES = ("CUSTOMER", "PROVIDER", "ADMIN")
SELECTABLE_ROLES = ("CUSTOMER", "PROVIDER")


class User(db.Model):
    """Represents a platform user."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=True)
    password_hash = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(32), nullable=True)
    role = db.Column(db.Enum(*USER_ROLES, name="user_role_enum"), nullable=True)
    verified = db.Column(db.Boolean, nullable=False, default=False)
    is_face_verified = db.Column(db.Boolean, nullable=False, default=False)
    is_otp_verified = db.Column(db.Boolean, nullable=False, default=False)
    business_verified = db.Column(db.Boolean, nullable=False, default=False)
    trust_score = db.Column(db.Float, nullable=True)
    reset_token = db.Column(db.String(128), nullable=True, unique=True)
    reset_token_expiry = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    business_verification = db.relationship(
        "BusinessVerification",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def issue_reset_token(self, token: str, ttl_minutes: int, now: Optional[datetime] = None) -> None:
        now = now or datetime.utcnow()
        self.reset_token = token
        self.reset_token_expiry = now + timedelta(minutes=ttl_minutes)

    def reset_token_valid(self, now: Optional[datetime] = None) -> bool:
        if not self.reset_token or self.reset_token_expiry is None:
            return False
        return self.reset_token_expiry >= (now or datetime.utcnow())

    def clear_reset_token(self) -> None:
        self.reset_token = None
        self.reset_token_expiry = None

    def token_claims(self) -> dict:
        """Claims embedded in access tokens for request-time policy checks."""

        return {
            "email": self.email,
            "role": self.role,
            "verified": bool(self.verified),
            "is_face_verified": bool(self.is_face_verified),
            "is_otp_verified": bool(self.is_otp_verified),
        }

    def to_dict(self, include_private: bool = False) -> dict:
        data = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "verified": self.verified,
            "is_face_verified": self.is_face_verified,
            "is_otp_verified": self.is_otp_verified,
            "business_verified": self.business_verified,
            "trust_score": self.trust_score,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_private:
            data["contact_phone"] = self.contact_phone
        return data

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
