"""BusinessVerification model definition."""

from datetime import datetime

from . import db


class BusinessVerification(db.Model):
    """Business details a provider submits for admin review."""

    __tablename__ = "business_verifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True
    )
    business_name = db.Column(db.String(200), nullable=True)
    business_type = db.Column(db.String(120), nullable=True)
    business_address = db.Column(db.String(255), nullable=True)
    tin_number = db.Column(db.String(64), nullable=True)
    registration_number = db.Column(db.String(64), nullable=True)
    tin_certificate_url = db.Column(db.String(512), nullable=True)
    incorporation_cert_url = db.Column(db.String(512), nullable=True)
    vat_certificate_url = db.Column(db.String(512), nullable=True)
    ssnit_cert_url = db.Column(db.String(512), nullable=True)
    verified = db.Column(db.Boolean, nullable=False, default=False)
    verification_notes = db.Column(db.Text, nullable=True)
    submitted_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    user = db.relationship("User", back_populates="business_verification")

    def to_dict(self) -> dict:
        """Serialize the record with the provider's public identity."""

        provider = None
        if self.user is not None:
            provider = {"id": self.user.id, "name": self.user.name, "email": self.user.email}
        return {
            "provider": provider,
            "business_name": self.business_name or "",
            "business_type": self.business_type or "",
            "business_address": self.business_address or "",
            "tin_number": self.tin_number or "",
            "registration_number": self.registration_number or "",
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "verified": self.verified,
            "verification_notes": self.verification_notes or "",
            "documents": {
                "tin": self.tin_certificate_url,
                "incorporation": self.incorporation_cert_url,
                "vat": self.vat_certificate_url,
                "ssnit": self.ssnit_cert_url,
            },
        }
