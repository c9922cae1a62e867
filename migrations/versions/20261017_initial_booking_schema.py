"""create booking marketplace tables"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "booking_20261017"
down_revision = None
branch_labels = None
depends_on = None


USER_ROLES = ("CUSTOMER", "PROVIDER", "ADMIN")
LISTING_CATEGORIES = ("apartments", "cars", "event_centers", "restaurants", "services")
LISTING_STATUSES = ("PENDING", "APPROVED", "REJECTED")
RESERVATION_STATUSES = ("PENDING", "CONFIRMED", "CANCELLED")
NOTIFICATION_TYPES = ("BOOKING", "SYSTEM", "MESSAGE")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("contact_phone", sa.String(length=32), nullable=True),
        sa.Column("role", sa.Enum(*USER_ROLES, name="user_role_enum"), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_face_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_otp_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("business_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("trust_score", sa.Float(), nullable=True),
        sa.Column("reset_token", sa.String(length=128), nullable=True, unique=True),
        sa.Column("reset_token_expiry", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "listings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image_src", sa.String(length=512), nullable=True),
        sa.Column(
            "category",
            sa.Enum(*LISTING_CATEGORIES, name="listing_category_enum"),
            nullable=False,
        ),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("contact_phone", sa.String(length=32), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("suggested_price", sa.Integer(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(*LISTING_STATUSES, name="listing_status_enum"),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_listings_user_id", "listings", ["user_id"])

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("listing_id", sa.Integer(), sa.ForeignKey("listings.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*RESERVATION_STATUSES, name="reservation_status_enum"),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("total_price", sa.Integer(), nullable=False),
        sa.Column("contact_phone", sa.String(length=32), nullable=True),
        sa.Column("cancellation_risk", sa.Float(), nullable=True),
        sa.Column("fraud_risk", sa.Float(), nullable=True),
        sa.Column("overbooking_risk", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_reservations_listing_id", "reservations", ["listing_id"])
    op.create_index("ix_reservations_user_id", "reservations", ["user_id"])

    op.create_table(
        "business_verifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("business_name", sa.String(length=200), nullable=True),
        sa.Column("business_type", sa.String(length=120), nullable=True),
        sa.Column("business_address", sa.String(length=255), nullable=True),
        sa.Column("tin_number", sa.String(length=64), nullable=True),
        sa.Column("registration_number", sa.String(length=64), nullable=True),
        sa.Column("tin_certificate_url", sa.String(length=512), nullable=True),
        sa.Column("incorporation_cert_url", sa.String(length=512), nullable=True),
        sa.Column("vat_certificate_url", sa.String(length=512), nullable=True),
        sa.Column("ssnit_cert_url", sa.String(length=512), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_notes", sa.Text(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "type",
            sa.Enum(*NOTIFICATION_TYPES, name="notification_type_enum"),
            nullable=False,
            server_default="SYSTEM",
        ),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("admin_only", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("contact_phone", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("listing_id", sa.Integer(), sa.ForeignKey("listings.id"), nullable=False),
        sa.Column("reservation_id", sa.Integer(), sa.ForeignKey("reservations.id"), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "listing_id", name="uq_reviews_user_listing"),
    )
    op.create_index("ix_reviews_listing_id", "reviews", ["listing_id"])

    op.create_table(
        "favourites",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("listing_id", sa.Integer(), sa.ForeignKey("listings.id"), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )


def downgrade():
    op.drop_table("favourites")
    op.drop_index("ix_reviews_listing_id", table_name="reviews")
    op.drop_table("reviews")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("business_verifications")
    op.drop_index("ix_reservations_user_id", table_name="reservations")
    op.drop_index("ix_reservations_listing_id", table_name="reservations")
    op.drop_table("reservations")
    op.drop_index("ix_listings_user_id", table_name="listings")
    op.drop_table("listings")
    op.drop_table("users")

    bind = op.get_bind()
    for name in (
        "notification_type_enum",
        "reservation_status_enum",
        "listing_status_enum",
        "listing_category_enum",
        "user_role_enum",
    ):
        sa.Enum(name=name).drop(bind, checkfirst=True)
