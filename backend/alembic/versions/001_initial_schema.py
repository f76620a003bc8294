"""Initial schema — users, listings, payments, adverts, CMS and storefront.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", UUID(as_uuid=True), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _fk(column: str, target: str, ondelete: str, nullable: bool = True) -> sa.Column:
    return sa.Column(
        column, UUID(as_uuid=True),
        sa.ForeignKey(target, ondelete=ondelete), nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("firstname", sa.String(100), nullable=False),
        sa.Column("middlename", sa.String(100), nullable=True),
        sa.Column("lastname", sa.String(100), nullable=True),
        sa.Column("number", sa.String(40), nullable=True),
        sa.Column("socials", sa.JSON, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("organization", sa.String(200), nullable=True),
        sa.Column("website_url", sa.String(500), nullable=True),
        sa.Column("username", sa.String(100), nullable=True),
        sa.Column("nin", sa.String(40), nullable=True),
        sa.Column("country", sa.String(100), nullable=False, server_default="Nigeria"),
        sa.Column("state", sa.String(100), nullable=False, server_default="Abia State"),
        sa.Column("address", sa.JSON, nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="User"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("kyc_status", sa.String(20), nullable=False, server_default="unverified"),
        sa.Column("password_hash", sa.String(100), nullable=True),
        sa.Column("profile_photo", sa.JSON, nullable=False),
        sa.Column("total_listings", sa.Integer, nullable=False, server_default="0"),
        sa.Column("average_rating", sa.Float, nullable=False, server_default="0"),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        sa.Column("subscription_id", UUID(as_uuid=True), nullable=True),
        sa.Column("subscribed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("plan", sa.String(20), nullable=True),
        sa.Column("listing_limit", sa.Integer, nullable=True, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "listings",
        _id(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("purpose", sa.String(50), nullable=False),
        sa.Column("location", sa.JSON, nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("sub_category", sa.String(100), nullable=True),
        sa.Column("price", sa.Float, nullable=False),
        sa.Column("denomination", sa.String(10), nullable=False, server_default="NGN"),
        sa.Column("installment_payment", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("append_to", sa.String(100), nullable=True),
        sa.Column("bedrooms", sa.Integer, nullable=True),
        sa.Column("bathrooms", sa.Integer, nullable=True),
        sa.Column("toilets", sa.Integer, nullable=True),
        sa.Column("area_size", sa.String(100), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("features", sa.JSON, nullable=False),
        sa.Column("youtube_video", sa.String(500), nullable=True),
        sa.Column("instagram_video", sa.String(500), nullable=True),
        sa.Column("virtual_tour", sa.String(500), nullable=True),
        sa.Column("images", sa.JSON, nullable=False),
        sa.Column("documents", sa.JSON, nullable=False),
        sa.Column("coordinates", sa.JSON, nullable=True),
        _fk("created_by", "users.id", "SET NULL"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("is_featured", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("on_homepage", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        sa.Column("average_rating", sa.Float, nullable=False, server_default="0"),
        sa.Column("rating_count", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_listings_created_by", "listings", ["created_by"])
    op.create_index("ix_listings_status", "listings", ["status"])

    op.create_table(
        "favorites",
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("listing_id", UUID(as_uuid=True), sa.ForeignKey("listings.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "listing_reviews",
        _id(),
        _fk("listing_id", "listings.id", "CASCADE", nullable=False),
        _fk("user_id", "users.id", "CASCADE", nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=False, server_default=""),
        *_timestamps(),
        sa.UniqueConstraint("listing_id", "user_id", name="uq_listing_review_author"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_listing_review_rating"),
    )
    op.create_index("ix_listing_reviews_listing_id", "listing_reviews", ["listing_id"])

    op.create_table(
        "enquiries",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("number", sa.String(40), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        _fk("listing_id", "listings.id", "CASCADE", nullable=False),
        _fk("agent_id", "users.id", "SET NULL"),
        sa.Column("agent_name", sa.String(200), nullable=False),
        sa.Column("agent_image", sa.String(500), nullable=False),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("country", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_enquiries_listing_id", "enquiries", ["listing_id"])
    op.create_index("ix_enquiries_agent_id", "enquiries", ["agent_id"])

    op.create_table(
        "transactions",
        _id(),
        _fk("user_id", "users.id", "SET NULL"),
        sa.Column("transaction_id", sa.String(100), nullable=False, unique=True),
        sa.Column("reference", sa.String(100), nullable=False),
        sa.Column("amount", sa.Float, nullable=False),
        sa.Column("currency", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("plan", sa.String(50), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("ix_transactions_reference", "transactions", ["reference"])

    op.create_table(
        "subscriptions",
        _id(),
        _fk("user_id", "users.id", "SET NULL"),
        _fk("transaction_id", "transactions.id", "SET NULL"),
        sa.Column("reference", sa.String(100), nullable=False),
        sa.Column("plan", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="Active"),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reminder_sent_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"])
    op.create_index("ix_subscriptions_status", "subscriptions", ["status"])

    op.create_table(
        "advertisements",
        _id(),
        sa.Column("fullname", sa.String(200), nullable=False),
        sa.Column("company", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("number", sa.String(40), nullable=False),
        sa.Column("link", sa.String(500), nullable=False),
        sa.Column("information", sa.Text, nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("ad_type", sa.String(50), nullable=False),
        sa.Column("position", sa.Integer, nullable=True),
        sa.Column("image", sa.JSON, nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
    )
    op.create_index("ix_advertisements_status", "advertisements", ["status"])

    op.create_table(
        "timestamps",
        sa.Column("type", sa.String(40), primary_key=True),
        *_timestamps(),
    )

    op.create_table(
        "reports",
        _id(),
        sa.Column("fullname", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("number", sa.String(40), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        _fk("listing_id", "listings.id", "SET NULL"),
        _fk("agent_id", "users.id", "SET NULL"),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        *_timestamps(),
    )
    op.create_index("ix_reports_listing_id", "reports", ["listing_id"])

    op.create_table(
        "contacts",
        _id(),
        sa.Column("firstname", sa.String(100), nullable=False),
        sa.Column("lastname", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("number", sa.String(40), nullable=True),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("country", sa.String(100), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "newsletter_subscribers",
        _id(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        "faqs",
        _id(),
        sa.Column("question", sa.Text, nullable=False),
        sa.Column("answer", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        *_timestamps(),
    )

    op.create_table(
        "blogs",
        _id(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(320), nullable=False, unique=True),
        sa.Column("author", sa.String(200), nullable=False),
        sa.Column("excerpt", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        sa.Column("thumbnail", sa.JSON, nullable=True),
        sa.Column("images", sa.JSON, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "blog_comments",
        _id(),
        _fk("blog_id", "blogs.id", "CASCADE", nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("comment", sa.Text, nullable=False),
        sa.Column("country", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_blog_comments_blog_id", "blog_comments", ["blog_id"])

    op.create_table(
        "testimonials",
        _id(),
        sa.Column("fullname", sa.String(200), nullable=False),
        sa.Column("occupation", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("country", sa.String(100), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "login_codes",
        _id(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("code", sa.String(10), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("failed_attempts", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )

    op.create_table(
        "products",
        _id(),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(400), nullable=False, unique=True),
        sa.Column("regular_price", sa.Float, nullable=False, server_default="0"),
        sa.Column("sale_price", sa.Float, nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("in_stock", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("sale", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_featured", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("sizes", sa.JSON, nullable=False),
        sa.Column("description", sa.JSON, nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("sub_category", sa.String(100), nullable=True),
        sa.Column("images", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )

    op.create_table(
        "orders",
        _id(),
        _fk("user_id", "users.id", "SET NULL"),
        sa.Column("items", sa.JSON, nullable=False),
        sa.Column("delivery_details", sa.JSON, nullable=False),
        sa.Column("coupon_code", sa.String(50), nullable=True),
        sa.Column("discount", sa.Float, nullable=False, server_default="0"),
        sa.Column("total", sa.Float, nullable=False),
        sa.Column("payment_transaction_id", sa.String(100), nullable=True),
        sa.Column("payment_reference", sa.String(100), nullable=False, unique=True),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("amount", sa.Float, nullable=False, server_default="0"),
        sa.Column("currency", sa.String(10), nullable=False, server_default="NGN"),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("order_status", sa.String(20), nullable=False, server_default="processing"),
        *_timestamps(),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])

    op.create_table(
        "coupons",
        _id(),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("discount_percentage", sa.Integer, nullable=False),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_used", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.CheckConstraint("discount_percentage BETWEEN 1 AND 100", name="ck_coupon_discount"),
    )

    op.create_table(
        "projects",
        _id(),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("date", sa.String(50), nullable=False),
        sa.Column("client", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("type", sa.String(100), nullable=False),
        sa.Column("images", sa.JSON, nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    for table in (
        "projects", "coupons", "orders", "products", "login_codes",
        "testimonials", "blog_comments", "blogs", "faqs",
        "newsletter_subscribers", "contacts", "reports", "timestamps",
        "advertisements", "subscriptions", "transactions", "enquiries",
        "listing_reviews", "favorites", "listings", "users",
    ):
        op.drop_table(table)
