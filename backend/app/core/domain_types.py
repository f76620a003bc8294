"""Domain Types — enums and value types shared by models, schemas and services.

Invariants:
    - All valid states encoded as Enums — no raw string matching in services
    - String values match what clients send and what the database stores
    - UNLIMITED listing quota is represented as None, never as a magic number

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ListingId = NewType("ListingId", UUID)


# ─── Users ───────────────────────────────────────────────────────

class UserRole(str, Enum):
    USER = "User"
    AGENT = "Agent"
    ADMIN = "Admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


class KycStatus(str, Enum):
    UNVERIFIED = "unverified"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


# ─── Listings ────────────────────────────────────────────────────

class ListingStatus(str, Enum):
    """Lifecycle status stored on the listing row."""
    PENDING = "pending"
    ACTIVE = "active"
    SOLD = "sold"
    RENTED = "rented"
    ARCHIVED = "archived"


class ListingPlacement(str, Enum):
    """Status-endpoint actions that toggle placement flags instead of status."""
    FEATURED = "featured"
    HOMEPAGE = "homepage"
    REMOVE_FROM_HOMEPAGE = "removeFromHomepage"


# ─── Subscriptions & payments ────────────────────────────────────

class SubscriptionPlan(str, Enum):
    BASIC = "Basic"
    PREMIUM = "Premium"
    PROFESSIONAL = "Professional"


class SubscriptionStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    SUCCESSFUL = "successful"
    COMPLETED = "completed"
    SUCCESS = "success"
    FAILED = "failed"


# ─── Advertisements ──────────────────────────────────────────────

class AdvertisementStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class AdType(str, Enum):
    HEADER_STRIP = "Header Strip"
    TAKEOVER_BANNER = "Takeover Banner"
    POP_UP_BANNER = "Pop-Up Banner"
    MIDDLE_STRIP = "Middle Strip x2"
    FEATURED_PROJECTS = "Featured Projects"
    LEADER_BANNER = "Leader Banner"
    SIDE_BOARD_BANNER = "Side Board Banner"
    POP_UP_BANNER_SMALL = "Pop-Up Banner (Small)"
    CAROUSEL = "Carousel"


# ─── Content & moderation ────────────────────────────────────────

class PublicationStatus(str, Enum):
    """Shared by blogs and FAQs."""
    PENDING = "pending"
    PUBLISHED = "published"


class ReportStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


# ─── Storefront ──────────────────────────────────────────────────

class ProductStatus(str, Enum):
    PENDING = "pending"
    AVAILABLE = "available"
    SOLD_OUT = "sold out"
    ARCHIVED = "archived"


class OrderStatus(str, Enum):
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


# ─── Cache invalidation ──────────────────────────────────────────

class TimestampType(str, Enum):
    """Resource types that carry a polled timestamp record."""
    LISTING = "listing"
    FAVOURITE = "favourite"
    USER = "user"
    REVIEW = "review"
    ENQUIRY = "enquiry"
    SUBSCRIPTION = "subscription"
    TRANSACTION = "transaction"
    ADVERTISEMENT = "advertisement"
    REPORT = "report"
    CONTACT = "contact"
    NEWSLETTER = "newsletter"
    FAQ = "faq"
    BLOG = "blog"
    PRODUCT = "product"
    ORDER = "order"
    PROJECT = "project"
    TESTIMONIAL = "testimonial"
