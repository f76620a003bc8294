"""ORM Models — SQLAlchemy declarative models for all HouseHunter entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - UUID primary keys everywhere except the timestamp records (keyed by type)

Design Decisions:
    - One file per entity for locality
    - No ORM relationships: services load related rows with explicit queries,
      which keeps async sessions free of implicit lazy loads
    - All models imported here so Base.metadata is complete before create_all/alembic
"""

from app.models.user import User  # noqa: F401
from app.models.listing import Listing  # noqa: F401
from app.models.favorite import Favorite  # noqa: F401
from app.models.listing_review import ListingReview  # noqa: F401
from app.models.enquiry import Enquiry  # noqa: F401
from app.models.transaction import Transaction  # noqa: F401
from app.models.subscription import Subscription  # noqa: F401
from app.models.advertisement import Advertisement  # noqa: F401
from app.models.timestamp import TimestampRecord  # noqa: F401
from app.models.report import Report  # noqa: F401
from app.models.contact import Contact  # noqa: F401
from app.models.newsletter import NewsletterSubscriber  # noqa: F401
from app.models.faq import Faq  # noqa: F401
from app.models.blog import Blog  # noqa: F401
from app.models.blog_comment import BlogComment  # noqa: F401
from app.models.testimonial import Testimonial  # noqa: F401
from app.models.login_code import LoginCode  # noqa: F401
from app.models.product import Product  # noqa: F401
from app.models.order import Order  # noqa: F401
from app.models.coupon import Coupon  # noqa: F401
from app.models.project import Project  # noqa: F401
