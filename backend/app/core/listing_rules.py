"""Listing Rules — status actions, ownership, image diffing and rating aggregates.

Invariants:
    - parse_status_action is PURE: returns a ListingStatus or ListingPlacement, raises on unknown
    - can_manage_listing: owner or Admin only
    - partition_images keeps order of the kept list; anything stored but not kept is returned
      for destruction on the media host
    - compute_rating returns (0.0, 0) for no ratings — never divides by zero
"""

from uuid import UUID

from app.core.domain_types import ListingPlacement, ListingStatus, UserRole
from app.core.errors import InvalidInputError


def parse_status_action(value: str) -> ListingStatus | ListingPlacement:
    """Map the status endpoint's `status` field to a lifecycle status or placement action."""
    for enum_type in (ListingStatus, ListingPlacement):
        try:
            return enum_type(value)
        except ValueError:
            continue
    raise InvalidInputError("Invalid status provided.", field="status")


def can_manage_listing(
    owner_id: UUID | None, user_id: UUID, role: UserRole | str,
) -> bool:
    return role == UserRole.ADMIN or (owner_id is not None and owner_id == user_id)


def homepage_has_room(current_count: int, limit: int) -> bool:
    return current_count < limit


def partition_images(
    stored: list[dict], kept: list[dict],
) -> tuple[list[dict], list[dict]]:
    """Split stored images into (kept, to_destroy) by public_id.

    Kept entries not present in storage are dropped: clients may only keep
    images the listing already owns.
    """
    stored_ids = {img.get("public_id") for img in stored}
    kept_ids = {img.get("public_id") for img in kept}
    still_kept = [img for img in kept if img.get("public_id") in stored_ids]
    to_destroy = [img for img in stored if img.get("public_id") not in kept_ids]
    return still_kept, to_destroy


def compute_rating(ratings: list[int]) -> tuple[float, int]:
    """Average rating rounded to one decimal, plus count."""
    if not ratings:
        return 0.0, 0
    return round(sum(ratings) / len(ratings), 1), len(ratings)


def parse_bool_field(value: str | bool | None) -> bool:
    """Multipart forms send booleans as strings."""
    if isinstance(value, bool):
        return value
    return (value or "").strip().lower() in ("true", "1", "yes", "on")
