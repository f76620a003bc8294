"""Domain Types — verifies enum values match what clients send and the DB stores."""

from app.core.domain_types import (
    AdType, ListingPlacement, ListingStatus, OrderStatus, SubscriptionPlan,
    TimestampType, UserRole,
)


def test_roles_are_capitalized():
    assert [r.value for r in UserRole] == ["User", "Agent", "Admin"]


def test_listing_status_and_placement_do_not_overlap():
    statuses = {s.value for s in ListingStatus}
    placements = {p.value for p in ListingPlacement}
    assert statuses.isdisjoint(placements)
    assert "removeFromHomepage" in placements


def test_subscription_plans():
    assert {p.value for p in SubscriptionPlan} == {"Basic", "Premium", "Professional"}


def test_ad_types_include_display_names():
    assert AdType("Middle Strip x2") is AdType.MIDDLE_STRIP
    assert AdType("Pop-Up Banner (Small)") is AdType.POP_UP_BANNER_SMALL
    assert len(AdType) == 9


def test_timestamp_types_cover_every_collection():
    assert len(TimestampType) == 17
    assert TimestampType("favourite") is TimestampType.FAVOURITE


def test_str_enum_serializes_to_value():
    assert OrderStatus.CANCELLED == "cancelled"
