"""Listing routes — creation quota, catalogue visibility, status actions, edits,
cascade delete and reviews.

Tests cover:
    - create: multipart form parsing, images uploaded, quota enforced for agents
      (admins exempt), invalid location JSON 400, plain users 403
    - public detail: 403 for non-active listings, views counted; preview shows any status
    - status: featured is exclusive, homepage capped, approval mails the owner,
      unknown status 400, non-owner 403
    - update: dropped images destroyed, kept images preserved
    - delete: enquiries/reviews/favorites removed, total_listings clamped at 0
    - reviews: one per user, aggregates recomputed on add and delete
"""

import json

from sqlalchemy import func, select

from app.core.domain_types import UserRole
from app.models.enquiry import Enquiry
from app.models.favorite import Favorite

LOCATION = json.dumps({"state": "Lagos", "area": "Lekki", "locality": "Phase 1"})


def _form(**overrides):
    data = {
        "title": "2 Bedroom Apartment",
        "purpose": "Rent",
        "location": LOCATION,
        "price": "1800000",
        "installment_payment": "true",
        "features": json.dumps(["Pool", "Gym"]),
    }
    data.update(overrides)
    return data


# ─── Create ──────────────────────────────────────────────────────

async def test_agent_creates_pending_listing(client, agent, fake_clients, test_db):
    user, headers = agent
    response = await client.post(
        "/api/v1/listings", headers=headers, data=_form(),
        files=[("images", ("a.jpg", b"img-a", "image/jpeg")),
               ("images", ("b.jpg", b"img-b", "image/jpeg"))],
    )
    assert response.status_code == 201
    listing = response.json()["listing"]
    assert listing["status"] == "pending"
    assert listing["installment_payment"] is True
    assert listing["features"] == ["Pool", "Gym"]
    assert [i["public_id"] for i in listing["images"]] == ["listings/img-1", "listings/img-2"]
    assert fake_clients.mail.outbox[-1].subject == "Your listing has been submitted"

    await test_db.refresh(user)
    assert user.total_listings == 1


async def test_agent_at_quota_cannot_create(client, make_user):
    _, headers = await make_user(UserRole.AGENT, total_listings=1, listing_limit=1)
    response = await client.post("/api/v1/listings", headers=headers, data=_form())
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "LISTING_LIMIT_REACHED"


async def test_unlimited_plan_has_no_quota(client, make_user):
    _, headers = await make_user(UserRole.AGENT, total_listings=500, listing_limit=None)
    response = await client.post("/api/v1/listings", headers=headers, data=_form())
    assert response.status_code == 201


async def test_admin_exempt_from_quota(client, make_user):
    _, headers = await make_user(UserRole.ADMIN, total_listings=5, listing_limit=1)
    response = await client.post("/api/v1/listings", headers=headers, data=_form())
    assert response.status_code == 201


async def test_plain_user_cannot_create(client, make_user):
    _, headers = await make_user()
    response = await client.post("/api/v1/listings", headers=headers, data=_form())
    assert response.status_code == 403


async def test_bad_location_json_rejected(client, agent):
    _, headers = agent
    response = await client.post(
        "/api/v1/listings", headers=headers, data=_form(location="{not json"),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_incomplete_location_rejected(client, agent):
    _, headers = agent
    response = await client.post(
        "/api/v1/listings", headers=headers,
        data=_form(location=json.dumps({"state": "Lagos"})),
    )
    assert response.status_code == 400


# ─── Read ────────────────────────────────────────────────────────

async def test_catalogue_shows_only_active_with_creator(client, agent, make_listing):
    user, _ = agent
    active = await make_listing(user, status="active")
    await make_listing(user, status="pending")
    response = await client.get("/api/v1/listings")
    listings = response.json()["listings"]
    assert [l["id"] for l in listings] == [str(active.id)]
    assert listings[0]["creator"]["id"] == str(user.id)
    assert "password_hash" not in listings[0]["creator"]


async def test_public_detail_hides_pending(client, agent, make_listing):
    user, _ = agent
    listing = await make_listing(user, status="pending")
    assert (await client.get(f"/api/v1/listings/{listing.id}")).status_code == 403
    preview = await client.get(f"/api/v1/listings/{listing.id}/preview")
    assert preview.status_code == 200
    assert preview.json()["agent"]["id"] == str(user.id)


async def test_public_detail_counts_views(client, agent, make_listing):
    user, _ = agent
    listing = await make_listing(user, status="active")
    await client.get(f"/api/v1/listings/{listing.id}")
    response = await client.get(f"/api/v1/listings/{listing.id}")
    assert response.json()["listing"]["views"] == 2


async def test_unknown_listing_404(client):
    response = await client.get("/api/v1/listings/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


# ─── Status actions ──────────────────────────────────────────────

async def test_featuring_is_exclusive(client, admin, agent, make_listing, test_db):
    _, admin_headers = admin
    owner, _ = agent
    first = await make_listing(owner, is_featured=True)
    second = await make_listing(owner)
    response = await client.put(
        f"/api/v1/listings/{second.id}/status", headers=admin_headers,
        json={"status": "featured"},
    )
    assert response.status_code == 200
    await test_db.refresh(first)
    await test_db.refresh(second)
    assert first.is_featured is False
    assert second.is_featured is True


async def test_homepage_capped(client, admin, agent, make_listing):
    _, admin_headers = admin
    owner, _ = agent
    for _ in range(10):
        await make_listing(owner, on_homepage=True)
    extra = await make_listing(owner)
    response = await client.put(
        f"/api/v1/listings/{extra.id}/status", headers=admin_headers,
        json={"status": "homepage"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "HOMEPAGE_LIMIT_REACHED"


async def test_remove_from_homepage(client, agent, make_listing):
    owner, headers = agent
    listing = await make_listing(owner, on_homepage=True)
    response = await client.put(
        f"/api/v1/listings/{listing.id}/status", headers=headers,
        json={"status": "removeFromHomepage"},
    )
    assert response.json()["listing"]["on_homepage"] is False


async def test_approval_mails_owner(client, admin, agent, make_listing, fake_clients):
    _, admin_headers = admin
    owner, _ = agent
    listing = await make_listing(owner)
    response = await client.put(
        f"/api/v1/listings/{listing.id}/status", headers=admin_headers,
        json={"status": "active"},
    )
    assert response.json()["listing"]["status"] == "active"
    assert fake_clients.mail.outbox[-1].to == owner.email
    assert fake_clients.mail.outbox[-1].subject == "Your listing is live"


async def test_invalid_status_rejected(client, agent, make_listing):
    owner, headers = agent
    listing = await make_listing(owner)
    response = await client.put(
        f"/api/v1/listings/{listing.id}/status", headers=headers,
        json={"status": "demolished"},
    )
    assert response.status_code == 400


async def test_other_agent_cannot_change_status(client, agent, make_user, make_listing):
    owner, _ = agent
    _, other_headers = await make_user(UserRole.AGENT)
    listing = await make_listing(owner)
    response = await client.put(
        f"/api/v1/listings/{listing.id}/status", headers=other_headers,
        json={"status": "sold"},
    )
    assert response.status_code == 403


# ─── Update ──────────────────────────────────────────────────────

async def test_update_replaces_dropped_images(client, agent, make_listing, fake_clients):
    owner, headers = agent
    listing = await make_listing(owner, images=[
        {"url": "https://media.test/a.jpg", "public_id": "listings/a"},
        {"url": "https://media.test/b.jpg", "public_id": "listings/b"},
    ])
    response = await client.put(
        f"/api/v1/listings/{listing.id}", headers=headers,
        data=_form(
            title="Renamed",
            existing_images=json.dumps([{"url": "https://media.test/b.jpg", "public_id": "listings/b"}]),
        ),
        files=[("images", ("c.jpg", b"img-c", "image/jpeg"))],
    )
    assert response.status_code == 200
    updated = response.json()["listing"]
    assert updated["title"] == "Renamed"
    assert [i["public_id"] for i in updated["images"]] == ["listings/b", "listings/img-1"]
    assert fake_clients.media.destroyed == ["listings/a"]


async def test_update_rejects_malformed_existing_images(client, agent, make_listing):
    owner, headers = agent
    listing = await make_listing(owner)
    response = await client.put(
        f"/api/v1/listings/{listing.id}", headers=headers,
        data=_form(existing_images=json.dumps(["not-an-object"])),
    )
    assert response.status_code == 400


# ─── Delete ──────────────────────────────────────────────────────

async def test_delete_cascades_and_clamps_count(
    client, agent, make_user, make_listing, fake_clients, test_db,
):
    owner, headers = agent
    fan, _ = await make_user()
    listing = await make_listing(
        owner, images=[{"url": "https://media.test/a.jpg", "public_id": "listings/a"}],
    )
    test_db.add(Favorite(user_id=fan.id, listing_id=listing.id))
    test_db.add(Enquiry(
        listing_id=listing.id, agent_id=owner.id, name="Bola", email="bola@example.com",
        number="0800", message="Is it available?",
        agent_name=owner.firstname, agent_image="https://media.test/agent.jpg",
    ))
    await test_db.commit()

    response = await client.delete(f"/api/v1/listings/{listing.id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["listings"] == []
    assert fake_clients.media.destroyed == ["listings/a"]

    assert await test_db.scalar(select(func.count()).select_from(Favorite)) == 0
    assert await test_db.scalar(select(func.count()).select_from(Enquiry)) == 0
    await test_db.refresh(owner)
    assert owner.total_listings == 0


# ─── Reviews ─────────────────────────────────────────────────────

async def test_review_once_and_aggregates(client, agent, make_user, make_listing, test_db):
    owner, _ = agent
    listing = await make_listing(owner, status="active")
    _, h1 = await make_user()
    _, h2 = await make_user()

    r1 = await client.post(
        f"/api/v1/listings/{listing.id}/reviews", headers=h1,
        json={"rating": 5, "comment": "Lovely"},
    )
    assert r1.status_code == 201
    await client.post(
        f"/api/v1/listings/{listing.id}/reviews", headers=h2, json={"rating": 2},
    )
    duplicate = await client.post(
        f"/api/v1/listings/{listing.id}/reviews", headers=h1, json={"rating": 1},
    )
    assert duplicate.status_code == 409

    await test_db.refresh(listing)
    await test_db.refresh(owner)
    assert (listing.average_rating, listing.rating_count) == (3.5, 2)
    assert owner.average_rating == 3.5

    review_id = r1.json()["review"]["id"]
    deleted = await client.delete(
        f"/api/v1/listings/{listing.id}/reviews/{review_id}", headers=h1,
    )
    assert deleted.status_code == 200
    await test_db.refresh(listing)
    assert (listing.average_rating, listing.rating_count) == (2.0, 1)


async def test_pending_listing_not_reviewable(client, agent, make_user, make_listing):
    owner, _ = agent
    listing = await make_listing(owner)
    _, headers = await make_user()
    response = await client.post(
        f"/api/v1/listings/{listing.id}/reviews", headers=headers, json={"rating": 4},
    )
    assert response.status_code == 400


async def test_cannot_delete_someone_elses_review(client, agent, make_user, make_listing):
    owner, _ = agent
    listing = await make_listing(owner, status="active")
    _, author = await make_user()
    _, stranger = await make_user()
    created = await client.post(
        f"/api/v1/listings/{listing.id}/reviews", headers=author, json={"rating": 4},
    )
    review_id = created.json()["review"]["id"]
    response = await client.delete(
        f"/api/v1/listings/{listing.id}/reviews/{review_id}", headers=stranger,
    )
    assert response.status_code == 403
