"""Wishlist and enquiry routes.

Tests cover:
    - wishlist: save is idempotent, missing listing 404, remove of unsaved is a no-op
    - enquiries: agent snapshot and geolocated country stored, listing without
      agent 404, agents see only their own inbox, foreign enquiry 403,
      admin sees all, delete returns the refreshed inbox
"""

from app.core.domain_types import UserRole

MISSING = "00000000-0000-0000-0000-000000000000"


async def test_save_listing_idempotent(client, agent, make_user, make_listing):
    owner, _ = agent
    listing = await make_listing(owner, status="active")
    _, headers = await make_user()

    await client.post(f"/api/v1/wishlist/{listing.id}", headers=headers)
    response = await client.post(f"/api/v1/wishlist/{listing.id}", headers=headers)
    assert response.status_code == 200
    assert [l["id"] for l in response.json()["listings"]] == [str(listing.id)]


async def test_save_missing_listing_404(client, make_user):
    _, headers = await make_user()
    response = await client.post(f"/api/v1/wishlist/{MISSING}", headers=headers)
    assert response.status_code == 404


async def test_remove_from_wishlist(client, agent, make_user, make_listing):
    owner, _ = agent
    listing = await make_listing(owner)
    _, headers = await make_user()
    await client.post(f"/api/v1/wishlist/{listing.id}", headers=headers)

    response = await client.delete(f"/api/v1/wishlist/{listing.id}", headers=headers)
    assert response.json()["listings"] == []
    again = await client.delete(f"/api/v1/wishlist/{listing.id}", headers=headers)
    assert again.status_code == 200


async def test_wishlist_is_per_user(client, agent, make_user, make_listing):
    owner, _ = agent
    listing = await make_listing(owner)
    _, first = await make_user()
    _, second = await make_user()
    await client.post(f"/api/v1/wishlist/{listing.id}", headers=first)
    response = await client.get("/api/v1/wishlist", headers=second)
    assert response.json()["listings"] == []


# ─── Enquiries ───────────────────────────────────────────────────

def _enquiry(listing_id):
    return {
        "name": "Bola", "email": "Bola@Example.com", "number": "08031234567",
        "message": "Is this still available?", "listing_id": str(listing_id),
    }


async def test_submit_enquiry_snapshots_agent(client, make_user, make_listing):
    owner, _ = await make_user(
        UserRole.AGENT, firstname="Tunde", lastname="Ade",
        profile_photo={"url": "https://media.test/tunde.jpg", "public_id": "avatars/t"},
    )
    listing = await make_listing(owner, status="active")
    response = await client.post("/api/v1/enquiries", json=_enquiry(listing.id))
    assert response.status_code == 201
    enquiry = response.json()["enquiry"]
    assert enquiry["agent_id"] == str(owner.id)
    assert enquiry["agent_name"] == "Tunde Ade"
    assert enquiry["agent_image"] == "https://media.test/tunde.jpg"
    assert enquiry["country"] == "Nigeria"
    assert enquiry["email"] == "bola@example.com"
    assert enquiry["is_read"] is False


async def test_enquiry_for_orphan_listing_404(client, make_listing):
    listing = await make_listing(None)
    response = await client.post("/api/v1/enquiries", json=_enquiry(listing.id))
    assert response.status_code == 404


async def test_inbox_scoped_to_agent(client, admin, agent, make_user, make_listing):
    owner, owner_headers = agent
    other, other_headers = await make_user(UserRole.AGENT)
    _, admin_headers = admin
    mine = await make_listing(owner)
    theirs = await make_listing(other)
    created = await client.post("/api/v1/enquiries", json=_enquiry(mine.id))
    await client.post("/api/v1/enquiries", json=_enquiry(theirs.id))

    inbox = (await client.get("/api/v1/enquiries", headers=owner_headers)).json()["enquiries"]
    assert [e["listing_id"] for e in inbox] == [str(mine.id)]
    everything = (await client.get("/api/v1/enquiries", headers=admin_headers)).json()
    assert len(everything["enquiries"]) == 2

    enquiry_id = created.json()["enquiry"]["id"]
    forbidden = await client.post(f"/api/v1/enquiries/{enquiry_id}/read", headers=other_headers)
    assert forbidden.status_code == 403

    read = await client.post(f"/api/v1/enquiries/{enquiry_id}/read", headers=owner_headers)
    assert read.json()["enquiry"]["is_read"] is True

    deleted = await client.delete(f"/api/v1/enquiries/{enquiry_id}", headers=owner_headers)
    assert deleted.status_code == 200
    assert deleted.json()["enquiries"] == []


async def test_plain_users_have_no_inbox(client, make_user):
    _, headers = await make_user()
    assert (await client.get("/api/v1/enquiries", headers=headers)).status_code == 403
