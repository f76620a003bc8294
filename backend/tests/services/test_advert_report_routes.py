"""Advertisement submissions and moderation, and listing reports.

Tests cover:
    - advert submission: captcha rejected 401 before upload, success uploads the
      image, records country and mails the advertiser; unknown ad type 400
    - status: activation sets position and expiry, leaving active clears position
    - /live lists only active adverts, filtered by type and ordered by position
    - delete destroys the image and returns the remaining adverts
    - reports: captcha first, duplicate per listing by email or number 409,
      agent recorded, admin queue embeds listing and agent
"""

from datetime import datetime, timedelta

from app.core.datetimes import as_utc

ADVERT_FORM = {
    "fullname": "Ada Obi", "company": "Acme Homes", "email": "Ada@Acme.test",
    "number": "08030000000", "link": "https://acme.test", "information": "Summer promo",
    "ad_type": "Header Strip", "captcha_token": "tok",
}
IMAGE = {"image": ("banner.png", b"\x89PNG", "image/png")}


async def _submit(client, **overrides):
    return await client.post(
        "/api/v1/advertisements", data={**ADVERT_FORM, **overrides}, files=IMAGE,
    )


async def test_advert_captcha_rejected_before_upload(client, fake_clients):
    fake_clients.captcha.accept = False
    response = await _submit(client)
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "CAPTCHA_FAILED"
    assert fake_clients.media.uploads == []


async def test_advert_submission(client, fake_clients):
    response = await _submit(client)
    assert response.status_code == 201
    advert = response.json()["advertisement"]
    assert advert["status"] == "pending"
    assert advert["email"] == "ada@acme.test"
    assert advert["country"] == "Nigeria"
    assert advert["image"]["public_id"] == "advertisements/img-1"
    assert fake_clients.captcha.tokens == ["tok"]
    assert fake_clients.mail.outbox[-1].to == "ada@acme.test"


async def test_unknown_ad_type_rejected(client):
    response = await _submit(client, ad_type="Skywriting")
    assert response.status_code == 400


async def test_activation_and_deactivation(client, admin):
    _, headers = admin
    advert_id = (await _submit(client)).json()["advertisement"]["id"]

    active = await client.put(
        f"/api/v1/advertisements/{advert_id}/status", headers=headers,
        json={"status": "active", "position": 3, "duration_days": 14},
    )
    body = active.json()["advertisement"]
    assert body["position"] == 3
    start = as_utc(datetime.fromisoformat(body["start_date"]))
    expiry = as_utc(datetime.fromisoformat(body["expiry_date"]))
    assert expiry - start == timedelta(days=14)

    cancelled = await client.put(
        f"/api/v1/advertisements/{advert_id}/status", headers=headers,
        json={"status": "cancelled"},
    )
    assert cancelled.json()["advertisement"]["position"] is None


async def test_live_adverts_filtered_and_ordered(client, admin):
    _, headers = admin
    ids = []
    for position, ad_type in [(2, "Carousel"), (1, "Carousel"), (1, "Header Strip")]:
        advert_id = (await _submit(client, ad_type=ad_type)).json()["advertisement"]["id"]
        await client.put(
            f"/api/v1/advertisements/{advert_id}/status", headers=headers,
            json={"status": "active", "position": position, "duration_days": 7},
        )
        ids.append(advert_id)
    await _submit(client, ad_type="Carousel")

    response = await client.get("/api/v1/advertisements/live", params={"ad_type": "Carousel"})
    assert [a["id"] for a in response.json()["advertisements"]] == [ids[1], ids[0]]


async def test_delete_advert_destroys_image(client, admin, fake_clients):
    _, headers = admin
    advert_id = (await _submit(client)).json()["advertisement"]["id"]
    response = await client.delete(f"/api/v1/advertisements/{advert_id}", headers=headers)
    assert response.json()["advertisements"] == []
    assert fake_clients.media.destroyed == ["advertisements/img-1"]


async def test_advert_list_admin_only(client, agent):
    _, headers = agent
    assert (await client.get("/api/v1/advertisements", headers=headers)).status_code == 403


# ─── Reports ─────────────────────────────────────────────────────

def _report(listing_id, **overrides):
    body = {
        "fullname": "Chi", "email": "chi@example.com", "number": "08011111111",
        "category": "Fraud", "message": "Asked for a deposit before viewing",
        "listing_id": str(listing_id), "captcha_token": "tok",
    }
    body.update(overrides)
    return body


async def test_report_captcha_checked_first(client, fake_clients):
    fake_clients.captcha.accept = False
    response = await client.post(
        "/api/v1/reports", json=_report("00000000-0000-0000-0000-000000000000"),
    )
    assert response.status_code == 401


async def test_report_records_agent_and_blocks_duplicates(client, admin, agent, make_listing):
    owner, _ = agent
    _, admin_headers = admin
    listing = await make_listing(owner, status="active")

    created = await client.post("/api/v1/reports", json=_report(listing.id))
    assert created.status_code == 201
    assert created.json()["report"]["agent_id"] == str(owner.id)

    same_number = await client.post(
        "/api/v1/reports", json=_report(listing.id, email="other@example.com"),
    )
    assert same_number.status_code == 409
    same_email = await client.post(
        "/api/v1/reports", json=_report(listing.id, email="CHI@example.com", number="0700"),
    )
    assert same_email.status_code == 409

    queue = (await client.get("/api/v1/reports", headers=admin_headers)).json()["reports"]
    assert queue[0]["listing"] == {"id": str(listing.id), "title": listing.title}
    assert queue[0]["agent"]["id"] == str(owner.id)

    report_id = queue[0]["id"]
    resolved = await client.put(
        f"/api/v1/reports/{report_id}/status", headers=admin_headers,
        json={"status": "resolved"},
    )
    assert resolved.json()["report"]["status"] == "resolved"
    deleted = await client.delete(f"/api/v1/reports/{report_id}", headers=admin_headers)
    assert deleted.json()["reports"] == []


async def test_report_missing_listing_404(client):
    response = await client.post(
        "/api/v1/reports", json=_report("00000000-0000-0000-0000-000000000000"),
    )
    assert response.status_code == 404
