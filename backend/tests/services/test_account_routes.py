"""Account, user-admin and agent routes.

Tests cover:
    - password change: length/match checked before the current password,
      wrong current password 401, same password 400, notification mail
    - email change via code sent to the new address
    - profile: NIN moves KYC to pending, WhatsApp number unique across accounts
    - avatar replacement destroys the previous asset
    - admin user edit: 409 names the clashing field; non-admin 403
    - agents: directory excludes the caller; KYC approval mails the agent
"""

from sqlalchemy import select

from app.core.domain_types import UserRole
from app.models.login_code import LoginCode
from tests.services.fakes import PASSWORD


async def test_password_change_checks_new_password_first(client, make_user):
    _, headers = await make_user()
    response = await client.put("/api/v1/account/password", headers=headers, json={
        "current_password": "wrong-wrong", "new_password": "short", "confirm_password": "short",
    })
    assert response.status_code == 400
    assert "at least 8" in response.json()["error"]["message"]


async def test_password_change_wrong_current(client, make_user):
    _, headers = await make_user()
    response = await client.put("/api/v1/account/password", headers=headers, json={
        "current_password": "wrong-wrong",
        "new_password": "Another#123", "confirm_password": "Another#123",
    })
    assert response.status_code == 401


async def test_password_change_same_password_rejected(client, make_user):
    _, headers = await make_user()
    response = await client.put("/api/v1/account/password", headers=headers, json={
        "current_password": PASSWORD,
        "new_password": PASSWORD, "confirm_password": PASSWORD,
    })
    assert response.status_code == 400


async def test_password_change_success_notifies(client, make_user, fake_clients):
    user, headers = await make_user()
    response = await client.put("/api/v1/account/password", headers=headers, json={
        "current_password": PASSWORD,
        "new_password": "Another#123", "confirm_password": "Another#123",
    })
    assert response.status_code == 200
    assert fake_clients.mail.outbox[-1].to == user.email

    login = await client.post("/api/v1/auth/login", json={
        "email": user.email, "password": "Another#123",
    })
    client.cookies.clear()
    assert login.status_code == 200


async def test_email_change_via_code(client, make_user, test_db):
    _, headers = await make_user()
    sent = await client.post(
        "/api/v1/account/email/code", headers=headers, json={"email": "new@example.com"},
    )
    assert sent.status_code == 200
    code = (await test_db.execute(
        select(LoginCode.code).where(LoginCode.email == "new@example.com")
    )).scalar_one()

    response = await client.put("/api/v1/account/email", headers=headers, json={
        "new_email": "New@Example.com", "code": code,
    })
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "new@example.com"


async def test_email_change_to_taken_address(client, make_user):
    other, _ = await make_user()
    _, headers = await make_user()
    response = await client.post(
        "/api/v1/account/email/code", headers=headers, json={"email": other.email},
    )
    assert response.status_code == 409


async def test_profile_nin_sets_kyc_pending(client, agent):
    _, headers = agent
    response = await client.put("/api/v1/account/profile", headers=headers, json={
        "nin": "12345678901", "organization": "Acme Realty",
        "socials": {"whatsapp": "+2348000000000"},
    })
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["kyc_status"] == "pending"
    assert user["socials"]["whatsapp"] == "+2348000000000"


async def test_profile_whatsapp_must_be_unique(client, make_user):
    await make_user(socials={"whatsapp": "+2348000000000"})
    _, headers = await make_user()
    response = await client.put("/api/v1/account/profile", headers=headers, json={
        "socials": {"whatsapp": "+2348000000000"},
    })
    assert response.status_code == 409


async def test_avatar_replacement_destroys_previous(client, make_user, fake_clients):
    _, headers = await make_user(
        profile_photo={"url": "https://media.test/old.jpg", "public_id": "avatars/old"},
    )
    response = await client.post(
        "/api/v1/account/avatar", headers=headers,
        files={"avatar": ("me.jpg", b"\xff\xd8jpeg", "image/jpeg")},
    )
    assert response.status_code == 200
    assert response.json()["user"]["profile_photo"]["public_id"] == "avatars/img-1"
    assert fake_clients.media.destroyed == ["avatars/old"]


async def test_delete_account(client, make_user):
    _, headers = await make_user()
    response = await client.delete("/api/v1/account", headers=headers)
    assert response.status_code == 200
    me = await client.get("/api/v1/auth/me", headers=headers)
    assert me.status_code == 401


# ─── Admin: users ────────────────────────────────────────────────

async def test_users_list_is_admin_only(client, make_user):
    _, headers = await make_user()
    response = await client.get("/api/v1/users", headers=headers)
    assert response.status_code == 403


async def test_admin_edit_reports_clashing_field(client, admin, make_user):
    _, admin_headers = admin
    await make_user(number="08030000000")
    target, _ = await make_user()
    response = await client.put(
        f"/api/v1/users/{target.id}", headers=admin_headers, json={
            "firstname": "T", "email": target.email, "number": "08030000000",
            "role": "User", "status": "active",
        },
    )
    assert response.status_code == 409
    assert response.json()["error"]["message"].startswith("Phone number")


async def test_admin_can_suspend_user(client, admin, make_user):
    _, admin_headers = admin
    target, target_headers = await make_user()
    response = await client.put(
        f"/api/v1/users/{target.id}", headers=admin_headers, json={
            "firstname": "T", "email": target.email, "role": "User", "status": "suspended",
        },
    )
    assert response.status_code == 200
    assert (await client.get("/api/v1/auth/me", headers=target_headers)).status_code == 403


# ─── Agents ──────────────────────────────────────────────────────

async def test_agent_directory_excludes_caller(client, agent, make_user):
    me, headers = agent
    other, _ = await make_user(UserRole.AGENT)
    response = await client.get("/api/v1/agents", headers=headers)
    ids = [a["id"] for a in response.json()["agents"]]
    assert ids == [str(other.id)]
    assert str(me.id) not in ids


async def test_kyc_approval_mails_agent(client, admin, agent, fake_clients):
    _, admin_headers = admin
    target, _ = agent
    response = await client.put(
        f"/api/v1/agents/{target.id}/kyc", headers=admin_headers,
        json={"kyc_status": "verified"},
    )
    assert response.status_code == 200
    assert response.json()["agent"]["kyc_status"] == "verified"
    assert fake_clients.mail.outbox[-1].to == target.email


async def test_kyc_rejection_sends_nothing(client, admin, agent, fake_clients):
    _, admin_headers = admin
    target, _ = agent
    await client.put(
        f"/api/v1/agents/{target.id}/kyc", headers=admin_headers,
        json={"kyc_status": "rejected"},
    )
    assert fake_clients.mail.outbox == []
