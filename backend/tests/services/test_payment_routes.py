"""Subscription payments, advert payments and transaction history.

Tests cover:
    - successful Flutterwave payment: plan, limit and subscription granted,
      previous Active subscription expired, confirmation mail sent
    - gateway failure: 400, transaction kept with the gateway status, user untouched
    - amount/currency mismatch: 400, transaction marked failed
    - unknown payer email 404
    - a gateway id replayed under a new reference: 409, no second transaction
    - transaction history: own list, admin list with user summary, admin delete
    - advert payment: recorded only after gateway success
"""

from sqlalchemy import func, select

from app.core.domain_types import UserRole
from app.core.plans import PaymentVerification
from app.models.subscription import Subscription
from app.models.transaction import Transaction


def _payment(email, **overrides):
    body = {
        "transaction_id": "4975111", "amount": 5000, "currency": "NGN",
        "email": email, "plan": "Premium", "reference": "HH-REF-1", "status": "successful",
    }
    body.update(overrides)
    return body


async def test_successful_payment_grants_plan(client, agent, fake_clients, test_db):
    user, _ = agent
    response = await client.post("/api/v1/subscriptions/payments", json=_payment(user.email))
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["plan"] == "Premium"
    assert body["user"]["listing_limit"] == 50
    assert body["user"]["subscribed"] is True
    assert body["subscription"]["status"] == "Active"
    assert body["transaction"]["status"] == "successful"
    assert fake_clients.flutterwave.calls == ["4975111"]
    assert fake_clients.mail.outbox[-1].subject == "Your subscription is active"


async def test_renewal_leaves_one_active_subscription(client, agent, test_db):
    user, _ = agent
    await client.post("/api/v1/subscriptions/payments", json=_payment(user.email))
    await client.post(
        "/api/v1/subscriptions/payments",
        json=_payment(
            user.email, transaction_id="4975112", reference="HH-REF-2", plan="Professional",
        ),
    )
    statuses = (await test_db.execute(
        select(Subscription.status).where(Subscription.user_id == user.id)
    )).scalars().all()
    assert sorted(statuses) == ["Active", "Expired"]

    await test_db.refresh(user)
    assert user.plan == "Professional"
    assert user.listing_limit is None


async def test_replayed_gateway_id_under_new_reference_conflicts(client, agent, test_db):
    user, _ = agent
    first = await client.post("/api/v1/subscriptions/payments", json=_payment(user.email))
    assert first.status_code == 200

    replay = await client.post(
        "/api/v1/subscriptions/payments",
        json=_payment(user.email, reference="HH-REF-9"),
    )
    assert replay.status_code == 409
    assert replay.json()["error"]["code"] == "CONFLICT"
    count = await test_db.scalar(select(func.count()).select_from(Transaction))
    assert count == 1


async def test_gateway_failure_keeps_user_unchanged(client, agent, fake_clients, test_db):
    user, _ = agent
    fake_clients.flutterwave.reply = PaymentVerification(
        status="failed", amount=0.0, currency="NGN",
    )
    response = await client.post("/api/v1/subscriptions/payments", json=_payment(user.email))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PAYMENT_NOT_VERIFIED"

    txn = (await test_db.execute(select(Transaction))).scalar_one()
    assert txn.status == "failed"
    await test_db.refresh(user)
    assert user.subscribed is False
    assert (await test_db.execute(select(Subscription))).first() is None


async def test_underpayment_marks_transaction_failed(client, agent, fake_clients, test_db):
    user, _ = agent
    fake_clients.flutterwave.reply = PaymentVerification(
        status="successful", amount=100.0, currency="NGN",
    )
    response = await client.post("/api/v1/subscriptions/payments", json=_payment(user.email))
    assert response.status_code == 400
    assert "Amount mismatch" in response.json()["error"]["message"]
    txn = (await test_db.execute(select(Transaction))).scalar_one()
    assert txn.status == "failed"


async def test_currency_mismatch_rejected(client, agent, fake_clients):
    user, _ = agent
    fake_clients.flutterwave.reply = PaymentVerification(
        status="successful", amount=5000.0, currency="USD",
    )
    response = await client.post("/api/v1/subscriptions/payments", json=_payment(user.email))
    assert response.status_code == 400
    assert "Currency mismatch" in response.json()["error"]["message"]


async def test_unknown_payer_404(client):
    response = await client.post(
        "/api/v1/subscriptions/payments", json=_payment("ghost@example.com"),
    )
    assert response.status_code == 404


async def test_retry_reuses_transaction_row(client, agent, test_db):
    user, _ = agent
    await client.post("/api/v1/subscriptions/payments", json=_payment(user.email))
    await client.post("/api/v1/subscriptions/payments", json=_payment(user.email))
    rows = (await test_db.execute(select(Transaction))).scalars().all()
    assert len(rows) == 1


# ─── Histories ───────────────────────────────────────────────────

async def test_subscription_and_transaction_histories(client, admin, agent):
    user, headers = agent
    _, admin_headers = admin
    await client.post("/api/v1/subscriptions/payments", json=_payment(user.email))

    mine = (await client.get("/api/v1/subscriptions/mine", headers=headers)).json()
    assert len(mine["subscriptions"]) == 1
    my_txns = (await client.get("/api/v1/transactions/mine", headers=headers)).json()
    assert my_txns["transactions"][0]["reference"] == "HH-REF-1"

    subs = (await client.get("/api/v1/subscriptions", headers=admin_headers)).json()
    assert subs["subscriptions"][0]["user"]["email"] == user.email
    txns = (await client.get("/api/v1/transactions", headers=admin_headers)).json()
    assert txns["transactions"][0]["user"]["id"] == str(user.id)

    deleted = await client.delete(
        f"/api/v1/transactions/{txns['transactions'][0]['id']}", headers=admin_headers,
    )
    assert deleted.json()["transactions"] == []


async def test_transaction_list_admin_only(client, agent):
    _, headers = agent
    assert (await client.get("/api/v1/transactions", headers=headers)).status_code == 403


# ─── Advert payments ─────────────────────────────────────────────

async def test_advert_payment_recorded(client, make_user, fake_clients):
    payer, _ = await make_user(UserRole.USER)
    response = await client.post("/api/v1/advertisements/payments", json={
        "transaction_id": "77", "plan": "Header Strip", "email": payer.email,
    })
    assert response.status_code == 200
    txn = response.json()["transaction"]
    assert txn["plan"] == "Header Strip"
    assert txn["user_id"] == str(payer.id)
    assert txn["reference"] == "ref-1"


async def test_advert_payment_not_recorded_on_failure(client, fake_clients, test_db):
    fake_clients.flutterwave.reply = PaymentVerification(
        status="failed", amount=0.0, currency="NGN",
    )
    response = await client.post("/api/v1/advertisements/payments", json={
        "transaction_id": "78", "plan": "Carousel", "email": "anyone@example.com",
    })
    assert response.status_code == 400
    assert (await test_db.execute(select(Transaction))).first() is None
