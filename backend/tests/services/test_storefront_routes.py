"""Storefront routes — products, coupons and Paystack-verified orders.

Tests cover:
    - products: multipart creation with JSON fields, pending until made available,
      unavailable product 403 by slug, views counted, delete destroys images
    - coupons: duplicate code 409, validate returns discount and new total,
      used and expired coupons rejected
    - orders: total priced server-side, coupon applied and consumed, underpayment
      rejected, duplicate reference 409, guest checkout, owner cancel rules
"""

import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from sqlalchemy import select

from app.core.domain_types import UserRole
from app.core.plans import PaymentVerification
from app.models.coupon import Coupon
from app.models.product import Product


async def _product(test_db, **fields):
    product = Product(
        name=fields.pop("name", "Door Mat"),
        slug=fields.pop("slug", f"product-{uuid4().hex}"),
        sale_price=fields.pop("sale_price", 2500.0),
        status=fields.pop("status", "available"),
        images=fields.pop("images", [{"url": "https://media.test/mat.jpg", "public_id": "products/mat"}]),
        **fields,
    )
    test_db.add(product)
    await test_db.commit()
    await test_db.refresh(product)
    return product


async def _coupon(test_db, code="SAVE10", pct=10, expires_in=timedelta(days=7), **fields):
    coupon = Coupon(
        code=code, discount_percentage=pct,
        expiry_date=datetime.now(timezone.utc) + expires_in, **fields,
    )
    test_db.add(coupon)
    await test_db.commit()
    return coupon


# ─── Products ────────────────────────────────────────────────────

async def test_product_created_pending(client, admin, fake_clients):
    _, headers = admin
    response = await client.post(
        "/api/v1/products", headers=headers,
        data={
            "name": "Luxury Door Mat", "sale_price": "4500", "regular_price": "6000",
            "sale": "true", "sizes": json.dumps(["S", "M"]),
            "description": json.dumps({"material": "coir"}),
        },
        files=[("images", ("m.jpg", b"m", "image/jpeg"))],
    )
    assert response.status_code == 201
    product = response.json()["product"]
    assert product["status"] == "pending"
    assert product["sale"] is True
    assert product["sizes"] == ["S", "M"]
    assert product["slug"].endswith("luxury-door-mat")
    assert (await client.get("/api/v1/products")).json()["products"] == []


async def test_product_sizes_must_be_list(client, admin):
    _, headers = admin
    response = await client.post(
        "/api/v1/products", headers=headers,
        data={"name": "Mat", "sale_price": "10", "sizes": json.dumps({"S": 1})},
    )
    assert response.status_code == 400


async def test_product_visibility_by_status(client, admin, test_db):
    _, headers = admin
    product = await _product(test_db, status="pending", slug="mat-1")
    assert (await client.get("/api/v1/products/mat-1")).status_code == 403

    await client.put(
        f"/api/v1/products/{product.id}/status", headers=headers, json={"status": "available"},
    )
    await client.get("/api/v1/products/mat-1")
    read = await client.get("/api/v1/products/mat-1")
    assert read.status_code == 200
    assert read.json()["product"]["views"] == 2
    assert (await client.get("/api/v1/products/missing")).status_code == 404


async def test_product_delete_destroys_images(client, admin, test_db, fake_clients):
    _, headers = admin
    product = await _product(test_db)
    response = await client.delete(f"/api/v1/products/{product.id}", headers=headers)
    assert response.json()["products"] == []
    assert fake_clients.media.destroyed == ["products/mat"]


# ─── Coupons ─────────────────────────────────────────────────────

async def test_coupon_create_and_duplicate(client, admin):
    _, headers = admin
    body = {
        "code": "welcome20", "discount_percentage": 20,
        "expiry_date": (datetime.now(timezone.utc) + timedelta(days=3)).isoformat(),
    }
    created = await client.post("/api/v1/coupons", headers=headers, json=body)
    assert created.status_code == 201
    assert created.json()["coupon"]["code"] == "WELCOME20"
    duplicate = await client.post("/api/v1/coupons", headers=headers, json=body)
    assert duplicate.status_code == 409


async def test_coupon_validate(client, test_db):
    await _coupon(test_db, code="SAVE10", pct=10)
    response = await client.post(
        "/api/v1/coupons/validate", json={"code": "save10", "order_total": 15000},
    )
    assert response.json() == {"message": "Coupon applied", "discount": 1500.0, "new_total": 13500.0}


async def test_used_and_expired_coupons_rejected(client, test_db):
    await _coupon(test_db, code="USED", is_used=True)
    await _coupon(test_db, code="OLD", expires_in=timedelta(days=-1))
    used = await client.post("/api/v1/coupons/validate", json={"code": "USED", "order_total": 100})
    old = await client.post("/api/v1/coupons/validate", json={"code": "OLD", "order_total": 100})
    assert used.json()["error"]["code"] == "COUPON_USED"
    assert old.json()["error"]["code"] == "COUPON_EXPIRED"
    missing = await client.post("/api/v1/coupons/validate", json={"code": "NOPE", "order_total": 1})
    assert missing.status_code == 404


# ─── Orders ──────────────────────────────────────────────────────

DELIVERY = {
    "firstname": "Kemi", "lastname": "Bello", "email": "kemi@example.com",
    "number": "0802", "address": "1 Marina", "state": "Lagos",
}


def _order(product_id, reference="PSK-100", quantity=2, **extra):
    return {
        "items": [{"product_id": str(product_id), "quantity": quantity}],
        "delivery_details": DELIVERY, "reference": reference, **extra,
    }


async def test_order_priced_server_side(client, make_user, test_db, fake_clients):
    product = await _product(test_db, sale_price=2500.0)
    _, headers = await make_user()
    response = await client.post("/api/v1/orders", headers=headers, json=_order(product.id))
    assert response.status_code == 201
    order = response.json()["order"]
    assert order["total"] == 5000.0
    assert order["items"][0]["image"] == "https://media.test/mat.jpg"
    assert order["order_status"] == "processing"
    assert order["payment_method"] == "card"
    assert fake_clients.paystack.calls == ["PSK-100"]

    mine = (await client.get("/api/v1/orders/mine", headers=headers)).json()["orders"]
    assert [o["id"] for o in mine] == [order["id"]]


async def test_order_with_coupon_consumes_it(client, test_db, fake_clients):
    product = await _product(test_db, sale_price=5000.0)
    await _coupon(test_db, code="HALF", pct=50)
    fake_clients.paystack.reply = PaymentVerification(
        status="success", amount=5000.0, currency="NGN", reference="PSK-1", channel="card",
    )
    response = await client.post(
        "/api/v1/orders", json=_order(product.id, coupon_code="half"),
    )
    assert response.status_code == 201
    order = response.json()["order"]
    assert (order["discount"], order["total"], order["user_id"]) == (5000.0, 5000.0, None)

    coupon = (await test_db.execute(
        select(Coupon).where(Coupon.code == "HALF").execution_options(populate_existing=True)
    )).scalar_one()
    assert coupon.is_used is True


async def test_underpaid_order_rejected(client, test_db, fake_clients):
    product = await _product(test_db, sale_price=5000.0)
    response = await client.post("/api/v1/orders", json=_order(product.id, quantity=3))
    assert response.status_code == 400
    assert "Amount mismatch" in response.json()["error"]["message"]


async def test_duplicate_payment_reference_conflicts(client, test_db):
    product = await _product(test_db, sale_price=1000.0)
    await client.post("/api/v1/orders", json=_order(product.id, quantity=1))
    again = await client.post("/api/v1/orders", json=_order(product.id, quantity=1))
    assert again.status_code == 409


async def test_unavailable_product_cannot_be_ordered(client, test_db):
    product = await _product(test_db, status="sold out")
    response = await client.post("/api/v1/orders", json=_order(product.id, quantity=1))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PRODUCT_UNAVAILABLE"


async def test_owner_cancel_rules(client, make_user, admin, test_db):
    product = await _product(test_db, sale_price=1000.0)
    _, owner = await make_user()
    _, stranger = await make_user()
    _, admin_headers = admin
    order_id = (await client.post(
        "/api/v1/orders", headers=owner, json=_order(product.id, quantity=1),
    )).json()["order"]["id"]
    url = f"/api/v1/orders/{order_id}/status"

    assert (await client.put(url, headers=stranger, json={"status": "cancelled"})).status_code == 403
    assert (await client.put(url, headers=owner, json={"status": "shipped"})).status_code == 403

    shipped = await client.put(url, headers=admin_headers, json={"status": "shipped"})
    assert shipped.json()["order"]["order_status"] == "shipped"
    late = await client.put(url, headers=owner, json={"status": "cancelled"})
    assert late.status_code == 400
    assert late.json()["error"]["code"] == "ORDER_NOT_CANCELLABLE"


async def test_order_lookup_is_public(client, test_db):
    product = await _product(test_db, sale_price=1000.0)
    order_id = (await client.post(
        "/api/v1/orders", json=_order(product.id, quantity=1),
    )).json()["order"]["id"]
    response = await client.get(f"/api/v1/orders/{order_id}")
    assert response.json()["order"]["payment_reference"] == "PSK-100"


async def test_all_orders_admin_only(client, make_user):
    _, headers = await make_user(UserRole.AGENT)
    assert (await client.get("/api/v1/orders", headers=headers)).status_code == 403
