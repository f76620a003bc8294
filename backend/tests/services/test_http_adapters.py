"""HTTP adapters — retry policy, gateway normalization, captcha and geolocation.

Tests cover:
    - ResilientHttpClient: retries 5xx then succeeds, fails fast on 4xx, maps exhaustion
    - FlutterwaveClient / PaystackClient: reply normalization (kobo → naira), bad replies
    - RecaptchaVerifier: disabled mode, missing token, siteverify result
    - IpGeoLocator: country lookup, "Unknown" fallback, malformed forwarded addresses
    - ResilientHttpClient: a URL httpx cannot build maps to ExternalServiceError

All traffic goes through httpx.MockTransport; no network access.
"""

import httpx
import pytest

from app.core.errors import ExternalServiceError, PaymentVerificationError
from app.infrastructure.http_client import ResilientHttpClient
from app.infrastructure.payment_gateways import FlutterwaveClient, PaystackClient
from app.infrastructure.visitor_checks import IpGeoLocator, RecaptchaVerifier


def _client(handler, service="Test", base_url="https://api.test", max_retries=2):
    return ResilientHttpClient(
        service,
        base_url=base_url,
        max_retries=max_retries,
        base_delay_ms=1,
        max_delay_ms=2,
        transport=httpx.MockTransport(handler),
    )


# ─── ResilientHttpClient ─────────────────────────────────────────

async def test_retries_server_errors_then_succeeds():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"ok": True})

    http = _client(handler)
    assert await http.get_json("/thing") == {"ok": True}
    assert len(calls) == 3
    await http.aclose()


async def test_client_error_is_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404)

    http = _client(handler, service="Paystack")
    with pytest.raises(ExternalServiceError) as exc:
        await http.get_json("/missing")
    assert exc.value.service == "Paystack"
    assert len(calls) == 1
    await http.aclose()


async def test_retries_exhausted_maps_to_external_error():
    http = _client(lambda request: httpx.Response(500), max_retries=1)
    with pytest.raises(ExternalServiceError, match="after 1 retries"):
        await http.get_json("/down")
    await http.aclose()


async def test_connection_errors_are_retried():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json={"ok": True})

    http = _client(handler)
    assert await http.get_json("/flaky") == {"ok": True}
    await http.aclose()


async def test_non_object_json_rejected():
    http = _client(lambda request: httpx.Response(200, json=[1, 2]))
    with pytest.raises(ExternalServiceError, match="unexpected response shape"):
        await http.get_json("/list")
    await http.aclose()


# ─── Payment gateways ────────────────────────────────────────────

async def test_flutterwave_normalizes_reply():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={
            "status": "success",
            "data": {
                "status": "successful", "amount": 5000, "currency": "NGN",
                "tx_ref": "ref-9", "payment_type": "card",
            },
        })

    gateway = FlutterwaveClient(_client(handler), "FLWSECK-test")
    result = await gateway.verify("12345")
    assert seen == {"path": "/transactions/12345/verify", "auth": "Bearer FLWSECK-test"}
    assert result.succeeded
    assert result.amount == 5000.0
    assert result.reference == "ref-9"
    assert result.channel == "card"


async def test_flutterwave_error_reply_raises():
    handler = lambda request: httpx.Response(200, json={"status": "error", "data": None})  # noqa: E731
    gateway = FlutterwaveClient(_client(handler), "k")
    with pytest.raises(PaymentVerificationError):
        await gateway.verify("1")


async def test_paystack_converts_kobo():
    def handler(request):
        return httpx.Response(200, json={
            "status": True,
            "data": {"status": "success", "amount": 1250050, "currency": "NGN",
                     "reference": "PSK-1", "channel": "bank"},
        })

    result = await PaystackClient(_client(handler), "sk_test").verify("PSK-1")
    assert result.amount == 12500.5
    assert result.succeeded


async def test_paystack_missing_data_raises():
    handler = lambda request: httpx.Response(200, json={"status": False, "message": "nope"})  # noqa: E731
    with pytest.raises(PaymentVerificationError):
        await PaystackClient(_client(handler), "sk").verify("x")


# ─── Visitor checks ──────────────────────────────────────────────

async def test_recaptcha_disabled_accepts_anything():
    def handler(request):
        raise AssertionError("no request expected")

    verifier = RecaptchaVerifier(_client(handler), "secret", enabled=False)
    assert await verifier.verify(None) is True


async def test_recaptcha_missing_token_rejected_without_request():
    def handler(request):
        raise AssertionError("no request expected")

    assert await RecaptchaVerifier(_client(handler), "secret").verify("") is False


async def test_recaptcha_reports_siteverify_result():
    bodies = []

    def handler(request):
        bodies.append(request.content.decode())
        return httpx.Response(200, json={"success": False})

    verifier = RecaptchaVerifier(_client(handler), "secret")
    assert await verifier.verify("tok", remote_ip="1.2.3.4") is False
    assert "response=tok" in bodies[0] and "remoteip=1.2.3.4" in bodies[0]


async def test_geolocation_success_and_fallback():
    def handler(request):
        if request.url.path.endswith("/8.8.8.8"):
            return httpx.Response(200, json={"country": "United States"})
        return httpx.Response(400)

    geo = IpGeoLocator(_client(handler, base_url=""), "http://geo.test/json/")
    assert await geo.country_for("8.8.8.8") == "United States"
    assert await geo.country_for("10.0.0.1") == "Unknown"
    assert await geo.country_for(None) == "Unknown"


async def test_malformed_forwarded_address_never_reaches_lookup():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"country": "Nigeria"})

    geo = IpGeoLocator(_client(handler, base_url=""), "http://geo.test/json")
    assert await geo.country_for("1.2.3.4\tx") == "Unknown"
    assert await geo.country_for("not-an-ip") == "Unknown"
    assert calls == []
    assert await geo.country_for("1.2.3.4") == "Nigeria"
    assert await geo.country_for("2001:db8::1") == "Nigeria"
    assert len(calls) == 2


async def test_unbuildable_url_maps_to_external_service_error():
    http = _client(lambda request: httpx.Response(200, json={}), service="GeoLookup")
    with pytest.raises(ExternalServiceError) as exc:
        await http.get_json("http://geo.test/json/1.2.3.4\tx")
    assert "GeoLookup" in exc.value.message
