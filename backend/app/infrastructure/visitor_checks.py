"""Visitor Checks — reCAPTCHA verification and IP geolocation for public forms.

Invariants:
    - RecaptchaVerifier returns False (never raises) for a missing token
    - Disabled verifier (development) accepts every token
    - IpGeoLocator returns "Unknown" on any lookup failure; geolocation never blocks a form
    - Only a parseable IPv4/IPv6 address is ever put into the lookup URL
"""

import ipaddress
import logging

from app.core.errors import ExternalServiceError
from app.infrastructure.http_client import ResilientHttpClient

logger = logging.getLogger(__name__)

UNKNOWN_COUNTRY = "Unknown"


class RecaptchaVerifier:
    """Google reCAPTCHA siteverify client."""

    VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"

    def __init__(self, http: ResilientHttpClient, secret_key: str, enabled: bool = True):
        self.http = http
        self.secret_key = secret_key
        self.enabled = enabled

    async def verify(self, token: str | None, remote_ip: str | None = None) -> bool:
        if not self.enabled:
            return True
        if not token:
            return False
        data = {"secret": self.secret_key, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip
        result = await self.http.post_json(self.VERIFY_URL, data=data)
        return bool(result.get("success"))


class IpGeoLocator:
    """Country lookup via an ip-api compatible endpoint."""

    def __init__(self, http: ResilientHttpClient, lookup_url: str):
        self.http = http
        self.lookup_url = lookup_url.rstrip("/")

    async def country_for(self, ip: str | None) -> str:
        if not ip:
            return UNKNOWN_COUNTRY
        try:
            address = ipaddress.ip_address(ip)
        except ValueError:
            logger.warning(f"Geolocation skipped for malformed address {ip!r}")
            return UNKNOWN_COUNTRY
        try:
            data = await self.http.get_json(f"{self.lookup_url}/{address}")
        except ExternalServiceError as e:
            logger.warning(f"Geolocation lookup failed: {e.message}")
            return UNKNOWN_COUNTRY
        return data.get("country") or UNKNOWN_COUNTRY
