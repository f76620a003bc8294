"""Slug helpers for blog and product URLs."""

import re
import secrets
import string
import unicodedata

_ALPHABET = string.ascii_lowercase + string.digits


def slugify(value: str) -> str:
    """Lowercase ASCII slug: accents stripped, non-alphanumerics collapsed to '-'."""
    normalized = unicodedata.normalize("NFKD", value or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    return re.sub(r"[^a-z0-9]+", "-", ascii_text).strip("-")


def random_token(length: int = 20) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def unique_product_slug(name: str) -> str:
    return f"{random_token(20)}{slugify(name)}"
