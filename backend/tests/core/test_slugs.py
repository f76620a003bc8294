"""Slug helpers."""

from app.core.slugs import random_token, slugify, unique_product_slug


def test_slugify_strips_accents_and_punctuation():
    assert slugify("  Café Deluxe: 3-Bed Flat! ") == "cafe-deluxe-3-bed-flat"


def test_slugify_empty():
    assert slugify("!!!") == ""


def test_random_token_alphabet():
    token = random_token(20)
    assert len(token) == 20
    assert token.isalnum() and token == token.lower()


def test_product_slugs_differ_for_same_name():
    a, b = unique_product_slug("Door Mat"), unique_product_slug("Door Mat")
    assert a.endswith("door-mat") and b.endswith("door-mat")
    assert a != b
    assert len(a) == 20 + len("door-mat")
