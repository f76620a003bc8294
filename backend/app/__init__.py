"""HouseHunter Application Package — real-estate listings, subscriptions, storefront and CMS API.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
