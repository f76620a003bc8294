"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary (request bodies, serialized rows)
    - Domain enums from core/domain_types.py used for constrained fields
    - Output schemas never declare password_hash

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - Output schemas use from_attributes so routes serialize ORM rows directly
"""
