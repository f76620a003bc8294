"""API Layer — FastAPI routers, auth dependencies and error handlers.

Invariants:
    - Routers registered explicitly in main.py (no auto-discovery)
    - All endpoints return JSON objects: `message` plus resource keys on success,
      the error envelope on failure

Design Decisions:
    - Routes stay thin: CRUD inline, multi-step flows delegated to services/
"""
