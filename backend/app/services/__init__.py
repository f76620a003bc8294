"""Services Layer — multi-step flows that combine rules, persistence and external adapters.

Invariants:
    - Services take an AsyncSession plus the adapters they need (Protocols from core/)
    - Every mutation bumps its timestamp records inside the same transaction
    - Mail after a committed change is best-effort (services/notifications.py)

Design Decisions:
    - One module per flow; plain CRUD stays in the routers
"""
