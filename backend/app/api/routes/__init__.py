"""Route Modules — one file per resource.

Invariants:
    - Each module defines its own APIRouter with an /api/v1 prefix and tags
    - Authorization expressed as dependencies (get_current_user, require_roles)

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
