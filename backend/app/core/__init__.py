"""Core Layer — pure domain rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are deterministic given their inputs (time is passed in, not read)

Design Decisions:
    - Functional core separated from the imperative shell in services/ and api/
"""
