"""Infrastructure Layer — database, third-party clients, mail, media host, scheduling and logging.

Invariants:
    - Infrastructure never imports services/ or api/
    - All outbound HTTP goes through ResilientHttpClient (retry/timeout/error mapping)

Design Decisions:
    - Adapters satisfy core/repository_protocols.py so services and tests never touch SDKs
"""
