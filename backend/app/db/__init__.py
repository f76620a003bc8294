"""Declarative Base shared by the ORM models and alembic.

Sessions come from infrastructure/database.py; this package holds no engine.
"""
