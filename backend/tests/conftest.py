"""Root conftest — shared test configuration."""

import os

# Tests never reach real gateways, mail relays or databases
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-enough-length-1234")
os.environ.setdefault("MAIL_BACKEND", "console")
os.environ.setdefault("RECAPTCHA_ENABLED", "false")
os.environ.setdefault("MONITORS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")
