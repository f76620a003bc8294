"""HouseHunter API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map HouseHunterError → structured JSON responses
    - CORS configured from settings, with credentials (the session cookie)
    - Database, external clients and the expiry monitor built in the lifespan
      and released in reverse order on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Monitor jobs close over app.state.clients so tests that swap the clients
      also swap what the sweeps mail through
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.error_handlers import register_error_handlers
from app.api.routes import (
    account, admin, advertisements, agents, auth, blogs, contacts, coupons,
    enquiries, faqs, health, listings, mail, newsletter, orders, products,
    projects, reports, statistics, subscriptions, testimonials, timestamps,
    transactions, users, wishlist,
)
from app.config import get_settings
from app.infrastructure import database
from app.infrastructure.clients import build_clients
from app.infrastructure.database import init_db
from app.infrastructure.observability import setup_logging
from app.infrastructure.scheduler import ExpiryMonitor
from app.services.monitors import sweep_advertisements, sweep_subscriptions

logger = logging.getLogger(__name__)


def _monitor_jobs(app: FastAPI):
    settings = get_settings()

    async def subscription_job(db):
        return await sweep_subscriptions(db, app.state.clients.mail, settings)

    async def advertisement_job(db):
        return await sweep_advertisements(db)

    return [
        ("subscription-expiry", subscription_job),
        ("advertisement-expiry", advertisement_job),
    ]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.clients = build_clients(settings)

    monitor = None
    if settings.monitors_enabled:
        monitor = ExpiryMonitor(_monitor_jobs(app), settings.monitor_run_hour_utc)
        monitor.start()
    logger.info("HouseHunter API started")
    yield
    logger.info("HouseHunter API shutting down")
    if monitor is not None:
        await monitor.stop()
    await app.state.clients.aclose()
    if database.db_manager is not None:
        await database.db_manager.dispose()


app = FastAPI(
    title="HouseHunter API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(health.ping_router)
app.include_router(timestamps.router)
app.include_router(auth.router)
app.include_router(account.router)
app.include_router(users.router)
app.include_router(agents.router)
app.include_router(listings.router)
app.include_router(wishlist.router)
app.include_router(enquiries.router)
app.include_router(subscriptions.router)
app.include_router(transactions.router)
app.include_router(advertisements.router)
app.include_router(reports.router)
app.include_router(statistics.router)
app.include_router(faqs.router)
app.include_router(blogs.router)
app.include_router(testimonials.router)
app.include_router(contacts.router)
app.include_router(newsletter.router)
app.include_router(projects.router)
app.include_router(products.router)
app.include_router(coupons.router)
app.include_router(orders.router)
app.include_router(mail.router)
app.include_router(admin.router)

# Static files — serves the storefront build in production
# Mounted AFTER API routes so /api/v1/* takes precedence
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
