"""Main FastAPI application for QuickCourt."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from quickcourt.config import APP_VERSION, DB_PATH, ENVIRONMENT, FRONTEND_URL, LOG_LEVEL
from quickcourt.db import Database
from quickcourt.errors import register_exception_handlers
from quickcourt.rate_limit import limiter
from quickcourt.routers import admin, auth, bookings, courts, health, pages, public, time_slots, venues

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = Database(DB_PATH)
    try:
        await database.connect()
    except Exception:
        logger.exception("Could not open database at %s", DB_PATH)
        raise

    app.state.database = database
    app.state.started_at = time.monotonic()
    logger.info("QuickCourt %s started (%s)", APP_VERSION, ENVIRONMENT)
    try:
        yield
    finally:
        await database.close()
        logger.info("QuickCourt stopped")


app = FastAPI(
    title="QuickCourt API",
    description="Book sports courts: venues, courts, weekly time slots and bookings",
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(public.router)
app.include_router(venues.router)
app.include_router(venues.owner_router)
app.include_router(courts.router)
app.include_router(time_slots.router)
app.include_router(bookings.router)
app.include_router(bookings.owner_router)
app.include_router(admin.router)
app.include_router(pages.router)
