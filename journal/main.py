"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from journal.config import settings
from journal.database import create_db_and_tables
from journal.utils.logging import setup_logging
from journal.api import accounts, auth, dashboard, markets, news, system, trades


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()

    from journal.services.price_stream import start_price_streams, stop_price_streams
    if settings.price_streams_enabled:
        start_price_streams()

    yield

    await stop_price_streams()


app = FastAPI(
    title="Trade Journal",
    description="Daily trading ledger with targets, projections and market overview",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(auth.router)
app.include_router(trades.router)
app.include_router(dashboard.router)
app.include_router(markets.router)
app.include_router(accounts.router)
app.include_router(news.router)
app.include_router(system.router)
