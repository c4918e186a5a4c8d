"""FastAPI application factory and lifespan management."""

from contextlib import asynccontextmanager

import zmq
from fastapi import FastAPI
from loguru import logger

from tradejournal.bridge import DealSource, MT5Bridge
from tradejournal.db.sqlite_store import SQLiteDocumentStore
from tradejournal.db.store import DocumentStore
from tradejournal.ingest.sync import AccountSync

# Global app state, read by route handlers
app_state: dict = {}


def init_app_state(store: DocumentStore, source: DealSource, mt5_connected: bool = True):
    app_state.update({
        "store": store,
        "bridge": source,
        "sync": AccountSync(source, store),
        "mt5_connected": mt5_connected,
    })


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    logger.info("Starting Trade Journal...")

    store = SQLiteDocumentStore()
    await store.connect()

    bridge = MT5Bridge()
    try:
        await bridge.connect()
        mt5_connected = True
    except zmq.ZMQError as e:
        logger.warning(f"MT5 not connected: {e}. Syncs will fail until it is reachable.")
        mt5_connected = False

    init_app_state(store, bridge, mt5_connected)
    logger.info(f"Trade Journal ready. MT5 connected: {mt5_connected}")
    yield

    logger.info("Shutting down Trade Journal...")
    if mt5_connected:
        await bridge.disconnect()
    await store.disconnect()
    app_state.clear()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Trade Journal API",
        description="Trade reconciliation and setup metrics for MT5 accounts",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/api/health")
    async def health():
        return {
            "status": "ok",
            "mt5_connected": app_state.get("mt5_connected", False),
        }

    # Include routers
    from tradejournal.api.mt5 import router as mt5_router
    from tradejournal.api.setups import router as setups_router

    app.include_router(mt5_router)
    app.include_router(setups_router)

    return app
