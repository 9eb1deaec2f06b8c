"""FastAPI application factory for the balances service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..errors import StoreNotFoundError
from ..ledger.store import BalanceLedgerStore
from ..persistence.file_export import JsonFileExporter
from ..persistence.slots import MemorySlotStore, SlotStore, SQLiteSlotStore
from .config import BalancesConfig, SlotBackend
from .dependencies import attach_store, require_store
from .middleware import CorrelationIdMiddleware
from .router import build_router

logger = logging.getLogger(__name__)


def build_store(config: BalancesConfig) -> BalanceLedgerStore:
    """Create a store wired to the configured slot backend and export directory."""
    slots: SlotStore
    if config.slot_backend is SlotBackend.SQLITE:
        slots = SQLiteSlotStore(config.db_path)
    else:
        slots = MemorySlotStore()

    return BalanceLedgerStore(
        slots=slots,
        files=JsonFileExporter(Path(config.export_dir)),
        storage_key=config.storage_key,
    )


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the process-wide store at startup and release it at shutdown."""
    config: BalancesConfig = app.state.config
    provided: BalanceLedgerStore | None = app.state.provided_store
    store = provided if provided is not None else build_store(config)

    logger.info("Starting balances service...")
    if config.autoload and store.load_data():
        logger.info(f"Restored saved data from slot '{store.storage_key}'")
    attach_store(app, store)

    yield

    logger.info("Shutting down balances service...")
    attach_store(app, None)
    if provided is None:
        store.close()
    logger.info("Balances service shutdown complete")


async def _store_not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Store lookup failed for {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


def create_balances_app(
    config: BalancesConfig,
    store: BalanceLedgerStore | None = None,
) -> FastAPI:
    """Create and configure the balances FastAPI application.

    Args:
        config: BalancesConfig instance
        store: Use this store instead of building one from config. The caller
            keeps ownership and is responsible for closing it.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Daily Balances",
        description="Opening balance, sales and remaining credit tracking",
        version=__version__,
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)
    app.add_exception_handler(StoreNotFoundError, _store_not_found_handler)

    app.include_router(build_router())

    app.state.config = config
    app.state.provided_store = store

    @app.get("/healthz")
    def healthz() -> dict:
        """Health check, including storage slot connectivity."""
        checks = {}
        all_healthy = True

        try:
            active = require_store(app)
            checks["store"] = {"status": "healthy", "employees": len(active.employees)}
        except StoreNotFoundError as e:
            checks["store"] = {"status": "unhealthy", "error": str(e)}
            all_healthy = False
            active = None

        if active is not None:
            slots = active.slots
            if isinstance(slots, SQLiteSlotStore):
                try:
                    slots.ping()
                    last_saved = slots.updated_at(active.storage_key)
                    checks["storage_slot"] = {
                        "status": "healthy",
                        "backend": "sqlite",
                        "last_saved": last_saved.isoformat() if last_saved else None,
                    }
                except Exception as e:
                    checks["storage_slot"] = {"status": "unhealthy", "error": str(e)}
                    all_healthy = False
            else:
                checks["storage_slot"] = {"status": "healthy", "backend": "memory"}

        return {
            "status": "ok" if all_healthy else "degraded",
            "service": "daily-balances",
            "version": __version__,
            "checks": checks,
        }

    return app


def create_app_from_env() -> FastAPI:
    """Create app using environment variable configuration."""
    return create_balances_app(BalancesConfig.from_env())


__all__ = ["build_store", "create_balances_app", "create_app_from_env"]
