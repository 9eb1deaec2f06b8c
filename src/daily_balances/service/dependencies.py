"""Store lookup for request handlers.

The application owns exactly one BalanceLedgerStore, created in the lifespan
and attached to app.state. Handlers receive it through Depends(get_store);
looking it up when none is active raises StoreNotFoundError rather than
falling back to a fresh store.
"""

from __future__ import annotations

from fastapi import FastAPI, Request

from ..errors import StoreNotFoundError
from ..ledger.store import BalanceLedgerStore

STORE_STATE_ATTR = "store"


def attach_store(app: FastAPI, store: BalanceLedgerStore | None) -> None:
    """Make a store the active store of an application (None detaches)."""
    setattr(app.state, STORE_STATE_ATTR, store)


def require_store(app: FastAPI) -> BalanceLedgerStore:
    """Return the application's active store.

    Raises:
        StoreNotFoundError: No store is attached to the application
    """
    store = getattr(app.state, STORE_STATE_ATTR, None)
    if store is None:
        raise StoreNotFoundError(
            "get_store must be used within an application whose lifespan "
            "created a BalanceLedgerStore"
        )
    return store


def get_store(request: Request) -> BalanceLedgerStore:
    """FastAPI dependency resolving the active store."""
    return require_store(request.app)


__all__ = ["attach_store", "require_store", "get_store", "STORE_STATE_ATTR"]
