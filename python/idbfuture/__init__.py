# -*- encoding: utf-8 -*-
"""
idbfuture - IndexedDB with asyncio futures.

Usage (PyScript/Pyodide):
    from idbfuture import open_db

    def upgrade(db, old_version, new_version, tx):
        store = db.createObjectStore("books", {"keyPath": "id"})
        store.createIndex("by_author", "author")

    db = await open_db("library", 1, upgrade=upgrade)

    await db.add("books", {"id": 1, "title": "A", "author": "Ann"})
    book = await db.get("books", 1)

    tx = db.transaction("books")
    async for cursor in tx.store.index("by_author").iterate("Ann"):
        print(cursor.value)
    await tx.done

Outside a browser, hand an in-process engine to configure() or build a
separate wrapper with create_wrapper().
"""

from __future__ import annotations

from typing import Any, Optional

from .browser import BrowserNative
from .errors import (
    EngineUnavailableError,
    IndexedDBError,
    IndexedDBRequestError,
    TransactionAbortedError,
)
from .hooks import HookSet
from .iterate import CursorFacade, CursorSequence, CursorState
from .native import Kind, Native
from .runtime import DEFAULT_EXTENSIONS, configure, create_wrapper, default_wrapper
from .wrapping import Handle, Wrapper

__version__ = "0.1.0"


def open_db(name: str, version: Optional[int] = None, **callbacks):
    """Open a database with the default wrapper. See database.open_db."""
    return default_wrapper().open_db(name, version, **callbacks)


def delete_db(name: str, **callbacks):
    """Delete a database with the default wrapper. See database.delete_db."""
    return default_wrapper().delete_db(name, **callbacks)


def wrap(value: Any) -> Any:
    return default_wrapper().wrap(value)


def unwrap(value: Any) -> Any:
    return default_wrapper().unwrap(value)


def add_hook(transform) -> HookSet:
    return default_wrapper().add_hook(transform)


__all__ = [
    "DEFAULT_EXTENSIONS",
    "BrowserNative",
    "CursorFacade",
    "CursorSequence",
    "CursorState",
    "EngineUnavailableError",
    "Handle",
    "HookSet",
    "IndexedDBError",
    "IndexedDBRequestError",
    "Kind",
    "Native",
    "TransactionAbortedError",
    "Wrapper",
    "add_hook",
    "configure",
    "create_wrapper",
    "default_wrapper",
    "delete_db",
    "open_db",
    "unwrap",
    "wrap",
]
