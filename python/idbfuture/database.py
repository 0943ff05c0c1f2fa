# -*- encoding: utf-8 -*-
"""
database.py - opening and deleting databases.

Usage:
    def upgrade(db, old_version, new_version, transaction):
        if old_version < 1:
            db.createObjectStore("books", {"keyPath": "id"})

    db = await open_db("library", 1, upgrade=upgrade)
    await db.put("books", {"id": 1, "title": "A"})
    db.close()
    await delete_db("library")
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Callable, Optional

from . import logs

if TYPE_CHECKING:  # pragma: no cover
    from .wrapping import Wrapper


def open_db(
    wrapper: "Wrapper",
    name: str,
    version: Optional[int] = None,
    *,
    blocked: Optional[Callable[[], Any]] = None,
    upgrade: Optional[Callable[[Any, int, int, Any], Any]] = None,
    blocking: Optional[Callable[[Any], Any]] = None,
) -> asyncio.Future:
    """
    Open a database.

    Args:
        name: Database name
        version: Schema version; None opens the current version
        blocked: Called when other connections delay the open/upgrade
        upgrade: Called as upgrade(db, old_version, new_version, transaction)
                 while the version change transaction runs. It must not await.
        blocking: Listener for ``versionchange`` on the opened database,
                  called when another connection wants to upgrade or delete it

    Returns:
        Future resolving with the wrapped database
    """
    native = wrapper.native
    factory = native.factory
    if version is None:
        request = native.call(factory.open, (name,), {})
    else:
        request = native.call(factory.open, (name, version), {})
    open_future = wrapper.wrap(request)
    unlisteners = []

    if upgrade is not None:

        def on_upgrade(event):
            upgrade(
                wrapper.wrap(native.get(request, "result")),
                event.oldVersion,
                event.newVersion,
                wrapper.wrap(native.get(request, "transaction")),
            )

        unlisteners.append(native.listen(request, "upgradeneeded", on_upgrade))

    def on_blocked(event=None):
        logs.emit(
            f"opening database '{name}' is blocked by another connection",
            "debug" if blocked is not None else "warn",
            source="idbfuture.database",
        )
        if blocked is not None:
            blocked()

    unlisteners.append(native.listen(request, "blocked", on_blocked))

    def settled(future):
        while unlisteners:
            unlisteners.pop()()
        if blocking is None or future.cancelled():
            return
        # A failed open is left for the caller to retrieve.
        if future.exception() is not None:
            return
        db = wrapper.unwrap(future.result())

        def on_versionchange(event):
            logs.emit(
                f"database '{name}' is blocking a version change",
                "debug",
                source="idbfuture.database",
            )
            blocking(event)

        native.listen(db, "versionchange", on_versionchange)

    open_future.add_done_callback(settled)
    return open_future


def delete_db(
    wrapper: "Wrapper", name: str, *, blocked: Optional[Callable[[], Any]] = None
) -> asyncio.Future:
    """
    Delete a database.

    WARNING: This is destructive and cannot be undone.

    Args:
        name: Database name
        blocked: Called when open connections delay the deletion

    Returns:
        Future resolving with None
    """
    native = wrapper.native
    request = native.call(native.factory.deleteDatabase, (name,), {})
    request_future = wrapper.wrap(request)

    def on_blocked(event=None):
        logs.emit(
            f"deleting database '{name}' is blocked by open connections",
            "debug" if blocked is not None else "warn",
            source="idbfuture.database",
        )
        if blocked is not None:
            blocked()

    unlisten = native.listen(request, "blocked", on_blocked)
    request_future.add_done_callback(lambda _: unlisten())

    async def deleted():
        await request_future
        return None

    return asyncio.ensure_future(deleted())
