# -*- encoding: utf-8 -*-
"""
extras.py - one-call read/write shortcuts on wrapped databases.

    await db.get("books", 1)
    await db.getAllFromIndex("books", "by_author", "Ann")
    await db.put("books", {"id": 2, "title": "B"})   # resolves on commit

Reads open a readonly transaction and return the operation's own future.
Writes open a readwrite transaction and return ``tx.done``, so they resolve
only once the transaction has committed.
"""

from __future__ import annotations

import types
from typing import Any, Callable, Dict, Optional

from .hooks import HookSet
from .native import Kind

READ_METHODS = ["get", "getKey", "getAll", "getAllKeys", "count"]
WRITE_METHODS = ["put", "add", "delete", "clear"]
INDEX_SUFFIX = "FromIndex"

READ_METHODS += [name + INDEX_SUFFIX for name in READ_METHODS]

_cached_methods: Dict[str, Callable] = {}


def _make_read(name: str) -> Callable:
    def read(db, store_name, *args, **kwargs):
        index_name = None
        target_name = name
        if target_name.endswith(INDEX_SUFFIX):
            if not args:
                raise TypeError(f"{name}() missing required argument: 'index_name'")
            index_name, *args = args
            target_name = target_name[: -len(INDEX_SUFFIX)]
        tx = db.transaction(store_name)
        target = tx.store
        if index_name:
            target = target.index(index_name)
        return getattr(target, target_name)(*args, **kwargs)

    read.__name__ = name
    return read


def _make_write(name: str) -> Callable:
    def write(db, store_name, *args, **kwargs):
        tx = db.transaction(store_name, "readwrite")
        request = getattr(tx.store, name)(*args, **kwargs)
        # A failed write surfaces through tx.done.
        request.add_done_callback(_consume)
        return tx.done

    write.__name__ = name
    return write


def _consume(future) -> None:
    if not future.cancelled():
        future.exception()


def get_method(name: str) -> Optional[Callable]:
    """Return the shortcut implementing name, or None. Memoized by name."""
    method = _cached_methods.get(name)
    if method is not None:
        return method
    if name in READ_METHODS:
        method = _make_read(name)
    elif name in WRITE_METHODS:
        method = _make_write(name)
    else:
        return None
    _cached_methods[name] = method
    return method


class DatabaseExtras(HookSet):
    """Answers shortcut names on databases that lack a native attribute of that name."""

    def _potential_extra(self, target: Any, name: str) -> bool:
        return (
            self.native.kind_of(target) is Kind.DATABASE
            and isinstance(name, str)
            and not self.native.has(target, name)
        )

    def get(self, target: Any, name: str, receiver: Any) -> Any:
        if not self._potential_extra(target, name):
            return super().get(target, name, receiver)
        method = get_method(name)
        if method is not None:
            return types.MethodType(method, receiver)
        return super().get(target, name, receiver)

    def has(self, target: Any, name: str) -> bool:
        if self._potential_extra(target, name) and (
            name in READ_METHODS or name in WRITE_METHODS
        ):
            return True
        return super().has(target, name)


def install(wrapper) -> None:
    wrapper.add_hook(DatabaseExtras)
