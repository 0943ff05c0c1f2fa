# -*- encoding: utf-8 -*-
"""
native.py - boundary between idbfuture and an IndexedDB engine.

Everything the wrapper needs to know about raw handles goes through a Native
instance: what kind of handle a value is, how to key it by identity, how to
listen for its events and how to read its attributes. The base class works
for in-process engines whose handle classes carry the DOM class names
(IDBDatabase, IDBObjectStore, ...). BrowserNative (browser.py) adapts the
same operations to Pyodide's JsProxy objects.
"""

from __future__ import annotations

import weakref
from enum import Enum
from typing import Any, Callable, Hashable, Optional

from .errors import as_exception


class Kind(Enum):
    """Kinds of raw handles the wrapper distinguishes."""

    DATABASE = "database"
    OBJECT_STORE = "objectStore"
    INDEX = "index"
    CURSOR = "cursor"
    TRANSACTION = "transaction"
    REQUEST = "request"


# Kinds wrapped into Handles; requests become futures instead.
PROXYABLE_KINDS = frozenset(
    (Kind.DATABASE, Kind.OBJECT_STORE, Kind.INDEX, Kind.CURSOR, Kind.TRANSACTION)
)

# Cursor methods that re-fire the request that produced the cursor.
ADVANCE_METHODS = ("advance", "continue_", "continuePrimaryKey")

KIND_BY_CLASS_NAME = {
    "IDBDatabase": Kind.DATABASE,
    "IDBObjectStore": Kind.OBJECT_STORE,
    "IDBIndex": Kind.INDEX,
    "IDBCursor": Kind.CURSOR,
    "IDBCursorWithValue": Kind.CURSOR,
    "IDBTransaction": Kind.TRANSACTION,
    "IDBRequest": Kind.REQUEST,
    "IDBOpenDBRequest": Kind.REQUEST,
}

Unlisten = Callable[[], None]


class Native:
    """
    Engine adapter for in-process IndexedDB object models.

    Parameters:
        factory: the IDBFactory equivalent (has open() and deleteDatabase())
        kinds: optional override of the class name -> Kind table
    """

    def __init__(self, factory: Any = None, kinds: Optional[dict] = None):
        self._factory = factory
        self.kinds = dict(KIND_BY_CLASS_NAME if kinds is None else kinds)

    @property
    def factory(self) -> Any:
        return self._factory

    def kind_of(self, value: Any) -> Optional[Kind]:
        """Return the Kind of a raw handle, or None for any other value."""
        if value is None or isinstance(value, type):
            return None
        for cls in type(value).__mro__:
            kind = self.kinds.get(cls.__name__)
            if kind is not None:
                return kind
        return None

    def is_function(self, value: Any) -> bool:
        return callable(value) and not isinstance(value, type)

    def identity(self, value: Any) -> Hashable:
        """Key under which the identity cache files a raw value."""
        return id(value)

    def on_dispose(self, value: Any, callback: Callable[[], Any]) -> None:
        """Run callback once the raw value has been garbage collected."""
        weakref.finalize(value, callback)

    def resolve(self, value: Any) -> Any:
        """Normalize engine null/undefined to None."""
        return value

    def get(self, target: Any, name: str) -> Any:
        return self.resolve(getattr(target, name))

    def has(self, target: Any, name: str) -> bool:
        return hasattr(target, name)

    def set(self, target: Any, name: str, value: Any) -> None:
        setattr(target, name, value)

    def call(self, func: Any, args: tuple, kwargs: dict) -> Any:
        return self.resolve(func(*args, **kwargs))

    def listen(self, target: Any, event_type: str, handler: Callable) -> Unlisten:
        """Add an event listener; return a callable that removes it."""
        target.addEventListener(event_type, handler)

        def unlisten():
            target.removeEventListener(event_type, handler)

        return unlisten

    def store_names(self, transaction: Any) -> list:
        return list(transaction.objectStoreNames)

    def error_of(
        self, target: Any, event: Any = None, default: str = "Unknown error"
    ) -> BaseException:
        """
        Return the exception describing a failed request or transaction.

        A transaction sees request errors while they bubble, before its own
        ``error`` is set, so the event target's error is the fallback.
        """
        error = self.resolve(getattr(target, "error", None))
        if error is None and event is not None:
            source = getattr(event, "target", None)
            if source is not None and source is not target:
                error = self.resolve(getattr(source, "error", None))
        return as_exception(error, default)
