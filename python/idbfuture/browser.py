# -*- encoding: utf-8 -*-
"""
browser.py - Native adapter for IndexedDB under Pyodide/PyScript.

Raw handles are JsProxy objects. Pyodide hands out a fresh JsProxy every time
a JS object crosses into Python, so identity is keyed on ``js_id`` rather than
on the Python object. Python callables given to JS as event listeners must be
wrapped with create_proxy() and destroyed once removed.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Hashable, Optional

from .errors import EngineUnavailableError
from .native import Kind, Native, Unlisten

# Pyodide/PyScript browser environment imports
try:
    from js import Object, indexedDB
    from pyodide.ffi import create_proxy, to_js
except ImportError:
    Object = None
    indexedDB = None
    create_proxy = None
    to_js = None


def _is_js_null(value: Any) -> bool:
    """Return True if value represents JS null/undefined in Pyodide."""
    if value is None:
        return True
    return type(value).__name__ in ("JsNull", "JsUndefined")


def _is_js_proxy(value: Any) -> bool:
    return hasattr(type(value), "js_id")


_PLAIN_CONSTRUCTORS = ("Object", "Array")


def _constructor_name(value: Any) -> Optional[str]:
    return getattr(getattr(value, "constructor", None), "name", None)


class BrowserNative(Native):
    """
    Engine adapter over ``js.indexedDB``.

    Parameters:
        factory: IDBFactory proxy; defaults to the page's ``indexedDB``
    """

    def __init__(self, factory: Any = None):
        super().__init__(factory)

    @property
    def factory(self) -> Any:
        factory = self._factory if self._factory is not None else indexedDB
        if factory is None:
            raise EngineUnavailableError(
                "IndexedDB not available - not running in browser environment"
            )
        return factory

    def kind_of(self, value: Any) -> Optional[Kind]:
        if _is_js_null(value) or not _is_js_proxy(value):
            return None
        return self.kinds.get(_constructor_name(value))

    def identity(self, value: Any) -> Hashable:
        if _is_js_proxy(value):
            return ("js", value.js_id)
        return ("py", id(value))

    def on_dispose(self, value: Any, callback: Callable[[], Any]) -> None:
        # A JsProxy dies long before its JS object, and js_id is never reused,
        # so entries keyed by js_id are kept.
        return None

    def resolve(self, value: Any) -> Any:
        if _is_js_null(value):
            return None
        # Records and key arrays come back as Python data; handles stay proxies.
        if _is_js_proxy(value) and _constructor_name(value) in _PLAIN_CONSTRUCTORS:
            return value.to_py()
        return value

    def call(self, func: Any, args: tuple, kwargs: dict) -> Any:
        return self.resolve(func(*(self._to_js(arg) for arg in args), **kwargs))

    def _to_js(self, value: Any) -> Any:
        # Containers would otherwise reach IndexedDB as PyProxy objects,
        # which the structured clone algorithm rejects.
        if to_js is not None and isinstance(value, (dict, list, tuple, bytes)):
            return to_js(value, dict_converter=Object.fromEntries)
        return value

    def listen(self, target: Any, event_type: str, handler: Callable) -> Unlisten:
        proxy = create_proxy(handler)
        target.addEventListener(event_type, proxy)
        removed = False

        def unlisten():
            nonlocal removed
            if removed:
                return
            removed = True
            target.removeEventListener(event_type, proxy)
            # The proxy may be the one currently executing.
            asyncio.get_event_loop().call_soon(proxy.destroy)

        return unlisten

    def store_names(self, transaction: Any) -> list:
        names = transaction.objectStoreNames
        return [names.item(i) for i in range(names.length)]


__all__ = ["BrowserNative"]
