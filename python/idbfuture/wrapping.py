# -*- encoding: utf-8 -*-
"""
wrapping.py - turns raw IndexedDB handles into Handles and futures.

    wrapper = Wrapper(native)
    store = wrapper.wrap(raw_store)
    assert wrapper.wrap(raw_store) is store
    assert wrapper.unwrap(store) is raw_store
    record = await store.get(1)          # request -> asyncio.Future

Requests become futures (see futures.py). Databases, transactions, object
stores, indexes and cursors become Handles whose attribute reads go through
the wrapper's hook chain. Callables become functions that call the raw
callable and wrap what it returns. Everything else is returned as is.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from . import logs
from .database import delete_db, open_db
from .futures import promisify_request, transaction_done
from .hooks import DefaultHooks, HookChain, HookSet, Transform
from .identity import IdentityCache
from .native import PROXYABLE_KINDS, Kind, Native


class Handle:
    """
    Wrapped raw handle.

    Attribute reads, ``name in handle`` and ``async for`` are answered by the
    owning wrapper's hook chain; attribute writes go to the raw handle.
    """

    __slots__ = ("_target", "_kind", "_wrapper", "_request", "__weakref__")

    def __init__(self, wrapper: "Wrapper", target: Any, kind: Kind):
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_kind", kind)
        object.__setattr__(self, "_wrapper", wrapper)
        object.__setattr__(self, "_request", None)

    def __getattr__(self, name: str) -> Any:
        if name in Handle.__slots__:
            raise AttributeError(name)
        return self._wrapper.hooks.head.get(self._target, name, self)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in Handle.__slots__:
            raise AttributeError(f"{name} is read-only")
        self._wrapper.native.set(self._target, name, value)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self._wrapper.hooks.head.has(self._target, name)

    def __aiter__(self):
        try:
            start = self._wrapper.hooks.head.get(self._target, "__aiter__", self)
        except AttributeError:
            raise TypeError(f"{self._kind.value} handle is not async iterable") from None
        return start()

    def __repr__(self) -> str:
        return f"<Handle {self._kind.value} {self._target!r}>"


def kind_of(handle: Handle) -> Kind:
    return handle._kind


class Wrapper:
    """
    Wraps raw values from one engine, with one identity cache and hook chain.

    Parameters:
        native: engine adapter (Native or BrowserNative)
    """

    def __init__(self, native: Native):
        self.native = native
        self.cache = IdentityCache(native.identity, native.on_dispose)
        self.hooks = HookChain(DefaultHooks(self))
        self.wrapped = 0

    def add_hook(self, transform: Transform) -> HookSet:
        """Put transform(current head) at the head of the hook chain."""
        if self.wrapped:
            logs.emit(
                f"hook {_name_of(transform)} added after {self.wrapped} handles were "
                "wrapped; existing handles see it immediately",
                "warn",
                source="idbfuture.hooks",
            )
        head = self.hooks.add(transform)
        logs.emit(f"registered hook {_name_of(transform)}", "debug", source="idbfuture.hooks")
        return head

    def wrap(self, value: Any) -> Any:
        if value is None:
            return None
        kind = self.native.kind_of(value)
        # A request can resolve many times (cursors), so its futures are
        # never cached in the forward direction.
        if kind is Kind.REQUEST:
            return promisify_request(self, value)

        cached = self.cache.lookup(value)
        if cached is not None:
            return cached

        wrapped = self._transform(value, kind)
        if wrapped is not value:
            self.cache.remember(value, wrapped)
        return wrapped

    def unwrap(self, value: Any) -> Any:
        return self.cache.original(value)

    def open_db(self, name: str, version: Optional[int] = None, **callbacks):
        return open_db(self, name, version, **callbacks)

    def delete_db(self, name: str, **callbacks):
        return delete_db(self, name, **callbacks)

    def done_future(self, handle: Handle):
        return self.cache.done_future(handle._target)

    def cursor_request(self, handle: Handle) -> Any:
        return handle._request

    def bind_request(self, handle: Any, request: Any) -> None:
        """Remember the request that produced a cursor, for its advance methods."""
        if isinstance(handle, Handle) and handle._kind is Kind.CURSOR:
            object.__setattr__(handle, "_request", request)

    def _transform(self, value: Any, kind: Optional[Kind]) -> Any:
        if kind is None and self.native.is_function(value):
            return self._wrap_function(value)
        if kind not in PROXYABLE_KINDS:
            return value

        handle = Handle(self, value, kind)
        self.wrapped += 1
        if kind is Kind.TRANSACTION:
            done = self.cache.done_future(value)
            if done is None:
                done = transaction_done(self, value)
                self.cache.remember_done(value, done)
            if not done.done():
                self.cache.pin(value, handle)
                done.add_done_callback(lambda _: self.cache.unpin(value))
        return handle

    def _wrap_function(self, func: Any) -> Callable:
        native = self.native
        # Unbound functions are called with the raw receiver, never the Handle.
        unbound = getattr(func, "__self__", None) is None

        def call(*args, **kwargs):
            if unbound and args and isinstance(args[0], Handle):
                args = (args[0]._target,) + args[1:]
            return self.wrap(native.call(func, args, kwargs))

        call.__name__ = str(getattr(func, "__name__", "call"))
        call.__wrapped__ = func
        return call


def _name_of(transform: Any) -> str:
    return getattr(transform, "__qualname__", None) or repr(transform)
