"""
hooks.py - interception of attribute access on wrapped handles.

Every attribute read and membership check on a Handle is answered by the head
of a HookChain. A hook set answers what it knows about and hands everything
else to the hook set it replaced, so extensions stack without touching each
other:

    class Shout(HookSet):
        def get(self, target, name, receiver):
            if name == "shout":
                return lambda: receiver.name.upper()
            return super().get(target, name, receiver)

    wrapper.add_hook(Shout)

A transform is any callable taking the previous head and returning the new
one; a HookSet subclass is itself such a callable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

from .native import ADVANCE_METHODS, Kind

if TYPE_CHECKING:  # pragma: no cover
    from .wrapping import Wrapper


class HookSet:
    """Hook set that defers every query to the one it replaced."""

    def __init__(self, fallback: Optional["HookSet"] = None):
        self.fallback = fallback
        self.native = fallback.native if fallback is not None else None

    def get(self, target: Any, name: str, receiver: Any) -> Any:
        return self.fallback.get(target, name, receiver)

    def has(self, target: Any, name: str) -> bool:
        return self.fallback.has(target, name)


Transform = Callable[[HookSet], HookSet]


class DefaultHooks(HookSet):
    """
    Bottom of every chain: reads the raw attribute and wraps it.

    Transactions answer ``done`` with their completion future and ``store``
    with their only object store (None when they span zero or several).
    Cursor advance methods return a fresh future for the next position.
    """

    def __init__(self, wrapper: "Wrapper"):
        super().__init__(None)
        self.wrapper = wrapper
        self.native = wrapper.native

    def get(self, target: Any, name: str, receiver: Any) -> Any:
        kind = self.native.kind_of(target)
        if kind is Kind.TRANSACTION:
            if name == "done":
                return self.wrapper.done_future(receiver)
            if name == "store":
                names = self.native.store_names(target)
                if len(names) != 1:
                    return None
                return receiver.objectStore(names[0])
        if kind is Kind.CURSOR and name in ADVANCE_METHODS:
            return self._advance(target, name, receiver)
        return self.wrapper.wrap(self.native.get(target, name))

    def has(self, target: Any, name: str) -> bool:
        if self.native.kind_of(target) is Kind.TRANSACTION and name in ("done", "store"):
            return True
        return self.native.has(target, name)

    def _advance(self, target: Any, name: str, receiver: Any) -> Callable:
        method = self.native.get(target, name)
        wrapper = self.wrapper

        def advance(*args, **kwargs):
            self.native.call(method, args, kwargs)
            request = wrapper.cursor_request(receiver)
            if request is None and self.native.has(target, "request"):
                request = self.native.get(target, "request")
            return wrapper.wrap(request)

        advance.__name__ = name
        return advance


class HookChain:
    """Ordered hook sets; the most recently added one is consulted first."""

    def __init__(self, base: HookSet):
        self.head = base
        self.added = 0

    def add(self, transform: Transform) -> HookSet:
        self.head = transform(self.head)
        self.added += 1
        return self.head
