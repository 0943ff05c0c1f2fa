"""
identity.py - raw <-> wrapped identity cache.

Forward entries are filed under the engine's identity key for the raw value
and hold the wrapped value weakly; the wrapped value holds its raw value, so
an entry lives exactly as long as the wrapper does. Reverse entries are keyed
weakly by the wrapped value. Futures made from requests only get a reverse
entry, since one request can back many futures.

Transactions are pinned (held strongly) from the moment they are wrapped
until their completion future settles. Their completion futures are filed
separately, under the raw transaction's key, and dropped only once the raw
transaction itself is disposed: a transaction wrapped again after its first
wrapper died gets the same ``done`` future back.
"""

from __future__ import annotations

import weakref
from typing import Any, Callable, Dict, Hashable, Optional


class IdentityCache:
    """
    Bidirectional, non-owning map between raw handles and wrappers.

    Parameters:
        identity: returns the key for a raw value (defaults to id())
        on_dispose: on_dispose(raw, callback) arranges for callback to run
                    once raw is gone (defaults to weakref.finalize)
    """

    def __init__(
        self,
        identity: Callable[[Any], Hashable] = id,
        on_dispose: Optional[Callable[[Any, Callable[[], Any]], Any]] = None,
    ):
        self._identity = identity
        self._on_dispose = on_dispose or weakref.finalize
        self._done: Dict[Hashable, Any] = {}
        self._forward: "weakref.WeakValueDictionary[Hashable, Any]" = (
            weakref.WeakValueDictionary()
        )
        self._reverse: "weakref.WeakKeyDictionary[Any, Any]" = (
            weakref.WeakKeyDictionary()
        )
        self._pinned: Dict[Hashable, Any] = {}

    def __len__(self) -> int:
        return len(self._forward)

    def lookup(self, raw: Any) -> Optional[Any]:
        """Return the wrapper already made for raw, if it is still alive."""
        return self._forward.get(self._identity(raw))

    def remember(self, raw: Any, wrapped: Any) -> None:
        self._forward[self._identity(raw)] = wrapped
        self._reverse[wrapped] = raw

    def remember_reverse(self, wrapped: Any, raw: Any) -> None:
        self._reverse[wrapped] = raw

    def original(self, wrapped: Any) -> Optional[Any]:
        """Return the raw value behind wrapped, or None if it was never wrapped."""
        try:
            return self._reverse.get(wrapped)
        except TypeError:  # unhashable or not weakly referenceable
            return None

    def pin(self, raw: Any, wrapped: Any) -> None:
        self._pinned[self._identity(raw)] = wrapped

    def unpin(self, raw: Any) -> None:
        self._pinned.pop(self._identity(raw), None)

    def pinned(self) -> int:
        return len(self._pinned)

    def done_future(self, raw: Any) -> Optional[Any]:
        """Return the completion future filed for a raw transaction, if any."""
        return self._done.get(self._identity(raw))

    def remember_done(self, raw: Any, future: Any) -> None:
        key = self._identity(raw)
        self._done[key] = future
        self._on_dispose(raw, lambda: self._done.pop(key, None))

    def done_futures(self) -> int:
        return len(self._done)
