# -*- encoding: utf-8 -*-
"""
iterate.py - cursors as async iterators.

    async for cursor in tx.store:
        print(cursor.key, cursor.value)

    async for cursor in index.iterate(IDBKeyRange.lowerBound("M"), "prev"):
        if cursor.key == "skip-me":
            cursor.continue_("N")     # choose how to advance; default is continue_()

IndexedDB re-fires the request that opened a cursor every time the cursor
advances. CursorSequence keeps the state of one walk over that request:

    AWAITING_FIRST --first cursor--> POSITIONED --next cursor--> POSITIONED
         |                               |
         +-----------no cursor-----------+--> EXHAUSTED

Each position is published through the same CursorFacade. Calling one of
the facade's advance methods does not move the sequence by itself; it
records the future of that advance, which the next step awaits instead of
the default continue_().
"""

from __future__ import annotations

import asyncio
import types
from enum import Enum
from typing import Any, Optional

from .hooks import HookSet
from .native import ADVANCE_METHODS, Kind


class CursorState(Enum):
    AWAITING_FIRST = "awaiting_first"
    POSITIONED = "positioned"
    EXHAUSTED = "exhausted"


class CursorFacade:
    """
    The value published at every step of a CursorSequence.

    Reads through to the current wrapped cursor, except for advance methods,
    which only record the advance on the sequence and return None.
    """

    __slots__ = ("_sequence",)

    def __init__(self, sequence: "CursorSequence"):
        object.__setattr__(self, "_sequence", sequence)

    def __getattr__(self, name: str) -> Any:
        if name == "_sequence":
            raise AttributeError(name)
        cursor = self._sequence.cursor
        if name not in ADVANCE_METHODS:
            return getattr(cursor, name)
        sequence = self._sequence

        def request_advance(*args, **kwargs):
            sequence.request_advance(getattr(cursor, name)(*args, **kwargs))

        request_advance.__name__ = name
        return request_advance

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._sequence.cursor, name, value)

    def __contains__(self, name: object) -> bool:
        return name in self._sequence.cursor

    def __repr__(self) -> str:
        return f"<CursorFacade {self._sequence.cursor!r}>"


class CursorSequence:
    """
    Lazy, single-pass sequence of cursor positions.

    Parameters:
        source: wrapped object store, index or cursor
        args, kwargs: passed to ``source.openCursor`` unless source is a cursor
    """

    def __init__(self, source: Any, args: tuple = (), kwargs: Optional[dict] = None):
        self.source = source
        self.args = args
        self.kwargs = kwargs or {}
        self.state = CursorState.AWAITING_FIRST
        self.cursor = None
        self.facade: Optional[CursorFacade] = None
        self.advance_requested: Optional[asyncio.Future] = None
        self.steps = 0

    def __aiter__(self) -> "CursorSequence":
        return self

    async def __anext__(self) -> CursorFacade:
        if self.state is CursorState.EXHAUSTED:
            raise StopAsyncIteration
        try:
            if self.state is CursorState.AWAITING_FIRST:
                cursor = await self._first()
            else:
                cursor = await self._advance()
        except BaseException:
            self._finish()
            raise

        if cursor is None:
            self._finish()
            raise StopAsyncIteration

        self.cursor = cursor
        if self.facade is None:
            self.facade = CursorFacade(self)
        self.state = CursorState.POSITIONED
        self.steps += 1
        return self.facade

    def request_advance(self, pending: Optional[asyncio.Future]) -> None:
        """Record the future of an advance chosen by the consumer."""
        self.advance_requested = pending

    async def aclose(self) -> None:
        """Abandon the sequence. The cursor is left where it is."""
        self._finish()

    async def _first(self):
        if self.source._kind is Kind.CURSOR:
            return self.source
        return await self.source.openCursor(*self.args, **self.kwargs)

    def _advance(self):
        pending = self.advance_requested
        self.advance_requested = None
        if pending is None:
            pending = self.cursor.continue_()
        return pending

    def _finish(self) -> None:
        self.state = CursorState.EXHAUSTED
        self.advance_requested = None
        self.cursor = None


def iterate(source, *args, **kwargs) -> CursorSequence:
    """Walk a wrapped object store or index without opening a cursor first."""
    return CursorSequence(source, args, kwargs)


def _is_iterator_name(kind: Optional[Kind], name: str) -> bool:
    if name == "__aiter__":
        return kind in (Kind.INDEX, Kind.OBJECT_STORE, Kind.CURSOR)
    if name == "iterate":
        return kind in (Kind.INDEX, Kind.OBJECT_STORE)
    return False


class CursorIteration(HookSet):
    """Adds ``async for`` to stores, indexes and cursors, and ``iterate()`` to stores and indexes."""

    def get(self, target: Any, name: str, receiver: Any) -> Any:
        if _is_iterator_name(self.native.kind_of(target), name):
            return types.MethodType(iterate, receiver)
        return super().get(target, name, receiver)

    def has(self, target: Any, name: str) -> bool:
        return _is_iterator_name(self.native.kind_of(target), name) or super().has(
            target, name
        )


def install(wrapper) -> None:
    wrapper.add_hook(CursorIteration)
