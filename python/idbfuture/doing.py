"""
doing.py - hio scheduling for IndexedDB work under Pyodide.

WebDoist runs hio doers from a coroutine and gives the event loop a turn
after every cycle, so IndexedDB events reach the doers between cycles.
CursorDoer walks a cursor one position per cycle:

    def show(cursor):
        print(cursor.key, cursor.value)
        return True

    walker = CursorDoer(tx.store, show, tock=0.0)
    cut = await WebDoist([walker], limit=5.0).do()
    print(walker.count, walker in cut)
"""

import asyncio
import inspect

from hio.base import doing

from . import logs
from .iterate import CursorSequence, CursorState


class WebDoist:
    """
    Runs an hio Doist inside asyncio.

    The inner Doist never sleeps; do() yields to the event loop after each
    cycle, waiting one tock when real is set. A run that ends before its
    doers do (limit reached, stop() or an exception) closes the cursor walks
    of the CursorDoers still walking and reports them.

    Parameters:
        doers: doers to run
        tock: scheduling tick in seconds
        real: wait one tock between cycles instead of only yielding
        limit: wall-clock limit of a run in seconds; None for none
    """

    def __init__(self, doers=None, *, tock=0.03125, real=False, limit=None):
        self.doist = doing.Doist(real=False, tock=tock, doers=list(doers or []))
        self.real = real
        self.limit = limit
        self.running = False
        self.done = False
        self._halt = False

    @property
    def tyme(self):
        return self.doist.tyme

    def stop(self):
        """End the run after the current cycle."""
        self._halt = True

    async def do(self, doers=None):
        """
        Run until every doer is done, the limit passes or stop() is called.

        Returns the CursorDoers whose walks were cut short, already closed.
        """
        if doers is not None:
            self.doist.doers = list(doers)
            self.doist.deeds.clear()

        loop = asyncio.get_running_loop()
        deadline = None if self.limit is None else loop.time() + self.limit
        self.running = True
        self.done = False
        self._halt = False
        self.doist.enter()
        try:
            while self.doist.deeds and not self._halt:
                self.doist.recur()
                await asyncio.sleep(self.doist.tock if self.real else 0)
                if deadline is not None and loop.time() >= deadline:
                    logs.emit(
                        f"doist stopped at its {self.limit}s limit",
                        "warn",
                        source="idbfuture.doing",
                    )
                    break
            self.done = not self.doist.deeds
        finally:
            # Collected before exit() cancels the walks' pending steps.
            cut = [
                doer
                for doer in self.doist.doers
                if isinstance(doer, CursorDoer)
                and doer.sequence.state is not CursorState.EXHAUSTED
            ]
            self.doist.exit()
            self.running = False
            for walker in cut:
                await walker.abandon()
        return cut


class AsyncRecurDoer(doing.Doer):
    """
    Doer whose work is a coroutine.

    Subclass this and implement ``async def recur_async(self)``. A fresh
    coroutine is started as soon as the previous one returns something falsy;
    the doer is done once one returns something truthy.
    """

    def __init__(self, **kwa):
        super().__init__(**kwa)
        self._async_task = None
        self._async_result = None

    async def recur_async(self):
        """Override in subclasses. Return truthy when done."""
        return True

    def recur(self, tyme):
        if self._async_task is not None:
            if not self._async_task.done():
                return False
            task, self._async_task = self._async_task, None
            self._async_result = task.result()
            if self._async_result:
                return True

        if not inspect.iscoroutinefunction(self.recur_async):
            raise TypeError("recur_async must be an async def coroutine function")
        loop = asyncio.get_event_loop()
        self._async_task = loop.create_task(self.recur_async())
        return False

    def close(self):
        if self._async_task and not self._async_task.done():
            self._async_task.cancel()
        super().close()


class CursorDoer(AsyncRecurDoer):
    """
    Walks a cursor, handing every position to on_item.

    The next advance is requested as soon as on_item returns, in the same
    step that received the position, so the transaction keeps a pending
    request between cycles. on_item returns True to keep walking and
    may choose its own advance by calling one of the cursor's advance methods.

    Parameters:
        source: wrapped object store, index or cursor
        on_item: called with each cursor position
        args: passed to ``source.openCursor``
    """

    def __init__(self, source, on_item, *args, **kwa):
        super().__init__(**kwa)
        self.sequence = CursorSequence(source, args)
        self.on_item = on_item
        self.count = 0
        self.stopped = False
        self.abandoned = False

    async def recur_async(self):
        try:
            cursor = await self.sequence.__anext__()
        except StopAsyncIteration:
            return True

        self.count += 1
        if not self.on_item(cursor):
            self.stopped = True
            await self.sequence.aclose()
            return True
        if self.sequence.advance_requested is None:
            cursor.continue_()
        return False

    async def abandon(self):
        """Close a walk cut short by the scheduler. The cursor stays where it is."""
        self.abandoned = True
        await self.sequence.aclose()
        logs.emit(
            f"cursor walk abandoned after {self.count} positions",
            "debug",
            source="idbfuture.doing",
        )
