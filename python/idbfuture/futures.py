# -*- encoding: utf-8 -*-
"""
futures.py - IndexedDB request and transaction events as asyncio futures.

IndexedDB operations return request objects that fire ``success`` or
``error`` once (cursor requests fire again after every advance). Each call to
promisify_request() makes a new future for the *next* outcome of a request,
and removes its listeners as soon as one of them fires.

Transactions fire ``complete`` after all their requests have finished, or
``error``/``abort`` when they fail. transaction_done() turns that into the
future exposed as ``tx.done``.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from . import logs

if TYPE_CHECKING:  # pragma: no cover
    from .wrapping import Wrapper


def promisify_request(wrapper: "Wrapper", request: Any) -> asyncio.Future:
    """
    Return a future for the next outcome of request.

    Resolves with the wrapped ``request.result``; rejects with the request's
    error, unwrapped.
    """
    native = wrapper.native
    loop = asyncio.get_event_loop()
    future = loop.create_future()
    unlisteners = []

    def unlisten():
        while unlisteners:
            unlisteners.pop()()

    def on_success(event=None):
        unlisten()
        if future.done():  # cancelled by the caller
            return
        result = native.get(request, "result")
        value = wrapper.wrap(result)
        wrapper.bind_request(value, request)
        future.set_result(value)

    def on_error(event=None):
        unlisten()
        if future.done():
            return
        future.set_exception(native.error_of(request, event, "Request error"))

    unlisteners.append(native.listen(request, "success", on_success))
    unlisteners.append(native.listen(request, "error", on_error))

    # The only reverse mapping without a forward one.
    wrapper.cache.remember_reverse(future, request)
    return future


def transaction_done(wrapper: "Wrapper", tx: Any) -> asyncio.Future:
    """
    Return a future that resolves with None when tx completes.

    Rejects with the transaction's error on ``error`` or ``abort``.
    """
    native = wrapper.native
    loop = asyncio.get_event_loop()
    done = loop.create_future()
    unlisteners = []

    def unlisten():
        while unlisteners:
            unlisteners.pop()()

    def on_complete(event=None):
        unlisten()
        if not done.done():
            done.set_result(None)

    def on_error(event=None):
        unlisten()
        if done.done():
            return
        error = native.error_of(tx, event, "Transaction aborted")
        logs.emit(
            f"transaction failed: {type(error).__name__}: {error}",
            "debug",
            source="idbfuture.futures",
        )
        done.set_exception(error)

    unlisteners.append(native.listen(tx, "complete", on_complete))
    unlisteners.append(native.listen(tx, "error", on_error))
    unlisteners.append(native.listen(tx, "abort", on_error))

    done.add_done_callback(_mark_retrieved)
    return done


def _mark_retrieved(future: asyncio.Future) -> None:
    # Nobody has to await tx.done; awaiting it still raises.
    if not future.cancelled():
        future.exception()
