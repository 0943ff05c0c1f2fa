# -*- encoding: utf-8 -*-
"""
errors.py - exceptions raised by idbfuture.

Native request and transaction failures are forwarded unchanged whenever the
engine reports them as Python exceptions. Under Pyodide the engine reports
DOMException proxies instead, which cannot be raised; those are carried by
IndexedDBRequestError with the original object kept in ``.error``.
"""

from __future__ import annotations

from typing import Any, Optional


class IndexedDBError(Exception):
    """Base exception for idbfuture."""

    pass


class EngineUnavailableError(IndexedDBError):
    """No IndexedDB engine is reachable (not running in a browser)."""

    pass


class TransactionAbortedError(IndexedDBError):
    """Transaction was aborted without an error object."""

    pass


class IndexedDBRequestError(IndexedDBError):
    """Request-level error with optional DOMException name and native object."""

    def __init__(
        self, message: str, *, name: Optional[str] = None, error: Any = None
    ):
        super().__init__(message)
        self.name = name
        self.error = error


def as_exception(error: Any, default: str = "Unknown error") -> BaseException:
    """
    Return something raisable for a native error object.

    Exceptions pass through untouched. Anything else (a DOMException proxy)
    is wrapped; a missing error becomes a TransactionAbortedError.
    """
    if isinstance(error, BaseException):
        return error
    if error is None:
        return TransactionAbortedError(default)
    name = getattr(error, "name", None)
    message = getattr(error, "message", None) or str(error) or default
    return IndexedDBRequestError(str(message), name=name, error=error)
