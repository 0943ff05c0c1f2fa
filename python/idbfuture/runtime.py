"""
runtime.py - building wrappers and the process-wide default.

A wrapper's hook chain is configuration: extensions are installed when the
wrapper is built and left alone afterwards. The module-level API of
idbfuture uses one default wrapper over the browser's IndexedDB, built the
first time it is needed. configure() swaps in another engine (at startup).
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from . import extras, iterate, logs
from .browser import BrowserNative
from .native import Native
from .wrapping import Wrapper

Extension = Callable[[Wrapper], None]

# Installation order; later extensions are consulted first.
DEFAULT_EXTENSIONS = (extras.install, iterate.install)

_default: Optional[Wrapper] = None


def create_wrapper(
    native: Native, extensions: Iterable[Extension] = DEFAULT_EXTENSIONS
) -> Wrapper:
    """Return a new wrapper over native with extensions installed in order."""
    wrapper = Wrapper(native)
    for install in extensions:
        install(wrapper)
    return wrapper


def default_wrapper() -> Wrapper:
    global _default
    if _default is None:
        _default = create_wrapper(BrowserNative())
    return _default


def configure(
    native: Native, extensions: Iterable[Extension] = DEFAULT_EXTENSIONS
) -> Wrapper:
    """Replace the process-wide wrapper. Call before any handle is used."""
    global _default
    if _default is not None and _default.wrapped:
        logs.emit(
            "replacing the default wrapper after it produced handles; "
            "existing handles keep the old engine",
            "warn",
            source="idbfuture.runtime",
        )
    _default = create_wrapper(native, extensions)
    return _default
