# -*- encoding: utf-8 -*-
"""
test_runtime.py - the process-wide wrapper and the browser adapter outside a browser.
"""

from __future__ import annotations

import pytest

import idbfuture
from conftest import define_library
from idbfuture import BrowserNative, EngineUnavailableError, runtime


@pytest.fixture(autouse=True)
def fresh_default(monkeypatch):
    monkeypatch.setattr(runtime, "_default", None)


# =============================================================================
# DEFAULT WRAPPER
# =============================================================================


def test_default_wrapper_is_built_once():
    first = runtime.default_wrapper()
    assert runtime.default_wrapper() is first
    assert isinstance(first.native, BrowserNative)
    assert first.hooks.added == len(runtime.DEFAULT_EXTENSIONS)


def test_default_without_browser():
    with pytest.raises(EngineUnavailableError):
        idbfuture.open_db("anything", 1)
    with pytest.raises(EngineUnavailableError):
        idbfuture.delete_db("anything")


async def test_configure_swaps_engine(native):
    wrapper = idbfuture.configure(native)
    assert runtime.default_wrapper() is wrapper

    db = await idbfuture.open_db("configured", 1, upgrade=define_library)
    await db.add("books", {"id": 1, "title": "Anathem", "author": "Stephenson"})
    assert idbfuture.wrap(idbfuture.unwrap(db)) is db
    assert await db.count("books") == 1
    db.close()
    assert await idbfuture.delete_db("configured") is None


async def test_reconfigure_after_use_warns(native, factory, log_entries):
    from idbfuture import Native

    idbfuture.configure(native)
    db = await idbfuture.open_db("used", 1, upgrade=define_library)
    idbfuture.configure(Native(factory))
    assert [entry for entry in log_entries if entry["level"] == "warn"]
    db.close()


def test_module_add_hook():
    class Marker(idbfuture.HookSet):
        pass

    head = idbfuture.add_hook(Marker)
    assert isinstance(head, Marker)
    assert runtime.default_wrapper().hooks.head is head


# =============================================================================
# BROWSER ADAPTER
# =============================================================================


def test_browser_native_outside_browser():
    native = BrowserNative()
    with pytest.raises(EngineUnavailableError):
        native.factory
    plain = object()
    assert native.kind_of(plain) is None, "plain objects are not JS handles"
    assert native.kind_of(None) is None
    assert native.identity(plain) == ("py", id(plain))
    assert native.resolve(None) is None
    assert native.resolve(3) == 3


def test_browser_native_with_factory():
    sentinel = object()
    assert BrowserNative(sentinel).factory is sentinel
