# -*- encoding: utf-8 -*-
"""
conftest.py - shared fixtures: an in-process engine and wrappers over it.
"""

from __future__ import annotations

import pytest

from fakeidb import IDBFactory
from idbfuture import Native, create_wrapper, logs


@pytest.fixture
def factory():
    return IDBFactory()


@pytest.fixture
def native(factory):
    return Native(factory)


@pytest.fixture
def idb(native):
    """Wrapper with the default extensions installed."""
    return create_wrapper(native)


@pytest.fixture
def log_entries():
    """Collect idbfuture log entries instead of printing them."""
    entries = []
    logs.set_sinks(entries.append)
    yield entries
    logs.clear_sinks()


def define_library(db, old_version, new_version, tx):
    books = db.createObjectStore("books", {"keyPath": "id"})
    books.createIndex("by_author", "author")
    db.createObjectStore("notes", {"autoIncrement": True})


BOOKS = [
    {"id": 1, "title": "Anathem", "author": "Stephenson"},
    {"id": 2, "title": "Blindsight", "author": "Watts"},
    {"id": 3, "title": "Cryptonomicon", "author": "Stephenson"},
    {"id": 4, "title": "Dune", "author": "Herbert"},
]


@pytest.fixture
async def library(idb):
    """Database 'library' (v1): books keyed by id with a by_author index, and notes."""
    db = await idb.open_db("library", 1, upgrade=define_library)
    tx = db.transaction("books", "readwrite")
    for book in BOOKS:
        tx.store.put(book)
    await tx.done
    yield db
    db.close()
