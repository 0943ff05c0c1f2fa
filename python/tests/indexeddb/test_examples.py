# -*- encoding: utf-8 -*-
"""
test_examples.py - the bookshelf example against the in-process engine.
"""

from __future__ import annotations

from examples import bookshelf


async def test_example_workflow(idb, factory):
    summary = await bookshelf.example_workflow(idb)
    assert summary == {
        "written": 3,
        "simmons": ["Endymion", "Hyperion"],
        "before_1990": ["Dune", "Hyperion"],
        "loan": 1,
        "missing_loan": None,
    }, f"Got {summary!r}"
    assert bookshelf.SHELF not in factory._databases, "workflow cleans up after itself"


async def test_schema_migrates_from_version_one(idb):
    """A version 1 shelf gains the year index and loans store on open."""
    db = await idb.open_db("legacy-2", 1, upgrade=_version_one)
    assert list(db.objectStoreNames) == ["books"]
    db.close()

    db = await bookshelf.open_shelf(idb, "legacy-2")
    assert list(db.objectStoreNames) == ["books", "loans"]
    tx = db.transaction("books")
    assert list(tx.store.indexNames) == ["by_author", "by_year"]
    await tx.done
    db.close()


def _version_one(db, old_version, new_version, tx):
    books = db.createObjectStore("books", {"keyPath": "isbn"})
    books.createIndex("by_author", "author")


async def test_blocking_closes_old_connection(idb):
    old = await bookshelf.open_shelf(idb, "shared-shelf")
    newer = await idb.open_db("shared-shelf", bookshelf.VERSION + 1)
    assert newer.version == bookshelf.VERSION + 1
    newer.close()
    assert idb.unwrap(old)._closed, "the example closes itself on versionchange"
