# -*- encoding: utf-8 -*-
"""
bookshelf.py - a small catalogue on top of idbfuture.

Shows the everyday patterns: a versioned schema, one-call writes, index
reads, walking a cursor with ``async for`` and the cleanup a page does when
another tab upgrades the database.

Usage (PyScript):
    from examples.bookshelf import example_workflow
    summary = await example_workflow()
"""

from __future__ import annotations

from typing import Dict, List, Optional

from idbfuture import default_wrapper

SHELF = "bookshelf"
VERSION = 2


def define_shelf(db, old_version, new_version, tx):
    """Schema migrations; each step runs once per database."""
    if old_version < 1:
        books = db.createObjectStore("books", {"keyPath": "isbn"})
        books.createIndex("by_author", "author")
    if old_version < 2:
        tx.objectStore("books").createIndex("by_year", "year")
        db.createObjectStore("loans", {"autoIncrement": True})


async def open_shelf(idb=None, name: str = SHELF):
    idb = idb or default_wrapper()

    def blocking(event):
        # Another connection wants a newer schema.
        db.close()

    db = await idb.open_db(name, VERSION, upgrade=define_shelf, blocking=blocking)
    return db


async def shelve(db, books: List[Dict]) -> int:
    """Store books in one transaction. Returns how many were written."""
    tx = db.transaction("books", "readwrite")
    for book in books:
        tx.store.put(book)
    await tx.done
    return len(books)


async def titles_by(db, author: str) -> List[str]:
    books = await db.getAllFromIndex("books", "by_author", author)
    return sorted(book["title"] for book in books)


async def published_before(db, year: int) -> List[str]:
    """Walk the year index oldest first and stop at ``year``."""
    titles = []
    tx = db.transaction("books")
    async for cursor in tx.store.index("by_year"):
        if cursor.key >= year:
            break
        titles.append(cursor.value["title"])
    await tx.done
    return titles


async def lend(db, isbn: str, borrower: str) -> Optional[int]:
    """Record a loan if the book exists. Returns the loan number."""
    if await db.getKey("books", isbn) is None:
        return None
    tx = db.transaction("loans", "readwrite")
    loan = await tx.store.add({"isbn": isbn, "borrower": borrower})
    await tx.done
    return loan


async def example_workflow(idb=None) -> Dict:
    idb = idb or default_wrapper()
    await idb.delete_db(SHELF)
    db = await open_shelf(idb)

    written = await shelve(
        db,
        [
            {"isbn": "0-06", "title": "Dune", "author": "Herbert", "year": 1965},
            {"isbn": "0-38", "title": "Hyperion", "author": "Simmons", "year": 1989},
            {"isbn": "0-55", "title": "Endymion", "author": "Simmons", "year": 1996},
        ],
    )
    summary = {
        "written": written,
        "simmons": await titles_by(db, "Simmons"),
        "before_1990": await published_before(db, 1990),
        "loan": await lend(db, "0-38", "ada"),
        "missing_loan": await lend(db, "9-99", "ada"),
    }

    db.close()
    await idb.delete_db(SHELF)
    return summary
