# -*- encoding: utf-8 -*-
"""
run_idb_suite.py - PyScript entry point for the idbfuture browser suite.

Runs the scenarios in test_scenarios.py against the page's real IndexedDB
and renders the output, line by line, into the page's #output element.

Usage in PyScript (see pages/idb-suite.html):
    import run_idb_suite
    run_idb_suite.install()          # exposes window.run_tests

    Then from JavaScript:
        window.run_tests(null)
"""

import asyncio
import html
import sys
import traceback

from idbfuture import logs

import test_scenarios

try:
    from pyodide.ffi import create_proxy
    from pyscript import document, window
except ImportError:
    create_proxy = None
    document = None
    window = None

# Level -> CSS class used by the page.
CSS_CLASSES = {"debug": "info", "info": "info", "success": "success", "warn": "warn", "fail": "fail"}


def render(entry):
    """Append one log entry to #output, or to stdout outside a page."""
    output = document.querySelector("#output") if document is not None else None
    if output is None:
        target = getattr(sys, "__stdout__", None) or sys.stdout
        target.write(f"{entry['msg']}\n")
        target.flush()
        return
    css_class = CSS_CLASSES.get(entry["level"], "info")
    output.innerHTML += (
        f'<span class="{css_class}">[{entry["time"]}] {html.escape(entry["msg"])}</span>\n'
    )
    output.scrollTop = output.scrollHeight


def clear_output():
    if document is None:
        return
    output = document.querySelector("#output")
    if output:
        output.innerHTML = ""


class OutputRedirector:
    """File-like writer that turns printed lines into log entries."""

    def __init__(self, level: str = "info"):
        self.level = level
        self._buffer = ""
        self.encoding = "utf-8"

    def _level_for_line(self, line: str) -> str:
        upper = line.strip().upper()
        # Result prefixes first, so names containing "Error" stay neutral.
        if upper.startswith("PASS:"):
            return "success"
        if upper.startswith("FAIL:") or upper.startswith("ERROR:"):
            return "fail"
        if "TRACEBACK" in upper:
            return "fail"
        return self.level

    def write(self, data):
        if data is None:
            return
        if isinstance(data, bytes):
            data = data.decode(self.encoding, errors="replace")
        self._buffer += str(data)
        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            logs.emit(line, self._level_for_line(line))

    def flush(self):
        if self._buffer:
            logs.emit(self._buffer, self._level_for_line(self._buffer))
            self._buffer = ""

    def isatty(self):
        return False


async def _run_suite_async():
    logs.set_sinks(render, clear_output)
    logs.clear()
    stdout = sys.stdout
    stderr = sys.stderr
    sys.stdout = OutputRedirector("info")
    sys.stderr = OutputRedirector("fail")
    try:
        print("Starting idbfuture browser suite...")
        print()
        results = await test_scenarios.run_all_tests()
        print()
        print("Test run complete.")
        return results
    except Exception as exc:
        logs.emit(f"Test suite failed with exception: {exc}", "fail")
        logs.emit(traceback.format_exc(), "fail")
        print("SUMMARY: 0 passed, 1 failed")
    finally:
        sys.stdout.flush()
        sys.stdout = stdout
        sys.stderr = stderr
        logs.clear_sinks()


def run_idb_suite(event=None):
    """Button click handler - schedules the async suite."""
    return asyncio.ensure_future(_run_suite_async())


def install():
    """Expose the suite to JavaScript as window.run_tests."""
    if window is None or create_proxy is None:
        raise RuntimeError("run_idb_suite.install() needs a PyScript page")
    window.run_tests = create_proxy(run_idb_suite)


if __name__ == "__main__":
    print("This script must be run in a browser environment with PyScript.")
    print("To run tests, load pages/idb-suite.html and click 'Run suite'.")
