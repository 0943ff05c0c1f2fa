#!/usr/bin/env python3
"""Run the idbfuture suite in headless Chromium against the real IndexedDB."""

from __future__ import annotations

import os
import re
import sys
import time
import urllib.error
import urllib.request

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

BASE_URL = os.environ.get("IDBFUTURE_BASE_URL", "http://127.0.0.1:8000").rstrip("/")
SUITE_PAGE = "/pages/idb-suite.html"
SERVER_WAIT_SECONDS = 90
ENTRYPOINT_WAIT_SECONDS = 300
SUMMARY_WAIT_SECONDS = 300
HEARTBEAT_SECONDS = 15
POLL_SECONDS = 2
SUMMARY_RE = re.compile(r"SUMMARY:\s+(\d+)\s+passed,\s+(\d+)\s+failed")


def log_step(message: str) -> None:
    print(f"[smoke] {message}", flush=True)


def wait_for_server(url: str, timeout_s: int) -> None:
    log_step(f"Waiting for local server at {url} (timeout={timeout_s}s)")
    start = time.time()
    deadline = start + timeout_s
    last_error = "server did not respond"

    while time.time() < deadline:
        try:
            with urllib.request.urlopen(f"{url}{SUITE_PAGE}", timeout=5) as resp:
                if resp.status == 200:
                    log_step(f"Server is reachable after {int(time.time() - start)}s")
                    return
                last_error = f"unexpected status {resp.status}"
        except (urllib.error.URLError, TimeoutError) as exc:
            last_error = str(exc)
        time.sleep(1)

    raise RuntimeError(f"Timed out waiting for server at {url}: {last_error}")


def _last_non_empty_line(text: str) -> str:
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return "<no output yet>"
    last = lines[-1]
    return f"{last[:237]}..." if len(last) > 240 else last


def poll(page, what: str, timeout_s: int, check):
    """Call check() until it returns something truthy, with heartbeats."""
    log_step(f"Waiting for {what} (timeout={timeout_s}s)")
    start = time.monotonic()
    next_heartbeat = start + HEARTBEAT_SECONDS

    while True:
        result = check()
        now = time.monotonic()
        if result:
            log_step(f"{what} after {int(now - start)}s")
            return result

        output_text = page.inner_text("#output")
        if now - start >= timeout_s:
            raise RuntimeError(
                f"Timed out waiting for {what} after {timeout_s}s; "
                f"last_output_line={_last_non_empty_line(output_text)!r}"
            )
        if now >= next_heartbeat:
            log_step(
                f"Still waiting for {what}... elapsed={int(now - start)}s "
                f"last_line={_last_non_empty_line(output_text)!r}"
            )
            next_heartbeat = now + HEARTBEAT_SECONDS
        time.sleep(POLL_SECONDS)


def require_summary_ok(output_text: str) -> None:
    match = SUMMARY_RE.search(output_text)
    if not match:
        raise AssertionError("Did not find suite summary in output")

    passed = int(match.group(1))
    failed = int(match.group(2))
    print(f"Suite summary: {passed} passed, {failed} failed")
    if failed != 0:
        raise AssertionError(f"Browser suite reported failures: {failed}")


def main() -> int:
    log_step(f"Starting browser smoke check for {BASE_URL}")
    wait_for_server(BASE_URL, SERVER_WAIT_SECONDS)
    log_step("Launching headless Chromium")

    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=True)
        page = browser.new_context().new_page()
        page_errors: list[str] = []

        def on_console(msg) -> None:
            if msg.type == "error":
                log_step(f"Browser console error: {msg.text}")

        page.on("pageerror", lambda exc: page_errors.append(str(exc)))
        page.on("console", on_console)

        try:
            log_step(f"Opening {SUITE_PAGE}")
            page.goto(f"{BASE_URL}{SUITE_PAGE}", wait_until="domcontentloaded", timeout=180_000)
            poll(
                page,
                "window.run_tests",
                ENTRYPOINT_WAIT_SECONDS,
                lambda: page.evaluate("() => typeof window.run_tests === 'function'"),
            )
            page.evaluate("() => window.run_tests(null)")
            output_text = poll(
                page,
                "suite summary",
                SUMMARY_WAIT_SECONDS,
                lambda: (
                    (text := page.inner_text("#output")) and SUMMARY_RE.search(text) and text
                ),
            )
            require_summary_ok(output_text)
        except PlaywrightTimeoutError as exc:
            log_step(f"Playwright timeout: {exc}")
            return 1
        except Exception as exc:
            log_step(f"Smoke check failed: {type(exc).__name__}: {exc}")
            return 1
        finally:
            browser.close()

        if page_errors:
            log_step("Detected browser page errors:")
            for err in page_errors:
                log_step(f"- {err}")
            return 1

    log_step("Browser smoke check passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
