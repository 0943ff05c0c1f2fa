"""
logs.py - structured log entries for idbfuture.

The library emits entries through this module instead of printing. An
application (e.g. the browser suite runner) can register entry/clear sinks
for its own rendering; without one, entries at or above the threshold go to
the browser console under Pyodide and to stderr elsewhere.
"""

from __future__ import annotations

import datetime
import sys
from typing import Any, Callable, Dict, Iterable, Optional

# Browser console when running under Pyodide.
try:
    from js import console
except ImportError:  # pragma: no cover - non-browser usage
    console = None


LogEntry = Dict[str, Any]
EntrySink = Callable[[LogEntry], None]
ClearSink = Callable[[], None]

LEVELS = ("debug", "info", "success", "warn", "fail")
_RANK = {level: rank for rank, level in enumerate(LEVELS)}

_entry_sink: Optional[EntrySink] = None
_clear_sink: Optional[ClearSink] = None
_threshold = "warn"


def _now() -> str:
    return datetime.datetime.now().strftime("%H:%M:%S.%f")[:-3]


def _normalize_level(level: str) -> str:
    return level if level in _RANK else "info"


def _normalize_entry(entry: LogEntry) -> LogEntry:
    return {
        "time": str(entry.get("time") or _now()),
        "level": _normalize_level(str(entry.get("level") or "info")),
        "msg": str(entry.get("msg") or ""),
        "source": entry.get("source"),
    }


def set_sinks(
    entry_sink: Optional[EntrySink] = None, clear_sink: Optional[ClearSink] = None
) -> None:
    """Register sinks for app-level rendering."""
    global _entry_sink, _clear_sink
    _entry_sink = entry_sink
    _clear_sink = clear_sink


def clear_sinks() -> None:
    """Remove registered sinks and fall back to console output."""
    global _entry_sink, _clear_sink
    _entry_sink = None
    _clear_sink = None


def set_threshold(level: str) -> str:
    """Set the lowest level written by the fallback output. Returns the old one."""
    global _threshold
    previous = _threshold
    _threshold = _normalize_level(level)
    return previous


def emit(
    msg: Any,
    level: str = "info",
    *,
    time: Optional[str] = None,
    source: Optional[str] = None,
) -> None:
    entry = _normalize_entry({"time": time, "level": level, "msg": msg, "source": source})
    if _entry_sink is not None:
        _entry_sink(entry)
        return
    _fallback_emit(entry)


def emit_batch(entries: Iterable[LogEntry]) -> None:
    for entry in entries:
        normalized = _normalize_entry(entry)
        if _entry_sink is not None:
            _entry_sink(normalized)
        else:
            _fallback_emit(normalized)


def clear() -> None:
    if _clear_sink is not None:
        _clear_sink()


def _fallback_emit(entry: LogEntry) -> None:
    if _RANK[entry["level"]] < _RANK[_threshold]:
        return
    source = f"{entry['source']}: " if entry["source"] else ""
    line = f"[{entry['time']}] {source}{entry['msg']}"
    if console is not None:
        if entry["level"] == "fail":
            console.error(line)
        elif entry["level"] == "warn":
            console.warn(line)
        else:
            console.log(line)
        return
    print(line, file=sys.stderr)
