#!/usr/bin/env python3
"""Check that every file the browser suite page loads is present."""

from __future__ import annotations

import re
import sys
import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

PAGES = ["pages/idb-suite.html"]

REQUIRED_PATHS = [
    "pyscript.toml",
    "python/idbfuture/__init__.py",
    "python/runners/run_idb_suite.py",
    "python/tests/indexeddb/test_scenarios.py",
    *PAGES,
]

# Modules the page imports by name once [files] has been applied.
REQUIRED_MAPPED = ["idbfuture/__init__.py", "run_idb_suite.py", "test_scenarios.py"]

SCRIPT_TAG_RE = re.compile(r"<script\b[^>]*>", re.IGNORECASE)
ATTR_RE = re.compile(r'([a-zA-Z_:][a-zA-Z0-9_:\-]*)\s*=\s*["\']([^"\']+)["\']')


def rel_to_root(path_str: str, base: Path = ROOT) -> Path:
    normalized = path_str.strip()
    if normalized.startswith("http://") or normalized.startswith("https://"):
        return Path("__external__")
    if normalized.startswith("/"):
        return ROOT / normalized[1:]
    return (base / normalized).resolve()


def collect_py_configs(html_path: Path) -> list[str]:
    configs: list[str] = []
    content = html_path.read_text(encoding="utf-8")
    for match in SCRIPT_TAG_RE.finditer(content):
        attrs = {k.lower(): v for k, v in ATTR_RE.findall(match.group(0))}
        if attrs.get("type", "").lower() != "py":
            continue
        if attrs.get("config"):
            configs.append(attrs["config"])
    return configs


def main() -> int:
    missing: list[str] = [rel for rel in REQUIRED_PATHS if not (ROOT / rel).exists()]

    pyscript_path = ROOT / "pyscript.toml"
    if not pyscript_path.exists():
        print("Missing pyscript.toml")
        return 1

    cfg = tomllib.loads(pyscript_path.read_text(encoding="utf-8"))
    files_map = cfg.get("files", {})
    if not isinstance(files_map, dict):
        print("Invalid pyscript.toml: [files] must be a table")
        return 1

    for src in files_map:
        if not rel_to_root(str(src)).exists():
            missing.append(str(src))

    targets = {str(dest).removeprefix("./") for dest in files_map.values()}
    for module in REQUIRED_MAPPED:
        if module not in targets:
            missing.append(f"pyscript.toml [files] -> {module}")

    for page in PAGES:
        html_path = ROOT / page
        if not html_path.exists():
            continue
        for config in collect_py_configs(html_path):
            config_path = rel_to_root(config, html_path.parent)
            if config_path.name != "__external__" and not config_path.exists():
                missing.append(f"{page}: {config}")

    if missing:
        print("Runtime layout check failed. Missing paths:")
        for path in sorted(set(missing)):
            print(f"- {path}")
        return 1

    print("Runtime layout check passed")
    print(f"Mapped files checked: {len(files_map)}")
    print(f"Pages checked: {len(PAGES)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
