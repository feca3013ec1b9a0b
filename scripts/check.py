#!/usr/bin/env python3
"""
Run the repository checks in one go.
- Lints with `python -m ruff check .` (add --fix to apply fixes first)
- Verifies formatting with `python -m black --check .` (--fix formats in place)
- Runs the test suite with `python -m pytest`
- Respects configuration in pyproject.toml
"""
from __future__ import annotations

import argparse
import importlib.util
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TOOLS = ("ruff", "black", "pytest", "pytest_asyncio")


def run(cmd: list[str]) -> int:
    proc = subprocess.run(cmd, cwd=PROJECT_ROOT, text=True)
    return proc.returncode


def ensure_tools() -> None:
    missing = [name for name in TOOLS if importlib.util.find_spec(name) is None]
    if missing:
        py = sys.executable
        print(
            "ERROR: Missing tools: "
            + ", ".join(missing)
            + "\nInstall them with:\n  "
            + f'{py} -m pip install -e ".[dev,test]"\n',
            file=sys.stderr,
        )
        sys.exit(1)


def py_module(cmd: list[str]) -> list[str]:
    """Build a command that runs a module via the current interpreter.

    Example: py_module(["ruff", "check", "."]) ->
             [sys.executable, "-m", "ruff", "check", "."]
    """
    return [sys.executable, "-m", *cmd]


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    ap.add_argument("--fix", action="store_true", help="apply ruff fixes and black formatting")
    args = ap.parse_args(argv)
    ensure_tools()

    if args.fix:
        run(py_module(["ruff", "check", "--fix", "."]))
        run(py_module(["black", "."]))

    results = {
        "ruff": run(py_module(["ruff", "check", "."])),
        "black": run(py_module(["black", "--check", "."])),
        "pytest": run(py_module(["pytest", "-q"])),
    }
    print(" ".join(f"{name}_rc={rc}" for name, rc in results.items()))
    if all(rc == 0 for rc in results.values()):
        # Avoid non-ASCII output for Windows consoles under cp1252
        print("\nCLEAN: all checks passed.")
        return 0
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
