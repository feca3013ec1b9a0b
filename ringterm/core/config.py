from __future__ import annotations
import copy
import json
import os
from pathlib import Path
from typing import Any, Dict

APP_NAME = "ringterm"
# Paths are module-level so tests can monkeypatch them easily.
DATA_DIR = Path(os.path.expanduser("~")) / ".ringterm_local"
CONFIG_PATH = DATA_DIR / "config.json"


def _default_config() -> Dict[str, Any]:
    return {
        "ui": {"welcome": "Welcome to ringterm. Type /help for the list of commands."},
        "downloads": {"dir": str(Path.home() / "Downloads" / APP_NAME)},
        "profiles": {"dir": str(DATA_DIR / "profiles")},
        "logging": {"enabled": False, "dir": str(DATA_DIR / "logs")},
    }


def ensure_config() -> Dict[str, Any]:
    """Ensure the user config exists and return it as a dict.

    A corrupted file is replaced with defaults.
    """
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    if not CONFIG_PATH.exists():
        cfg = _default_config()
        _persist_cfg(cfg)
        return cfg
    try:
        with CONFIG_PATH.open("r", encoding="utf-8") as f:
            cfg = json.load(f)
        if not isinstance(cfg, dict):
            raise ValueError("config root must be an object")
        return cfg
    except (OSError, ValueError):
        cfg = _default_config()
        _persist_cfg(cfg)
        return cfg


def load_config() -> Dict[str, Any]:
    """Stored config with any missing default section or key filled in."""
    cfg = _merge(_default_config(), ensure_config())
    return cfg


def _merge(defaults: Dict[str, Any], cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(defaults)
    for key, value in cfg.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def _persist_cfg(cfg: Dict[str, Any]) -> None:
    """Write the config dict to CONFIG_PATH (pretty JSON)."""
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with CONFIG_PATH.open("w", encoding="utf-8") as f:
        json.dump(cfg, f, ensure_ascii=False, indent=2)
