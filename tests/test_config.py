import json

import pytest


@pytest.fixture
def cfg_module(monkeypatch, tmp_path):
    # Import lazily to patch module globals
    import ringterm.core.config as config

    data_dir = tmp_path / ".ringterm_local"
    monkeypatch.setattr(config, "DATA_DIR", data_dir, raising=False)
    monkeypatch.setattr(config, "CONFIG_PATH", data_dir / "config.json", raising=False)
    return config


def test_ensure_config_creates_file(cfg_module):
    cfg = cfg_module.ensure_config()
    cfg_path = cfg_module.CONFIG_PATH
    assert cfg_path.exists(), "config.json should be created"

    with cfg_path.open("r", encoding="utf-8") as f:
        loaded = json.load(f)
    assert loaded == cfg
    for section in ("ui", "downloads", "profiles", "logging"):
        assert section in loaded

    # Change a value and persist via private helper
    loaded["downloads"]["dir"] = "/srv/files"
    cfg_module._persist_cfg(loaded)  # noqa: SLF001 - test private helper intentionally
    with cfg_path.open("r", encoding="utf-8") as f:
        reloaded = json.load(f)
    assert reloaded["downloads"]["dir"] == "/srv/files"


def test_corrupted_config_is_replaced(cfg_module):
    cfg_module.DATA_DIR.mkdir(parents=True)
    cfg_module.CONFIG_PATH.write_text("{not json", encoding="utf-8")
    cfg = cfg_module.ensure_config()
    assert cfg["logging"]["enabled"] is False
    assert json.loads(cfg_module.CONFIG_PATH.read_text(encoding="utf-8")) == cfg


def test_load_config_fills_missing_keys(cfg_module):
    cfg_module.DATA_DIR.mkdir(parents=True)
    cfg_module.CONFIG_PATH.write_text(
        json.dumps({"logging": {"enabled": True}, "extra": 1}), encoding="utf-8"
    )
    cfg = cfg_module.load_config()
    assert cfg["logging"]["enabled"] is True
    assert "dir" in cfg["logging"]
    assert "welcome" in cfg["ui"]
    assert cfg["extra"] == 1
