import json

import pytest

from findex import config as config_module


def _prepare_config(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    config_file = config_dir / "config.json"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_file)
    return config_file


def test_load_config_defaults(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)

    cfg = config_module.load_config()

    assert cfg.search_limit == config_module.DEFAULT_SEARCH_LIMIT == 20
    assert cfg.auto_index is True
    assert cfg.log_level == "WARNING"


def test_setters_persist_values(tmp_path, monkeypatch):
    config_file = _prepare_config(tmp_path, monkeypatch)

    config_module.set_search_limit(5)
    config_module.set_auto_index(False)
    config_module.set_log_level(" debug ")

    data = json.loads(config_file.read_text(encoding="utf-8"))
    assert data == {"search_limit": 5, "auto_index": False, "log_level": "DEBUG"}
    cfg = config_module.load_config()
    assert cfg.search_limit == 5
    assert cfg.auto_index is False
    assert cfg.log_level == "DEBUG"


def test_negative_search_limit_rejected(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)

    with pytest.raises(ValueError):
        config_module.set_search_limit(-1)


def test_normalize_log_level():
    assert config_module.normalize_log_level(None) == "WARNING"
    assert config_module.normalize_log_level("") == "WARNING"
    assert config_module.normalize_log_level("info") == "INFO"
    with pytest.raises(ValueError):
        config_module.normalize_log_level("chatty")
    with pytest.raises(ValueError):
        config_module.normalize_log_level(10)


def test_load_config_tolerates_corrupt_file(tmp_path, monkeypatch):
    config_file = _prepare_config(tmp_path, monkeypatch)
    config_file.parent.mkdir(parents=True)

    config_file.write_text("{oops", encoding="utf-8")
    assert config_module.load_config() == config_module.Config()

    config_file.write_text(json.dumps(["not", "a", "dict"]), encoding="utf-8")
    assert config_module.load_config() == config_module.Config()

    config_file.write_text(json.dumps({"search_limit": -3}), encoding="utf-8")
    assert config_module.load_config() == config_module.Config()

    config_file.write_text(json.dumps({"auto_index": "maybe"}), encoding="utf-8")
    assert config_module.load_config() == config_module.Config()


def test_load_config_coerces_loose_values(tmp_path, monkeypatch):
    config_file = _prepare_config(tmp_path, monkeypatch)
    config_file.parent.mkdir(parents=True)
    config_file.write_text(
        json.dumps({"search_limit": "7", "auto_index": "off", "log_level": "nonsense"}),
        encoding="utf-8",
    )

    cfg = config_module.load_config()

    assert cfg.search_limit == 7
    assert cfg.auto_index is False
    assert cfg.log_level == "WARNING"


def test_config_dir_context_overrides_paths(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)
    override = tmp_path / "override"

    with config_module.config_dir_context(override):
        config_module.set_search_limit(3)
        assert config_module.recent_roots_path() == override.resolve() / "recent_roots.json"
        assert config_module.load_config().search_limit == 3

    assert config_module.load_config().search_limit == 20
    assert (override / "config.json").exists()


def test_set_config_dir_updates_module_paths(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)
    target = tmp_path / "elsewhere"

    config_module.set_config_dir(target)

    assert config_module.CONFIG_DIR == target.resolve()
    assert config_module.CONFIG_FILE == target.resolve() / "config.json"

    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        config_module.set_config_dir(blocker)
