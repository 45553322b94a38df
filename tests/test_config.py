"""Tests for extjs2react.yaml loading."""

import pytest

from extjs2react.config import (
    CONFIG_FILE_NAME,
    Settings,
    find_config_file,
    load_settings,
    save_settings,
)
from extjs2react.errors import ConfigError


def test_load_settings_resolves_relative_paths(tmp_path):
    """Paths are anchored at the config file's directory."""
    config = tmp_path / CONFIG_FILE_NAME
    config.write_text("source_dir: src\ntarget_dir: out\nwords:\n  - Grid\n")

    settings = load_settings(config)

    assert settings.source_dir == (tmp_path / "src").resolve()
    assert settings.target_dir == (tmp_path / "out").resolve()
    assert settings.framework_file is None
    assert settings.words == ["Grid"]


def test_default_libraries():
    settings = Settings()

    sources = [lib.source for lib in settings.libraries]
    assert sources == ["framework", "app", "react", "lodash"]
    assert settings.libraries[2].tags() == ["React", "useMemo", "useEffect"]


def test_load_settings_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(tmp_path / CONFIG_FILE_NAME)


def test_load_settings_invalid_yaml(tmp_path):
    config = tmp_path / CONFIG_FILE_NAME
    config.write_text("source_dir: [unclosed\n")

    with pytest.raises(ConfigError):
        load_settings(config)


def test_load_settings_invalid_value(tmp_path):
    config = tmp_path / CONFIG_FILE_NAME
    config.write_text("words: 3\n")

    with pytest.raises(ConfigError):
        load_settings(config)


def test_save_and_find(tmp_path):
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    save_settings(Settings(source_dir="app", words=["Grid"]), tmp_path / CONFIG_FILE_NAME)

    found = find_config_file(nested)

    assert found == tmp_path / CONFIG_FILE_NAME
    assert load_settings(found).words == ["Grid"]
