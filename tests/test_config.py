"""Tests for config.yaml handling."""
import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from cafeteria.config import (
    CafeteriaConfig,
    DEFAULT_BASE_PATH,
    get_base_path,
    get_config_value,
    load_config,
    set_config_value,
    write_default_config,
)


class TestBasePath:

    def test_flag_wins(self, tmp_path):
        with patch.dict(os.environ, {"CAFETERIA_BASE_PATH": "/from/env"}):
            assert get_base_path(tmp_path) == tmp_path

    def test_env_var(self):
        with patch.dict(os.environ, {"CAFETERIA_BASE_PATH": "/from/env"}):
            assert get_base_path() == Path("/from/env")

    def test_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert get_base_path() == DEFAULT_BASE_PATH


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path) == CafeteriaConfig()

    def test_template_matches_defaults(self, tmp_path):
        assert write_default_config(tmp_path) is True
        assert write_default_config(tmp_path) is False
        assert load_config(tmp_path) == CafeteriaConfig()

    def test_overrides(self, tmp_path):
        (tmp_path / "config.yaml").write_text(
            "database:\n  name: menu\n  wal: true\nlogging:\n  level: debug\n"
        )
        config = load_config(tmp_path)
        assert config.db_name == "menu"
        assert config.wal is True
        assert config.allow_downgrade is False
        assert config.log_level == "DEBUG"

    def test_non_mapping_rejected(self, tmp_path):
        (tmp_path / "config.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(tmp_path)

    def test_non_mapping_section_rejected(self, tmp_path):
        (tmp_path / "config.yaml").write_text("database: foo\n")
        with pytest.raises(ValueError, match="'database' section"):
            load_config(tmp_path)

        (tmp_path / "config.yaml").write_text("logging: [DEBUG]\n")
        with pytest.raises(ValueError, match="'logging' section"):
            load_config(tmp_path)

    def test_invalid_yaml_propagates(self, tmp_path):
        (tmp_path / "config.yaml").write_text("database: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_config(tmp_path)


class TestGetSet:

    def test_set_nested_key_coerces_scalars(self, tmp_path):
        write_default_config(tmp_path)

        assert set_config_value(tmp_path, "database.allow_downgrade", "true") is True
        assert set_config_value(tmp_path, "extra.retries", "3") == 3

        assert get_config_value(tmp_path, "database.allow_downgrade") is True
        assert get_config_value(tmp_path, "extra.retries") == 3
        assert load_config(tmp_path).allow_downgrade is True

    def test_get_missing_key(self, tmp_path):
        write_default_config(tmp_path)
        with pytest.raises(KeyError):
            get_config_value(tmp_path, "database.nope")

    def test_get_section(self, tmp_path):
        write_default_config(tmp_path)
        assert get_config_value(tmp_path, "logging") == {"level": "WARNING"}
