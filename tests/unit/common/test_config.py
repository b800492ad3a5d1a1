"""Tests for the configuration module."""

import pytest
import yaml

from storegate.common.config import (
    DEFAULT_FALLBACK_PATH,
    GuardConfig,
    LoggingConfig,
    StoreGateConfig,
    get_alias_table,
    load_config,
    load_typed_config,
    parse_config,
    parse_guard_config,
    parse_module_aliases,
)
from storegate.core.config import Settings
from storegate.core.rbac.aliases import DEFAULT_ALIAS_TABLE


@pytest.fixture
def sample_config():
    """Sample configuration dictionary."""
    return {
        "module_aliases": {
            "Dashboard": ["dashboard"],
            "Stock": ["inventory", "stock_transfers"],
            "Reports": "reports",
        },
        "guard": {
            "fallback_path": "/home",
            "placeholder_message": "Please wait",
        },
        "logging": {
            "level": "DEBUG",
            "dir": "/tmp/storegate",
            "file_logging": True,
        },
    }


class TestParseConfig:
    """Tests for parsing configuration sections."""

    def test_parse_module_aliases(self, sample_config):
        """Test single keys are turned into lists."""
        aliases = parse_module_aliases(sample_config["module_aliases"])
        assert aliases["Stock"] == ["inventory", "stock_transfers"]
        assert aliases["Reports"] == ["reports"]

    def test_module_aliases_must_be_mapping(self):
        """Test a non-mapping aliases section is rejected."""
        with pytest.raises(TypeError):
            parse_module_aliases(["Dashboard"])

    def test_parse_guard_defaults(self):
        """Test guard defaults."""
        guard = parse_guard_config({})
        assert guard.fallback_path == DEFAULT_FALLBACK_PATH
        assert guard.placeholder_message

    def test_parse_full_config(self, sample_config):
        """Test parsing every section."""
        config = parse_config(sample_config)
        assert config.guard == GuardConfig(fallback_path="/home", placeholder_message="Please wait")
        assert config.logging == LoggingConfig(level="DEBUG", dir="/tmp/storegate", file_logging=True)
        assert "Stock" in config.module_aliases

    def test_parse_empty_config(self):
        """Test an empty file yields defaults."""
        assert parse_config({}) == StoreGateConfig()


class TestLoadConfig:
    """Tests for loading YAML files."""

    def test_load_yaml(self, tmp_path, sample_config):
        """Test loading a YAML file."""
        path = tmp_path / "storegate.yaml"
        path.write_text(yaml.safe_dump(sample_config))
        assert load_config(str(path)) == sample_config

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        """Test an empty file loads as an empty mapping."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == {}

    def test_non_mapping_root(self, tmp_path):
        """Test a list at the root is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(TypeError):
            load_config(str(path))

    def test_env_expansion(self, tmp_path, monkeypatch):
        """Test ${VAR} references are expanded."""
        monkeypatch.setenv("STOREGATE_TEST_LOG_DIR", "/srv/logs")
        path = tmp_path / "env.yaml"
        path.write_text("logging:\n  dir: ${STOREGATE_TEST_LOG_DIR}\n")
        assert load_typed_config(str(path)).logging.dir == "/srv/logs"

    def test_no_path_gives_defaults(self):
        """Test no configuration file means built-in defaults."""
        assert load_typed_config(None) == StoreGateConfig()


class TestAliasTable:
    """Tests for freezing configured aliases."""

    def test_configured_aliases(self, sample_config):
        """Test configured aliases replace the defaults."""
        table = get_alias_table(parse_config(sample_config))
        assert table.modules_for("Stock") == ("inventory", "stock_transfers")
        assert "Inventory" not in table

    def test_default_aliases(self):
        """Test the built-in table is used when none are configured."""
        assert get_alias_table(StoreGateConfig()) is DEFAULT_ALIAS_TABLE


class TestSettings:
    """Tests for environment settings."""

    def test_defaults(self, monkeypatch):
        """Test defaults without environment overrides."""
        monkeypatch.delenv("STOREGATE_FALLBACK_PATH", raising=False)
        settings = Settings(_env_file=None)
        assert settings.app_name == "storegate"
        assert settings.fallback_path is None
        assert settings.loading_retry_after == 1

    def test_env_prefix(self, monkeypatch):
        """Test STOREGATE_ environment variables are read."""
        monkeypatch.setenv("STOREGATE_FALLBACK_PATH", "/login")
        monkeypatch.setenv("STOREGATE_LOADING_RETRY_AFTER", "3")
        settings = Settings(_env_file=None)
        assert settings.fallback_path == "/login"
        assert settings.loading_retry_after == 3

    def test_cors_origins_list(self):
        """Test comma-separated origins are split."""
        settings = Settings(_env_file=None, cors_origins="http://a, http://b,")
        assert settings.cors_origins_list == ["http://a", "http://b"]
