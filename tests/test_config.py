"""Tests for configuration manager."""

import tempfile
from pathlib import Path

import pytest  # type: ignore[import-not-found]
import yaml  # type: ignore[import-untyped]

from pomod.core.config import ConfigManager


@pytest.fixture
def temp_config_path():
    """Create a temporary config file path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "config.yml"


class TestConfigManager:
    """Test ConfigManager."""

    def test_initialization_creates_default_config(self, temp_config_path: Path) -> None:
        """Test that initialization creates default configuration."""
        assert not temp_config_path.exists()

        config = ConfigManager(temp_config_path)

        assert temp_config_path.exists()
        assert config.get("version") == "1.0"
        assert config.get("session.work_time") == 25
        assert config.get("notifications.enabled") is True

    def test_default_config_values(self, temp_config_path: Path) -> None:
        """Test all default configuration values."""
        config = ConfigManager(temp_config_path)

        assert config.get("session.work_time") == 25
        assert config.get("session.short_break_time") == 4
        assert config.get("session.long_break_time") == 20
        assert config.get("session.short_breaks_before_long") == 3
        assert config.get("daemon.socket_path") is None
        assert config.get("daemon.log_level") == "INFO"
        assert config.get("daemon.request_timeout") == 5.0
        assert config.get("notifications.backend") == "auto"
        assert config.get("notifications.timeout") == 4

    def test_load_existing_config(self, temp_config_path: Path) -> None:
        """Test loading existing configuration."""
        config_data = {
            "version": "1.0",
            "session": {"work_time": 50, "short_break_time": 10},
            "daemon": {"socket_path": "/tmp/pomod-test.sock"},
        }
        with open(temp_config_path, "w") as f:
            yaml.dump(config_data, f)

        config = ConfigManager(temp_config_path)

        assert config.get("session.work_time") == 50
        assert config.get("session.short_break_time") == 10
        assert config.get("daemon.socket_path") == "/tmp/pomod-test.sock"

    def test_merge_with_defaults(self, temp_config_path: Path) -> None:
        """Test that partial config is merged with defaults."""
        with open(temp_config_path, "w") as f:
            yaml.dump({"version": "1.0", "session": {"work_time": 30}}, f)

        config = ConfigManager(temp_config_path)

        assert config.get("session.work_time") == 30
        assert config.get("session.long_break_time") == 20
        assert config.get("notifications.enabled") is True

    def test_empty_file_uses_defaults(self, temp_config_path: Path) -> None:
        temp_config_path.write_text("")

        config = ConfigManager(temp_config_path)

        assert config.get("session.work_time") == 25

    def test_get_nonexistent_key_returns_default(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "default") == "default"
        assert config.get("session.nonexistent", 42) == 42
        assert config.get("version.too.deep", "x") == "x"

    def test_set_value_persists(self, temp_config_path: Path) -> None:
        """Test setting configuration values."""
        config = ConfigManager(temp_config_path)

        config.set("session.work_time", 45)

        assert config.get("session.work_time") == 45
        assert ConfigManager(temp_config_path).get("session.work_time") == 45

    def test_set_creates_missing_keys(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        config.set("custom.nested.value", "test")

        assert config.get("custom.nested.value") == "test"

    def test_invalid_set_keeps_previous_value(self, temp_config_path: Path) -> None:
        """Test a rejected value leaves the configuration unchanged."""
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError, match="Invalid configuration"):
            config.set("session.work_time", 0)

        assert config.get("session.work_time") == 25
        assert ConfigManager(temp_config_path).get("session.work_time") == 25

    @pytest.mark.parametrize(
        "key,value",
        [
            ("session.short_break_time", -1),
            ("session.short_breaks_before_long", "three"),
            ("daemon.log_level", "TRACE"),
            ("daemon.request_timeout", 0),
            ("notifications.enabled", "yes"),
            ("notifications.timeout", 120),
        ],
    )
    def test_validation_rejects(self, temp_config_path: Path, key, value) -> None:
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError):
            config.set(key, value)

    def test_log_level_validation(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        for level in ["DEBUG", "INFO", "WARNING", "ERROR"]:
            config.set("daemon.log_level", level)
            assert config.get("daemon.log_level") == level

    def test_validate_valid_config(self, temp_config_path: Path) -> None:
        assert ConfigManager(temp_config_path).validate() is True

    def test_reset_to_defaults(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)
        config.set("session.work_time", 50)
        config.set("notifications.enabled", False)

        config.reset()

        assert config.get("session.work_time") == 25
        assert config.get("notifications.enabled") is True

    def test_to_dict_is_copy(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        config_dict = config.to_dict()
        config_dict["session"]["work_time"] = 99

        assert config.get("session.work_time") == 25

    def test_get_all_keys(self, temp_config_path: Path) -> None:
        keys = ConfigManager(temp_config_path).get_all_keys()

        assert "version" in keys
        assert "session.work_time" in keys
        assert "daemon.socket_path" in keys
        assert "notifications.timeout" in keys
        assert "session" not in keys

    def test_corrupted_config_creates_backup(self, temp_config_path: Path) -> None:
        """Test that invalid config is backed up and defaults used."""
        with open(temp_config_path, "w") as f:
            yaml.dump({"version": "1.0", "session": {"work_time": 5000}}, f)

        backup_path = temp_config_path.with_suffix(".yml.backup")

        with pytest.raises(ValueError, match="Config validation failed"):
            ConfigManager(temp_config_path)

        assert backup_path.exists()
        with open(temp_config_path) as f:
            new_config = yaml.safe_load(f)
        assert new_config["session"]["work_time"] == 25

    def test_config_file_format(self, temp_config_path: Path) -> None:
        """Test that config file is saved in block-style YAML."""
        config = ConfigManager(temp_config_path)
        config.set("notifications.enabled", False)

        content = temp_config_path.read_text()

        parsed = yaml.safe_load(content)
        assert parsed["version"] == "1.0"
        assert parsed["notifications"]["enabled"] is False
        assert "enabled: false" in content
