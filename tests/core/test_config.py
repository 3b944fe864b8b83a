"""Tests for configuration schema and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from httpwindow.config import DispatcherSettings, LoggingSettings, load_settings
from httpwindow.options import TransportOptions


class TestDispatcherSettings:
    def test_defaults(self) -> None:
        settings = DispatcherSettings()

        assert settings.window_size == 5
        assert settings.poll_timeout == 10.0
        assert settings.default_headers == {}
        assert settings.default_options == TransportOptions()
        assert settings.logging.level == "INFO"
        assert settings.logging.json_output is False

    @pytest.mark.parametrize("window_size", [1, 0, -3])
    def test_window_size_below_two_rejected(self, window_size: int) -> None:
        with pytest.raises(ValidationError):
            DispatcherSettings(window_size=window_size)

    def test_poll_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DispatcherSettings(poll_timeout=0)

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DispatcherSettings(max_handles=4)  # type: ignore[call-arg]

    def test_settings_are_frozen(self) -> None:
        settings = DispatcherSettings()
        with pytest.raises(ValidationError):
            settings.window_size = 10  # type: ignore[misc]

    def test_header_pairs_keep_order(self) -> None:
        settings = DispatcherSettings(default_headers={"Accept": "text/html", "X-Trace": "1"})

        assert settings.header_pairs == (("Accept", "text/html"), ("X-Trace", "1"))

    def test_default_options_from_mapping(self) -> None:
        settings = DispatcherSettings.model_validate({"default_options": {"timeout": 3, "verify": False}})

        assert settings.default_options.timeout == 3
        assert settings.default_options.verify is False


class TestLoggingSettings:
    def test_level_upper_cased(self) -> None:
        assert LoggingSettings(level="debug").level == "DEBUG"  # type: ignore[arg-type]

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")  # type: ignore[arg-type]


class TestLoadSettings:
    """Test Dynaconf-based settings loading."""

    def test_load_from_yaml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
window_size: 8
poll_timeout: 2.5
default_headers:
  Accept: application/json
default_options:
  timeout: 15
  follow_redirects: false
logging:
  level: debug
""")
        settings = load_settings(config_file)

        assert settings.window_size == 8
        assert settings.poll_timeout == 2.5
        assert settings.default_headers == {"Accept": "application/json"}
        assert settings.default_options.timeout == 15
        assert settings.default_options.follow_redirects is False
        assert settings.logging.level == "DEBUG"

    def test_load_with_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
window_size: 8
""")
        # Environment variable should override YAML
        monkeypatch.setenv("HTTPWINDOW_WINDOW_SIZE", "12")

        settings = load_settings(config_file)
        assert settings.window_size == 12

    def test_load_with_nested_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
default_options:
  timeout: 15
  verify: false
""")
        monkeypatch.setenv("HTTPWINDOW_DEFAULT_OPTIONS__TIMEOUT", "7")

        settings = load_settings(config_file)
        assert settings.default_options.timeout == 7
        assert settings.default_options.verify is False

    def test_load_nested_env_key_absent_from_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested env keys are lower-cased to match the schema."""
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
window_size: 4
""")
        monkeypatch.setenv("HTTPWINDOW_DEFAULT_OPTIONS__MAX_REDIRECTS", "2")
        monkeypatch.setenv("HTTPWINDOW_LOGGING__LEVEL", "warning")

        settings = load_settings(config_file)
        assert settings.default_options.max_redirects == 2
        assert settings.logging.level == "WARNING"

    def test_load_validates_schema(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
window_size: 1
""")
        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_load_rejects_unknown_transport_option(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
default_options:
  retries: 3
""")
        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_load_missing_file_raises_file_not_found(self, tmp_path: Path) -> None:
        missing_file = tmp_path / "nonexistent.yaml"
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_settings(missing_file)
