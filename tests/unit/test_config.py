"""Tests for slidezoom.config module."""

from pathlib import Path

import pytest

from slidezoom.config import ConfigError, Settings


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that default values are set correctly."""
        for name in ("TILE_SIZE", "OVERLAP", "LIMIT_BOUNDS", "BACKGROUND_COLOR"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
        )

        # Deep Zoom defaults
        assert settings.TILE_SIZE == 254
        assert settings.OVERLAP == 1
        assert settings.LIMIT_BOUNDS is False

        # Rendering and enumeration
        assert settings.BACKGROUND_COLOR == "#ffffff"
        assert settings.ENUMERATION_QUEUE_SIZE == 1

    def test_env_var_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that environment variables override defaults."""
        monkeypatch.setenv("TILE_SIZE", "510")
        monkeypatch.setenv("OVERLAP", "2")
        monkeypatch.setenv("LIMIT_BOUNDS", "true")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("BACKGROUND_COLOR", "#000000")

        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
        )

        assert settings.TILE_SIZE == 510
        assert settings.OVERLAP == 2
        assert settings.LIMIT_BOUNDS is True
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.BACKGROUND_COLOR == "#000000"

    def test_env_file_is_read(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that a .env file supplies values."""
        monkeypatch.delenv("OVERLAP", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("OVERLAP=4\n")

        settings = Settings(
            _env_file=env_file,  # type: ignore[call-arg]
        )

        assert settings.OVERLAP == 4

    def test_log_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that logging defaults to INFO on the console."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
        )
        assert settings.LOG_LEVEL == "INFO"
        assert settings.LOG_FORMAT == "console"


class TestRequireValidTiling:
    """Tests for Settings.require_valid_tiling."""

    def test_returns_tile_size_and_overlap(self) -> None:
        """Test valid values are returned together."""
        settings = Settings(
            TILE_SIZE=256,
            OVERLAP=0,
            _env_file=None,  # type: ignore[call-arg]
        )
        assert settings.require_valid_tiling() == (256, 0)

    def test_non_positive_tile_size_raises(self) -> None:
        """Test a zero tile size names the variable to fix."""
        settings = Settings(
            TILE_SIZE=0,
            _env_file=None,  # type: ignore[call-arg]
        )
        with pytest.raises(ConfigError) as exc_info:
            settings.require_valid_tiling()

        assert exc_info.value.env_var == "TILE_SIZE"
        assert "TILE_SIZE environment variable" in str(exc_info.value)

    def test_negative_overlap_raises(self) -> None:
        """Test a negative overlap is rejected."""
        settings = Settings(
            OVERLAP=-1,
            _env_file=None,  # type: ignore[call-arg]
        )
        with pytest.raises(ConfigError, match="OVERLAP must not be negative"):
            settings.require_valid_tiling()
