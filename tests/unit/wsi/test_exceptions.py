"""Unit tests for slide source exceptions."""

from __future__ import annotations

from pathlib import Path

import pytest

from slidezoom.wsi.exceptions import WSIError, WSIOpenError, WSIReadError


class TestWSIError:
    """Tests for the base WSIError class."""

    def test_message_only(self) -> None:
        """Without a path the message is used verbatim."""
        error = WSIError("Slide handle lost")
        assert str(error) == "Slide handle lost"
        assert error.message == "Slide handle lost"
        assert error.path is None

    def test_path_is_appended(self) -> None:
        """A path is normalized to Path and shown after the message."""
        error = WSIError("Slide handle lost", path="/slides/a.svs")
        assert error.path == Path("/slides/a.svs")
        assert str(error) == f"Slide handle lost (path: {Path('/slides/a.svs')})"

    @pytest.mark.parametrize("cls", [WSIOpenError, WSIReadError])
    def test_subclasses_share_base(self, cls: type[WSIError]) -> None:
        """Callers can catch every source failure as WSIError."""
        with pytest.raises(WSIError):
            raise cls("failure")


class TestWSIReadError:
    """Tests for WSIReadError context formatting."""

    def test_full_read_context(self) -> None:
        """Level, location and size of the failed read are reported."""
        error = WSIReadError(
            "Failed to read region",
            path="/slides/a.svs",
            level=2,
            location=(1000, 2000),
            size=(512, 512),
        )

        message = str(error)
        assert message.startswith("Failed to read region (")
        assert "level=2" in message
        assert "location=(1000, 2000)" in message
        assert "size=(512, 512)" in message
        assert (error.level, error.location, error.size) == (2, (1000, 2000), (512, 512))

    def test_missing_context_is_omitted(self) -> None:
        """Only the fields that were given appear in the message."""
        message = str(WSIReadError("Invalid level 9", level=9))
        assert message == "Invalid level 9 (level=9)"

    def test_level_zero_is_reported(self) -> None:
        """Level 0 is a real level, not missing context."""
        assert "level=0" in str(WSIReadError("Failed", level=0))

    def test_message_only(self) -> None:
        """Without context the message is unchanged."""
        error = WSIReadError("WSI is closed")
        assert str(error) == "WSI is closed"
        assert error.level is None
        assert error.location is None
        assert error.size is None
