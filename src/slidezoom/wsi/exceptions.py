"""Exceptions raised by slide sources.

Low-level decoder errors (OpenSlide, ctypes) are wrapped so callers of the
Deep Zoom engine only ever see ``WSIError`` subclasses from a source.
"""

from pathlib import Path


class WSIError(Exception):
    """Base exception for slide source errors."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        """Initialize with an optional slide path for context.

        Args:
            message: Human-readable error description.
            path: Slide file that caused the error, if any.
        """
        self.path = Path(path) if path else None
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.path:
            return f"{self.message} (path: {self.path})"
        return self.message


class WSIOpenError(WSIError):
    """Raised when a slide cannot be opened.

    Covers a missing file, an unsupported extension, and any failure of
    the decoder to recognize the file.
    """


class WSIReadError(WSIError):
    """Raised when reading pixels or metadata from an open slide fails.

    This is the source read failure the Deep Zoom engine propagates
    verbatim from ``DeepZoomGenerator.read_tile``.
    """

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        *,
        level: int | None = None,
        location: tuple[int, int] | None = None,
        size: tuple[int, int] | None = None,
    ) -> None:
        """Initialize read error with the rectangle that was requested.

        Args:
            message: Human-readable error description.
            path: Slide file being read.
            level: Native level being read.
            location: (x, y) of the read in Level-0 coordinates.
            size: (width, height) requested at ``level``.
        """
        self.level = level
        self.location = location
        self.size = size
        super().__init__(message, path)

    def _format_message(self) -> str:
        context = [
            f"{name}={value}"
            for name, value in (
                ("path", self.path),
                ("level", self.level),
                ("location", self.location),
                ("size", self.size),
            )
            if value is not None
        ]
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"
