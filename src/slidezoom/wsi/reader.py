"""Slide source backed by OpenSlide.

``WSIReader`` adapts ``openslide.OpenSlide`` to ``SlideSourceProtocol``:
it checks the path before handing it to the decoder, caches the level
layout, and turns decoder failures into ``WSIOpenError``/``WSIReadError``.
"""

from __future__ import annotations

import ctypes
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

import openslide
from PIL import Image

from slidezoom.utils.logging import get_logger
from slidezoom.wsi.exceptions import WSIOpenError, WSIReadError
from slidezoom.wsi.types import PROPERTY_MPP_X, PROPERTY_MPP_Y, PROPERTY_VENDOR, WSIMetadata

if TYPE_CHECKING:
    from types import TracebackType

logger = get_logger(__name__)

# Formats OpenSlide can decode, matched case-insensitively
SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".bif",
        ".dcm",
        ".mrxs",
        ".ndpi",
        ".scn",
        ".svs",
        ".svslide",
        ".tif",
        ".tiff",
        ".vms",
        ".vmu",
    }
)


def _check_slide_path(path: Path) -> None:
    if not path.exists():
        raise WSIOpenError("File not found", path=path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise WSIOpenError(
            f"Unsupported file extension '{suffix}'. "
            f"Expected one of: {', '.join(sorted(SUPPORTED_EXTENSIONS))}",
            path=path,
        )


def _float_property(props: Mapping[str, str], key: str) -> float | None:
    try:
        return float(props[key])
    except (KeyError, ValueError):
        return None


class WSIReader:
    """OpenSlide-backed slide source.

    Locations are Level-0 pixels and sizes are pixels of the level being
    read, as in OpenSlide itself.

    Args:
        path: Slide file to open.

    Raises:
        WSIOpenError: If the file is missing, its extension is not a
            slide format, or OpenSlide rejects it.

    Usage:
        with WSIReader("/path/to/slide.svs") as reader:
            dz = DeepZoomGenerator(reader, tile_size=254, overlap=1)
            image = dz.read_tile(dz.get_tile(dz.level_count - 1, 0, 0))
    """

    __slots__ = ("_metadata", "_path", "_slide")

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).resolve()
        self._metadata: WSIMetadata | None = None
        self._slide: openslide.OpenSlide | None = None

        _check_slide_path(self._path)
        try:
            self._slide = openslide.OpenSlide(str(self._path))
        except openslide.OpenSlideError as e:
            raise WSIOpenError(f"Failed to open WSI: {e}", path=self._path) from e

        logger.debug("Opened slide", path=str(self._path))

    @property
    def path(self) -> Path:
        """Return the resolved slide path."""
        return self._path

    def _handle(self) -> openslide.OpenSlide:
        if self._slide is None:
            raise WSIReadError("WSI is closed", path=self._path)
        return self._slide

    def get_metadata(self) -> WSIMetadata:
        """Return the slide's level layout and properties (read once)."""
        if self._metadata is None:
            slide = self._handle()
            props = dict(slide.properties)
            width, height = slide.dimensions
            self._metadata = WSIMetadata(
                path=str(self._path),
                width=width,
                height=height,
                level_count=slide.level_count,
                level_dimensions=tuple((w, h) for w, h in slide.level_dimensions),
                level_downsamples=tuple(float(ds) for ds in slide.level_downsamples),
                vendor=props.get(PROPERTY_VENDOR, "unknown"),
                mpp_x=_float_property(props, PROPERTY_MPP_X),
                mpp_y=_float_property(props, PROPERTY_MPP_Y),
                properties=props,
            )
        return self._metadata

    def read_region(
        self,
        location: tuple[int, int],
        level: int,
        size: tuple[int, int],
    ) -> Image.Image:
        """Read an RGBA rectangle; pixels outside the slide are transparent.

        Raises:
            WSIReadError: If the level is out of range, the size is
                negative, or OpenSlide fails.
        """
        slide = self._handle()
        level_count = self.get_metadata().level_count

        problem = None
        if not 0 <= level < level_count:
            problem = f"Invalid level {level}. Must be in range [0, {level_count - 1}]"
        elif size[0] < 0 or size[1] < 0:
            problem = f"Invalid size {size}. Width and height must not be negative."
        if problem is not None:
            raise WSIReadError(
                problem, path=self._path, level=level, location=location, size=size
            )

        try:
            return slide.read_region(location, level, size)
        except (openslide.OpenSlideError, ctypes.ArgumentError) as e:
            raise WSIReadError(
                f"Failed to read region: {e}",
                path=self._path,
                level=level,
                location=location,
                size=size,
            ) from e

    def get_best_level_for_downsample(self, downsample: float) -> int:
        """Return OpenSlide's choice of native level for ``downsample``."""
        slide = self._handle()
        try:
            return slide.get_best_level_for_downsample(downsample)
        except openslide.OpenSlideError as e:
            raise WSIReadError(
                f"Failed to get best level for downsample {downsample}: {e}",
                path=self._path,
            ) from e

    def close(self) -> None:
        """Release the OpenSlide handle; safe to call more than once."""
        slide, self._slide = self._slide, None
        if slide is not None:
            slide.close()

    def __enter__(self) -> WSIReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        """Return string representation."""
        return f"WSIReader(path={self._path!r})"
