"""WSI data layer for slidezoom.

Slide sources that feed the Deep Zoom engine with level layout,
properties and pixel rectangles.

Key Components:
    - WSIReader: OpenSlide-backed source for slide files
    - MemorySlide: numpy-backed source for in-memory images
    - WSIMetadata / NativeLevel: immutable level layout
    - SlideSourceProtocol: what the engine requires from a source
    - argb_to_rgba: decoder pixel-format correction

Example:
    from slidezoom.wsi import WSIReader

    with WSIReader("slide.svs") as reader:
        metadata = reader.get_metadata()
        print(metadata.native_levels)
"""

from slidezoom.wsi.exceptions import WSIError, WSIOpenError, WSIReadError
from slidezoom.wsi.memory import MemorySlide
from slidezoom.wsi.pixels import argb_to_rgba, native_byteorder, pack_argb
from slidezoom.wsi.reader import SUPPORTED_EXTENSIONS, WSIReader
from slidezoom.wsi.types import (
    PROPERTY_BACKGROUND_COLOR,
    PROPERTY_BOUNDS_HEIGHT,
    PROPERTY_BOUNDS_WIDTH,
    PROPERTY_BOUNDS_X,
    PROPERTY_BOUNDS_Y,
    NativeLevel,
    SlideSourceProtocol,
    WSIMetadata,
    best_level_for_downsample,
)

__all__ = [
    "PROPERTY_BACKGROUND_COLOR",
    "PROPERTY_BOUNDS_HEIGHT",
    "PROPERTY_BOUNDS_WIDTH",
    "PROPERTY_BOUNDS_X",
    "PROPERTY_BOUNDS_Y",
    "SUPPORTED_EXTENSIONS",
    "MemorySlide",
    "NativeLevel",
    "SlideSourceProtocol",
    "WSIError",
    "WSIMetadata",
    "WSIOpenError",
    "WSIReadError",
    "WSIReader",
    "argb_to_rgba",
    "best_level_for_downsample",
    "native_byteorder",
    "pack_argb",
]
