"""CLI module for slidezoom.

Provides the command-line interface for inspecting Deep Zoom pyramids
and tile geometry of whole-slide images.
"""

from __future__ import annotations

from slidezoom.cli.main import app

__all__ = ["app"]
