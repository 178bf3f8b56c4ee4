"""slidezoom: Deep Zoom tile pyramids over whole-slide images."""

__version__ = "0.1.0"
