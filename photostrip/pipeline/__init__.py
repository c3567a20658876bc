"""
Pipeline package for the photo strip booth.

This package contains the components responsible for:
- Resolving layout presets (layouts)
- Holding the last N captured photos of a session (buffer)
- Arranging a finished buffer into a strip grid (composer)
- Rasterising and saving a composed strip (renderer)
- Running the countdown/capture loop of a session (controller)
"""

from .layouts import LayoutCatalog, LayoutPreset, DEFAULT_LAYOUTS
from .buffer import PhotoBuffer
from .composer import CompositionDescriptor, StripCell, StripComposer
from .renderer import StripRenderer
from .controller import Session, SessionController, SessionSnapshot


__all__ = [
    "LayoutCatalog",
    "LayoutPreset",
    "DEFAULT_LAYOUTS",
    "PhotoBuffer",
    "CompositionDescriptor",
    "StripCell",
    "StripComposer",
    "StripRenderer",
    "Session",
    "SessionController",
    "SessionSnapshot",
]
