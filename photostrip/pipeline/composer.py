import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from photostrip.camera.capturer import Photo
from photostrip.errors import IncompleteSession
from photostrip.pipeline.buffer import PhotoBuffer
from photostrip.pipeline.layouts import LayoutPreset

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

STRIP_PADDING = 12
CELL_GAP = 8
CORNER_RADIUS = 10


def normalize_color(color: str) -> str:
    """Validate a ``#rrggbb`` colour and return it lower-cased."""
    if not isinstance(color, str) or not _HEX_COLOR.match(color):
        raise ValueError(f"Colour must look like '#rrggbb', got {color!r}")
    return color.lower()


def contrast_text_color(background: str) -> str:
    """White text on a black strip, black text on anything else."""
    return "#ffffff" if normalize_color(background) == "#000000" else "#000000"


@dataclass(frozen=True)
class StripCell:
    photo: Photo
    row: int
    column: int


@dataclass(frozen=True)
class CompositionDescriptor:
    """Everything an export renderer needs to rasterise a strip."""
    layout_id: str
    columns: int
    rows: int
    strip_width: int
    padding: int
    gap: int
    corner_radius: int
    cell_width: int
    cells: Tuple[StripCell, ...]
    background_color: str
    caption: str
    caption_color: str
    filename: str


class StripComposer:
    """
    Arranges a completed photo buffer into a strip grid.

    Cells run left-to-right then top-to-bottom; the caption spans every
    column below the last row. The composer performs no I/O.
    """

    def __init__(self, caption_title: str = "Photo Booth"):
        self.caption_title = caption_title
        self.log = logging.getLogger("StripComposer")

    def compose(
        self,
        buffer: PhotoBuffer,
        layout: LayoutPreset,
        decoration_color: str,
        on: Optional[date] = None,
    ) -> CompositionDescriptor:
        """
        :param buffer: Photos of a finished session.
        :param layout: Preset the session ran with.
        :param decoration_color: Background colour of the strip.
        :param on: Date printed in the caption (defaults to today).
        """
        if len(buffer) != layout.pose_count:
            raise IncompleteSession(len(buffer), layout.pose_count)

        background = normalize_color(decoration_color)
        columns = layout.grid_columns
        inner_width = layout.strip_width - 2 * STRIP_PADDING - (columns - 1) * CELL_GAP

        cells = tuple(
            StripCell(photo=photo, row=i // columns, column=i % columns)
            for i, photo in enumerate(buffer.photos)
        )

        caption_date = on or date.today()
        descriptor = CompositionDescriptor(
            layout_id=layout.id,
            columns=columns,
            rows=layout.grid_rows,
            strip_width=layout.strip_width,
            padding=STRIP_PADDING,
            gap=CELL_GAP,
            corner_radius=CORNER_RADIUS,
            cell_width=inner_width // columns,
            cells=cells,
            background_color=background,
            caption=f"{self.caption_title} - {caption_date:%m/%d/%Y}",
            caption_color=contrast_text_color(background),
            filename=f"photo-strip-{layout.id}.png",
        )
        self.log.debug(
            f"Composed layout {layout.id}: {len(cells)} cells in "
            f"{descriptor.rows}x{columns}, width {layout.strip_width}px"
        )
        return descriptor
