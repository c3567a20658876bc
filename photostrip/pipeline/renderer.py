import logging
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np

from photostrip.pipeline.composer import CompositionDescriptor

CAPTION_MARGIN = 10
CAPTION_FONT = cv2.FONT_HERSHEY_SIMPLEX
CAPTION_SCALE = 0.5
CAPTION_THICKNESS = 1


def hex_to_bgr(color: str) -> Tuple[int, int, int]:
    r, g, b = (int(color[i:i + 2], 16) for i in (1, 3, 5))
    return b, g, r


class StripRenderer:
    """
    Rasterises a composition descriptor and writes it to disk.

    Each photo is scaled to the cell width keeping its aspect ratio; a row is
    as tall as its tallest cell.
    """

    def __init__(self):
        self.log = logging.getLogger("StripRenderer")

    def render(self, descriptor: CompositionDescriptor) -> np.ndarray:
        cell_w = descriptor.cell_width
        images: List[np.ndarray] = []
        for cell in descriptor.cells:
            img = cell.photo.decode()
            h, w = img.shape[:2]
            cell_h = max(1, round(h * cell_w / w))
            images.append(cv2.resize(img, (cell_w, cell_h), interpolation=cv2.INTER_AREA))

        row_heights = [0] * descriptor.rows
        for cell, img in zip(descriptor.cells, images):
            row_heights[cell.row] = max(row_heights[cell.row], img.shape[0])

        (text_w, text_h), baseline = cv2.getTextSize(
            descriptor.caption, CAPTION_FONT, CAPTION_SCALE, CAPTION_THICKNESS
        )
        caption_h = CAPTION_MARGIN + text_h + baseline

        pad, gap = descriptor.padding, descriptor.gap
        width = descriptor.strip_width
        height = 2 * pad + sum(row_heights) + gap * (descriptor.rows - 1) + caption_h

        # Build the background-filled canvas
        canvas = np.zeros((height, width, 3), dtype=np.uint8)
        canvas[:] = hex_to_bgr(descriptor.background_color)

        row_tops = []
        y = pad
        for h in row_heights:
            row_tops.append(y)
            y += h + gap

        for cell, img in zip(descriptor.cells, images):
            x0 = pad + cell.column * (cell_w + gap)
            y0 = row_tops[cell.row]
            h = img.shape[0]
            canvas[y0:y0 + h, x0:x0 + cell_w] = img

        # Caption centred under the last row
        text_x = max(0, (width - text_w) // 2)
        text_y = height - pad - baseline
        cv2.putText(
            canvas,
            descriptor.caption,
            (text_x, text_y),
            CAPTION_FONT,
            CAPTION_SCALE,
            hex_to_bgr(descriptor.caption_color),
            CAPTION_THICKNESS,
            cv2.LINE_AA,
        )
        return canvas

    def save(self, image: np.ndarray, path: Path) -> bool:
        """
        Save rendered strip to disk.

        :param image: Image to save
        :param path: Output path
        :return: True if successful, False otherwise
        """
        if image is None:
            self.log.error("Cannot save None image")
            return False

        try:
            ok = cv2.imwrite(str(path), image)
        except (cv2.error, OSError) as e:
            self.log.error(f"Failed to save image: {e}")
            return False

        if not ok:
            self.log.error(f"OpenCV refused to write {path}")
            return False

        self.log.info(f"Saved strip to {path}")
        return True

    def export(self, descriptor: CompositionDescriptor, output_dir) -> Optional[Path]:
        """Render and write the strip under its suggested filename."""
        out_dir = Path(output_dir)
        path = out_dir / descriptor.filename

        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.log.error(f"Cannot create output directory {out_dir}: {e}")
            return None

        try:
            image = self.render(descriptor)
        except (ValueError, cv2.error) as e:
            self.log.error(f"Failed to render strip {descriptor.filename}: {e}")
            return None

        return path if self.save(image, path) else None
