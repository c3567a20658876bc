from dataclasses import dataclass, field

import cv2
import numpy as np
from loguru import logger

from photostrip.camera.video_source import VideoSource
from photostrip.errors import CaptureFailed, SourceNotReady


@dataclass(frozen=True)
class Photo:
    """One encoded still and its capture order within the session."""
    data: bytes = field(repr=False)
    ordinal: int
    width: int
    height: int
    mime_type: str = "image/png"

    def decode(self) -> np.ndarray:
        """Decode back into a BGR array."""
        image = cv2.imdecode(np.frombuffer(self.data, dtype=np.uint8), cv2.IMREAD_COLOR)
        if image is None:
            raise ValueError(f"Photo #{self.ordinal} does not hold a decodable image")
        return image


class FrameCapturer:
    """
    Turns the current frame of a video source into a Photo.

    The live preview is shown mirrored while the raw feed is not, so the
    capturer flips horizontally exactly once. Stored photos therefore match
    what the subject saw on screen.
    """

    def __init__(self, encoding: str = ".png"):
        self.encoding = encoding

    def capture(self, source: VideoSource, ordinal: int = 0) -> Photo:
        if not source.is_ready():
            raise SourceNotReady("Video source is not streaming yet")

        width, height = source.width, source.height
        if width <= 0 or height <= 0:
            raise SourceNotReady(f"Video source reports no resolution ({width}x{height})")

        try:
            frame = source.read_frame()
        except Exception as e:
            raise CaptureFailed(f"Video source read failed: {e}") from e

        if frame is None or frame.size == 0:
            raise CaptureFailed("Video source returned an empty frame")

        surface = self._render(frame, width, height)

        try:
            ok, buf = cv2.imencode(self.encoding, surface)
        except cv2.error as e:
            raise CaptureFailed(f"Encoding to {self.encoding} failed: {e}") from e
        if not ok:
            raise CaptureFailed(f"Encoding to {self.encoding} failed")

        logger.debug(f"Captured photo #{ordinal} at {width}x{height}")
        return Photo(data=buf.tobytes(), ordinal=ordinal, width=width, height=height)

    @staticmethod
    def _render(frame: np.ndarray, width: int, height: int) -> np.ndarray:
        """Draw the frame on a surface of the source's native size, mirrored."""
        if frame.ndim == 2:
            frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)

        h, w = frame.shape[:2]
        if (w, h) != (width, height):
            frame = cv2.resize(frame, (width, height), interpolation=cv2.INTER_LINEAR)

        return cv2.flip(frame, 1)
