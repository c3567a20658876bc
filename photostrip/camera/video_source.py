"""Live video sources the frame capturer reads from.

The booth never owns the camera for longer than one read: the source keeps
the device handle, the capturer borrows the current frame.

- VideoSource: the collaborator interface (readiness, native size, frame read)
- OpenCVVideoSource: webcam or video file through ``cv2.VideoCapture``
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

import cv2
import numpy as np
from loguru import logger


class VideoSource(ABC):
    """A continuously updating frame with a known native resolution."""

    @abstractmethod
    def is_ready(self) -> bool:
        """True once the stream delivers frames."""

    @property
    @abstractmethod
    def width(self) -> int:
        ...

    @property
    @abstractmethod
    def height(self) -> int:
        ...

    @abstractmethod
    def read_frame(self) -> Optional[np.ndarray]:
        """Return the current BGR frame, or None when no frame is available."""


class OpenCVVideoSource(VideoSource):
    def __init__(self, device: Union[int, str] = 0, resolution: Optional[tuple] = None):
        """
        :param device: Camera index or a path/URL understood by cv2.VideoCapture.
        :param resolution: Optional (width, height) requested from the driver.
        """
        self.device = device
        self.resolution = resolution
        self._cap: Optional[cv2.VideoCapture] = None
        self._width = 0
        self._height = 0

    # -------------------- Lifecycle --------------------

    def open(self) -> bool:
        if self._cap is not None and self._cap.isOpened():
            return True

        self._cap = cv2.VideoCapture(self.device)
        if not self._cap.isOpened():
            logger.error(f"Failed to open video device {self.device!r}")
            self._cap = None
            return False

        if self.resolution:
            w, h = self.resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)

        self._width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self._height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(f"Video device {self.device!r} opened at {self._width}x{self._height}")
        return True

    def release(self):
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            self._width = self._height = 0
            logger.info(f"Video device {self.device!r} released")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()

    # -------------------- VideoSource --------------------

    def is_ready(self) -> bool:
        return (
            self._cap is not None
            and self._cap.isOpened()
            and self._width > 0
            and self._height > 0
        )

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def read_frame(self) -> Optional[np.ndarray]:
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None:
            logger.warning(f"Video device {self.device!r} returned no frame")
            return None
        return frame
