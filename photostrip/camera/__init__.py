from .video_source import VideoSource, OpenCVVideoSource
from .capturer import FrameCapturer, Photo

__all__ = [
    "VideoSource",
    "OpenCVVideoSource",
    "FrameCapturer",
    "Photo",
]
