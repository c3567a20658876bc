import cv2
import numpy as np
import pytest

from photostrip.camera import FrameCapturer
from photostrip.errors import CaptureFailed, SourceNotReady
from tests.conftest import FakeVideoSource


def test_capture_mirrors_frame_once():
    source = FakeVideoSource(width=8, height=4)
    frame = np.zeros((4, 8, 3), dtype=np.uint8)
    frame[:, :4] = 200  # bright left half
    source.frame_override = frame

    photo = FrameCapturer().capture(source, ordinal=5)
    image = photo.decode()

    assert photo.ordinal == 5
    assert (photo.width, photo.height) == (8, 4)
    assert photo.mime_type == "image/png"
    assert image.shape == (4, 8, 3)
    # bright half ends up on the right
    assert (image[:, 4:] == 200).all()
    assert (image[:, :4] == 0).all()


def test_capture_renders_at_native_resolution():
    source = FakeVideoSource(width=32, height=24)
    source.frame_override = np.full((12, 16, 3), 50, dtype=np.uint8)

    image = FrameCapturer().capture(source).decode()

    assert image.shape[:2] == (24, 32)


def test_grayscale_frames_are_promoted_to_colour():
    source = FakeVideoSource(width=8, height=8)
    source.frame_override = np.full((8, 8), 90, dtype=np.uint8)

    image = FrameCapturer().capture(source).decode()

    assert image.shape == (8, 8, 3)


def test_not_ready_source_raises():
    source = FakeVideoSource(ready=False)

    with pytest.raises(SourceNotReady):
        FrameCapturer().capture(source)
    assert source.reads == 0


def test_unknown_resolution_raises_not_ready():
    source = FakeVideoSource(width=0, height=0)

    with pytest.raises(SourceNotReady):
        FrameCapturer().capture(source)


def test_read_error_becomes_capture_failed():
    source = FakeVideoSource()
    source.fail_on_read = 1

    with pytest.raises(CaptureFailed):
        FrameCapturer().capture(source)


def test_empty_frame_becomes_capture_failed():
    source = FakeVideoSource()
    source.frame_override = np.zeros((0, 0, 3), dtype=np.uint8)

    with pytest.raises(CaptureFailed):
        FrameCapturer().capture(source)


def test_encoder_refusal_becomes_capture_failed(monkeypatch):
    monkeypatch.setattr(cv2, "imencode", lambda ext, img: (False, None))

    with pytest.raises(CaptureFailed, match="Encoding"):
        FrameCapturer().capture(FakeVideoSource())


def test_unsupported_encoding_becomes_capture_failed():
    with pytest.raises(CaptureFailed):
        FrameCapturer(encoding=".bogus").capture(FakeVideoSource())
