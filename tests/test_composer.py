from datetime import date

import pytest

from photostrip.camera import Photo
from photostrip.errors import IncompleteSession
from photostrip.pipeline import LayoutCatalog, PhotoBuffer, StripComposer
from photostrip.pipeline.composer import contrast_text_color, normalize_color

DAY = date(2024, 5, 17)


def filled_buffer(count: int, capacity: int = None) -> PhotoBuffer:
    buffer = PhotoBuffer(capacity or count)
    for i in range(count):
        buffer.append(Photo(data=b"img%d" % i, ordinal=i, width=4, height=3))
    return buffer


def test_single_column_layout():
    layout = LayoutCatalog().resolve("B")

    descriptor = StripComposer().compose(filled_buffer(3), layout, "#FFD1DC", on=DAY)

    assert descriptor.columns == 1
    assert descriptor.rows == 3
    assert len(descriptor.cells) == 3
    assert [(c.row, c.column) for c in descriptor.cells] == [(0, 0), (1, 0), (2, 0)]
    assert descriptor.strip_width == 220
    assert descriptor.cell_width == 220 - 2 * 12
    assert descriptor.background_color == "#ffd1dc"
    assert descriptor.filename == "photo-strip-B.png"


def test_two_column_layout_fills_rows_first():
    layout = LayoutCatalog().resolve("D")
    buffer = filled_buffer(6)

    descriptor = StripComposer().compose(buffer, layout, "#cccccc", on=DAY)

    assert descriptor.rows == 3
    assert [(c.row, c.column) for c in descriptor.cells] == [
        (0, 0), (0, 1), (1, 0), (1, 1), (2, 0), (2, 1),
    ]
    assert [c.photo.ordinal for c in descriptor.cells] == [0, 1, 2, 3, 4, 5]
    assert descriptor.cell_width == (350 - 24 - 8) // 2


def test_caption_and_contrast():
    layout = LayoutCatalog().resolve("C")
    composer = StripComposer(caption_title="Test Booth")

    dark = composer.compose(filled_buffer(2), layout, "#000000", on=DAY)
    light = composer.compose(filled_buffer(2), layout, "#ffffff", on=DAY)

    assert dark.caption == "Test Booth - 05/17/2024"
    assert dark.caption_color == "#ffffff"
    assert light.caption_color == "#000000"


def test_compose_is_deterministic():
    layout = LayoutCatalog().resolve("A")
    buffer = filled_buffer(4)
    composer = StripComposer()

    first = composer.compose(buffer, layout, "#aec6cf", on=DAY)
    second = composer.compose(buffer, layout, "#aec6cf", on=DAY)

    assert first == second


def test_incomplete_buffer_is_rejected():
    layout = LayoutCatalog().resolve("A")
    buffer = filled_buffer(3, capacity=4)

    with pytest.raises(IncompleteSession) as exc:
        StripComposer().compose(buffer, layout, "#cccccc", on=DAY)

    assert (exc.value.have, exc.value.need) == (3, 4)


def test_buffer_for_another_layout_is_rejected():
    # a full 3-pose buffer cannot be laid out as a 4-pose strip
    with pytest.raises(IncompleteSession):
        StripComposer().compose(filled_buffer(3), LayoutCatalog().resolve("A"), "#cccccc", on=DAY)


@pytest.mark.parametrize("color", ["cccccc", "#ccc", "#gggggg", "", None])
def test_invalid_colors(color):
    with pytest.raises(ValueError):
        normalize_color(color)


def test_contrast_text_color_is_case_insensitive():
    assert contrast_text_color("#000000") == "#ffffff"
    assert contrast_text_color("#FF6961") == "#000000"
