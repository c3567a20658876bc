from collections import deque
from typing import Deque, Iterator, Tuple

from photostrip.camera.capturer import Photo


class PhotoBuffer:
    """
    Fixed-capacity sliding window over captured photos.

    Appending past capacity evicts the oldest photo, so the buffer always
    holds the most recent ``capacity`` photos in capture order.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"PhotoBuffer capacity must be > 0, got {capacity}")
        self._photos: Deque[Photo] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._photos.maxlen

    @property
    def photos(self) -> Tuple[Photo, ...]:
        return tuple(self._photos)

    def append(self, photo: Photo):
        self._photos.append(photo)

    def clear(self):
        self._photos.clear()

    def is_complete(self) -> bool:
        return len(self._photos) == self.capacity

    def __len__(self) -> int:
        return len(self._photos)

    def __iter__(self) -> Iterator[Photo]:
        return iter(tuple(self._photos))

    def __repr__(self):
        return f"PhotoBuffer({len(self)}/{self.capacity})"
