"""Player session contract consumed by the harness."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

import numpy as np


OPTION_AUTO_HWACCEL = "auto_hwaccel"
OPTION_SKEW = "skew"
OPTION_TRIM_DURATION = "trim_duration"
OPTION_STREAM_SELECTION = "stream_selection"

LogCallback = Callable[[Any, int, str], None]


class StreamSelection(str, Enum):
    DEFAULT = "default"
    AUDIO = "audio"


@dataclass(frozen=True, slots=True)
class StreamInfo:
    """Media properties reported by a session."""

    width: int
    height: int
    duration: float
    frame_rate: float | None = None
    sample_rate: int | None = None


class Frame:
    """A decoded frame handed out by a session until released.

    Video frames carry an RGBA array of shape (height, width, 4); audio frames
    carry the decoded sample array, report a zero size and know their duration.
    """

    __slots__ = ("ts", "width", "height", "duration", "_data")

    def __init__(
        self,
        ts: float,
        data: np.ndarray,
        width: int = 0,
        height: int = 0,
        duration: float | None = None,
    ) -> None:
        self.ts = ts
        self.width = width
        self.height = height
        self.duration = duration
        self._data: np.ndarray | None = data

    @property
    def released(self) -> bool:
        return self._data is None

    @property
    def data(self) -> np.ndarray:
        if self._data is None:
            raise RuntimeError(f"Frame at ts={self.ts:f} used after release")
        return self._data

    def first_pixel(self) -> tuple[int, int, int]:
        """Return the red, green and blue bytes of the top-left pixel."""

        pixel = self.data[0, 0]
        return int(pixel[0]), int(pixel[1]), int(pixel[2])

    def invalidate(self) -> None:
        """Drop the pixel data; called by the owning session on release."""

        if self._data is None:
            raise RuntimeError(f"Frame at ts={self.ts:f} released twice")
        self._data = None

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self.width}x{self.height}"
        return f"Frame(ts={self.ts:f}, {state})"


class PlayerSession(Protocol):
    """Request/response contract of a seek-capable player."""

    def set_option(self, name: str, value: Any) -> None:
        ...

    def set_log_callback(self, context: Any, callback: LogCallback) -> None:
        ...

    def prefetch(self) -> bool:
        ...

    def get_info(self) -> StreamInfo | None:
        ...

    def get_frame(self, t: float) -> Frame | None:
        ...

    def get_next_frame(self) -> Frame | None:
        ...

    def release_frame(self, frame: Frame | None) -> None:
        ...

    def destroy(self) -> None:
        ...


SessionFactory = Callable[[str], PlayerSession]
