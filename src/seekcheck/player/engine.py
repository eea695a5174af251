"""Reference player implementing the session contract over a frame source."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Any, Callable, Protocol

import numpy as np

from seekcheck.errors import SourceError
from seekcheck.observability.logging import get_logger, log_event
from seekcheck.player.session import (
    OPTION_AUTO_HWACCEL,
    OPTION_SKEW,
    OPTION_STREAM_SELECTION,
    OPTION_TRIM_DURATION,
    Frame,
    LogCallback,
    StreamInfo,
    StreamSelection,
)


_LOGGER = get_logger("seekcheck.player")

# Forward jumps longer than this reposition the source instead of decoding through.
SEEK_AHEAD_THRESHOLD = 1.0
_TS_EPSILON = 1e-6


@dataclass(frozen=True, slots=True)
class DecodedFrame:
    """One frame as produced by a frame source, before it is handed out."""

    ts: float
    data: np.ndarray
    width: int = 0
    height: int = 0
    duration: float | None = None


class FrameSource(Protocol):
    """Sequential decoder with coarse seeking."""

    def info(self) -> StreamInfo:
        ...

    def seek(self, ts: float) -> None:
        """Reposition so the next read returns a frame at or before `ts`."""
        ...

    def read(self) -> DecodedFrame | None:
        """Return the next frame in presentation order, None at end of stream."""
        ...

    def close(self) -> None:
        ...


SourceOpener = Callable[[str, StreamSelection], FrameSource]


def _default_opener(source: str, selection: StreamSelection) -> FrameSource:
    from seekcheck.player.av_source import AvSource

    return AvSource(source, selection)


class Player:
    """Seek-capable frame extraction session.

    `get_frame(t)` maps the playback time `t` (clipped to the trim duration)
    onto media time by adding the skew, and returns the last frame at or
    before that point. A request resolving to the frame delivered last
    returns None, so a player never hands the same frame out twice in a row.
    """

    def __init__(self, source: str, opener: SourceOpener | None = None) -> None:
        self.source = source
        self._opener = opener or _default_opener
        self._auto_hwaccel = True
        self._skew = 0.0
        self._trim_duration: float | None = None
        self._selection = StreamSelection.DEFAULT
        self._log_context: Any = None
        self._log_callback: LogCallback | None = None

        self._frame_source: FrameSource | None = None
        self._open_failed = False
        self._current: DecodedFrame | None = None
        self._pending: DecodedFrame | None = None
        self._eof = False
        self._last_delivered_ts: float | None = None
        self._outstanding: dict[int, Frame] = {}
        self._destroyed = False

    # -- configuration -------------------------------------------------

    def set_option(self, name: str, value: Any) -> None:
        if self._frame_source is not None or self._open_failed:
            raise RuntimeError(f"Option '{name}' must be set before playback starts")
        if name == OPTION_AUTO_HWACCEL:
            self._auto_hwaccel = bool(value)
        elif name == OPTION_SKEW:
            self._skew = float(value)
        elif name == OPTION_TRIM_DURATION:
            trim = float(value)
            self._trim_duration = trim if trim >= 0 else None
        elif name == OPTION_STREAM_SELECTION:
            self._selection = StreamSelection(value)
        else:
            raise ValueError(f"Unknown player option: {name}")

    def set_log_callback(self, context: Any, callback: LogCallback) -> None:
        self._log_context = context
        self._log_callback = callback

    @property
    def outstanding_frames(self) -> int:
        return len(self._outstanding)

    # -- requests ------------------------------------------------------

    def prefetch(self) -> bool:
        return self._ensure_open()

    def get_info(self) -> StreamInfo | None:
        if not self._ensure_open():
            return None
        assert self._frame_source is not None
        return self._frame_source.info()

    def get_frame(self, t: float) -> Frame | None:
        if not self._ensure_open():
            return None

        playback_time = self._clip(t)
        target = playback_time + self._skew
        try:
            decoded = self._frame_at(target)
        except SourceError as exc:
            self._log(logging.ERROR, f"decoding failed while seeking to {target:f}: {exc}")
            return None

        if decoded is None:
            self._log(logging.WARNING, f"no frame available for t={t:f}")
            return None
        if self._already_delivered(decoded):
            self._log(logging.DEBUG, f"frame ts={decoded.ts:f} already delivered for t={t:f}")
            return None
        return self._deliver(decoded)

    def get_next_frame(self) -> Frame | None:
        if not self._ensure_open():
            return None

        try:
            if self._current is None:
                decoded = self._frame_at(self._skew)
            else:
                decoded = self._advance()
        except SourceError as exc:
            self._log(logging.ERROR, f"decoding failed reading next frame: {exc}")
            return None

        if decoded is None or self._already_delivered(decoded):
            self._log(logging.DEBUG, "end of stream reached")
            return None
        if self._trim_duration is not None and decoded.ts - self._skew > self._trim_duration + _TS_EPSILON:
            self._log(logging.DEBUG, f"frame ts={decoded.ts:f} is past the trim duration")
            return None
        return self._deliver(decoded)

    def release_frame(self, frame: Frame | None) -> None:
        if frame is None:
            return
        if self._outstanding.pop(id(frame), None) is None:
            raise ValueError(f"{frame!r} is not held by this session")
        frame.invalidate()

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        if self._outstanding:
            self._log(
                logging.WARNING,
                f"{len(self._outstanding)} frame(s) still held when the session was destroyed",
            )
            for frame in self._outstanding.values():
                frame.invalidate()
            self._outstanding.clear()
        if self._frame_source is not None:
            self._frame_source.close()
            self._frame_source = None

    # -- internals -----------------------------------------------------

    def _ensure_open(self) -> bool:
        if self._destroyed:
            raise RuntimeError("Session used after destroy")
        if self._frame_source is not None:
            return True
        if self._open_failed:
            return False
        try:
            self._frame_source = self._opener(self.source, self._selection)
        except SourceError as exc:
            self._open_failed = True
            self._log(logging.ERROR, f"could not open {self.source}: {exc}")
            return False
        self._log(
            logging.DEBUG,
            f"opened {self.source} stream={self._selection.value} "
            f"skew={self._skew:f} auto_hwaccel={self._auto_hwaccel}",
        )
        return True

    def _clip(self, t: float) -> float:
        upper = math.inf if self._trim_duration is None else self._trim_duration
        return min(max(t, 0.0), upper)

    def _peek(self) -> DecodedFrame | None:
        if self._pending is None and not self._eof:
            assert self._frame_source is not None
            self._pending = self._frame_source.read()
            if self._pending is None:
                self._eof = True
        return self._pending

    def _advance(self) -> DecodedFrame | None:
        nxt = self._peek()
        if nxt is not None:
            self._current = nxt
            self._pending = None
        return nxt

    def _reposition(self, target: float) -> None:
        assert self._frame_source is not None
        self._frame_source.seek(max(target, 0.0))
        self._current = None
        self._pending = None
        self._eof = False

    def _frame_at(self, target: float) -> DecodedFrame | None:
        current = self._current
        if current is None:
            if target > SEEK_AHEAD_THRESHOLD:
                self._reposition(target)
        elif target + _TS_EPSILON < current.ts:
            self._reposition(target)
        elif not self._eof and target - current.ts > SEEK_AHEAD_THRESHOLD:
            self._reposition(target)

        while True:
            nxt = self._peek()
            if nxt is None:
                break
            if self._current is not None and nxt.ts > target + _TS_EPSILON:
                break
            self._advance()
        return self._current

    def _already_delivered(self, decoded: DecodedFrame) -> bool:
        last = self._last_delivered_ts
        return last is not None and abs(decoded.ts - last) < _TS_EPSILON

    def _deliver(self, decoded: DecodedFrame) -> Frame:
        frame = Frame(
            decoded.ts,
            decoded.data,
            width=decoded.width,
            height=decoded.height,
            duration=decoded.duration,
        )
        self._last_delivered_ts = decoded.ts
        self._outstanding[id(frame)] = frame
        return frame

    def _log(self, level: int, message: str) -> None:
        if self._log_callback is not None:
            self._log_callback(self._log_context, level, message)
            return
        log_event(_LOGGER, "player_message", level=level, media=self.source, detail=message)


def create_player(source: str) -> Player:
    """Session factory backed by PyAV decoding."""

    return Player(source)
