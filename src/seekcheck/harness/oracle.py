"""Expected-time oracle for frames returned by a player."""

from __future__ import annotations

import math

from seekcheck.config.schema import HarnessConfig, OptionFlags
from seekcheck.errors import FrameMismatch, ProbeFailure
from seekcheck.player.session import Frame

# Frame ids live in the high nibble of each colour byte.
FRAME_ID_BITS = 4
_NIBBLE = (1 << FRAME_ID_BITS) - 1


def decode_frame_id(red: int, green: int, blue: int) -> int:
    """Rebuild the frame counter painted into a synthetic video pixel."""

    r = int(red) >> FRAME_ID_BITS & _NIBBLE
    g = int(green) >> FRAME_ID_BITS & _NIBBLE
    b = int(blue) >> FRAME_ID_BITS & _NIBBLE
    return r << (FRAME_ID_BITS * 2) | g << FRAME_ID_BITS | b


def clip_playback_time(requested_time: float, trim_duration: float = math.inf) -> float:
    return min(max(requested_time, 0.0), trim_duration)


class FrameOracle:
    """Check frames against the time they should represent under one option set."""

    def __init__(
        self,
        flags: OptionFlags,
        *,
        source_fps: int = 25,
        skew_value: float = 7.12,
        trim_duration_value: float = 53.43,
    ) -> None:
        self.flags = flags
        self.source_fps = source_fps
        self.skew = skew_value if flags.skew else 0.0
        self.trim_duration = trim_duration_value if flags.trim_duration else math.inf

    @classmethod
    def from_config(cls, config: HarnessConfig, flags: OptionFlags) -> FrameOracle:
        return cls(
            flags,
            source_fps=config.media.source_fps,
            skew_value=config.skew,
            trim_duration_value=config.trim_duration,
        )

    @property
    def frame_period(self) -> float:
        return 1.0 / self.source_fps

    @property
    def tolerance(self) -> float:
        return self.frame_period

    def playback_time(self, requested_time: float) -> float:
        return clip_playback_time(requested_time, self.trim_duration)

    def next_frame_time(self, expected: float, previous: Frame | None) -> float:
        """Time the frame following `previous` should represent.

        Video steps by one frame period from `expected`. Audio frames vary in
        length, so the step ends where the previous frame does.
        """

        if self.flags.audio and previous is not None and previous.duration:
            return previous.ts - self.skew + previous.duration
        return expected + self.frame_period

    def verify(self, frame: Frame | None, requested_time: float) -> None:
        """Raise if `frame` is not the frame a player owes for `requested_time`."""

        if frame is None:
            raise ProbeFailure(
                f"no frame returned for requested t={requested_time:f} ({self.flags.label})"
            )

        playback_time = self.playback_time(requested_time)

        if not self.flags.audio:
            frame_id = decode_frame_id(*frame.first_pixel())
            video_ts = frame_id / self.source_fps
            estimated = video_ts - self.skew
            diff_color = abs(playback_time - estimated)
            if diff_color > self.tolerance:
                raise FrameMismatch(
                    kind="color",
                    requested_time=requested_time,
                    playback_time=playback_time,
                    trim_duration=self.trim_duration,
                    skew=self.skew,
                    observed_ts=video_ts,
                    estimated_time=estimated,
                    diff=diff_color,
                    frame_id=frame_id,
                )

        estimated = frame.ts - self.skew
        diff_ts = abs(playback_time - estimated)
        if diff_ts > self.tolerance:
            raise FrameMismatch(
                kind="ts",
                requested_time=requested_time,
                playback_time=playback_time,
                trim_duration=self.trim_duration,
                skew=self.skew,
                observed_ts=frame.ts,
                estimated_time=estimated,
                diff=diff_ts,
            )
