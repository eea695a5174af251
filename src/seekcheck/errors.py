"""Exception types raised by the harness and the reference player."""

from __future__ import annotations


class SeekcheckError(Exception):
    """Base class for every failure surfaced by seekcheck."""


class SourceError(SeekcheckError):
    """A media source could not be opened, decoded or seeked."""


class SessionError(SeekcheckError):
    """A player session could not be created for a source."""


class ProbeFailure(SeekcheckError):
    """A probe observed behavior contradicting the player's seek contract."""


class FrameMismatch(ProbeFailure):
    """A returned frame is further than one frame period from its expected time."""

    def __init__(
        self,
        *,
        kind: str,
        requested_time: float,
        playback_time: float,
        trim_duration: float,
        skew: float,
        observed_ts: float,
        estimated_time: float,
        diff: float,
        frame_id: int | None = None,
    ) -> None:
        self.kind = kind
        self.requested_time = requested_time
        self.playback_time = playback_time
        self.trim_duration = trim_duration
        self.skew = skew
        self.observed_ts = observed_ts
        self.estimated_time = estimated_time
        self.diff = diff
        self.frame_id = frame_id
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.kind == "color":
            observed = f"got video_ts={self.observed_ts:f} (frame id #{self.frame_id})"
        else:
            observed = f"got frame_ts={self.observed_ts:f}"
        return (
            f"requested t={self.requested_time:f} "
            f"(clipped to {self.playback_time:f} with trim_duration={self.trim_duration:f}),\n"
            f"{observed}, corresponding to t={self.estimated_time:f} (with skew={self.skew:f})\n"
            f"diff_{self.kind}: {self.diff:f}"
        )
