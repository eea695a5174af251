"""Probe actions run against a player session.

Each probe raises ProbeFailure (or FrameMismatch) on the first contradiction
and returns None otherwise. Frames are acquired through a FrameScope so every
frame is released exactly once before the probe returns, whatever the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass

from seekcheck.errors import ProbeFailure
from seekcheck.harness.oracle import FrameOracle
from seekcheck.player.session import Frame, PlayerSession


MIDDLE_SEEKS = (30.0, 30.1, 30.2, 15.0)
EXACT_SEEK = 16.0
NEAR_DUPLICATE_SEEK = 16.001
PAST_END_SEEK = 999999.0
REPEAT_PAST_END_SEEK = 99999.0


@dataclass(slots=True)
class ProbeContext:
    """Everything a probe needs for one sequence run."""

    session: PlayerSession
    oracle: FrameOracle
    expected_width: int = 16
    expected_height: int = 16


class FrameScope:
    """Track frames acquired from a session and release them all on exit."""

    def __init__(self, session: PlayerSession) -> None:
        self._session = session
        self._frames: list[Frame] = []

    def __enter__(self) -> FrameScope:
        return self

    def __exit__(self, *exc_info: object) -> None:
        frames, self._frames = self._frames, []
        for frame in frames:
            self._session.release_frame(frame)

    def _track(self, frame: Frame | None) -> Frame | None:
        if frame is not None:
            self._frames.append(frame)
        return frame

    def get_frame(self, t: float) -> Frame | None:
        return self._track(self._session.get_frame(t))

    def get_next_frame(self) -> Frame | None:
        return self._track(self._session.get_next_frame())


def prefetch(ctx: ProbeContext) -> None:
    if not ctx.session.prefetch():
        raise ProbeFailure("prefetch failed")


def fetch_info(ctx: ProbeContext) -> None:
    info = ctx.session.get_info()
    if info is None:
        raise ProbeFailure("media info unavailable")
    if info.width != ctx.expected_width or info.height != ctx.expected_height:
        raise ProbeFailure(
            f"media info reports {info.width}x{info.height}, "
            f"expected {ctx.expected_width}x{ctx.expected_height}"
        )


def start(ctx: ProbeContext) -> None:
    with FrameScope(ctx.session) as scope:
        ctx.oracle.verify(scope.get_frame(0.0), 0.0)


def middle(ctx: ProbeContext) -> None:
    """Out of order seeks, next-frame stepping, then exact-seek non-redelivery."""

    oracle = ctx.oracle

    with FrameScope(ctx.session) as scope:
        checks = [(scope.get_frame(t), t) for t in MIDDLE_SEEKS]
        expected = MIDDLE_SEEKS[-1]
        previous = checks[-1][0]
        for _ in range(2):
            expected = oracle.next_frame_time(expected, previous)
            previous = scope.get_next_frame()
            checks.append((previous, expected))
        for frame, t in checks:
            oracle.verify(frame, t)

    with FrameScope(ctx.session) as scope:
        stepped = scope.get_next_frame()
        exact = scope.get_frame(EXACT_SEEK)
        near_duplicate = scope.get_frame(NEAR_DUPLICATE_SEEK)

        oracle.verify(stepped, oracle.next_frame_time(expected, previous))
        oracle.verify(exact, EXACT_SEEK)
        if near_duplicate is not None:
            raise ProbeFailure(
                f"t={NEAR_DUPLICATE_SEEK:f} delivered frame ts={near_duplicate.ts:f} again "
                f"right after t={EXACT_SEEK:f}"
            )


def end_of_stream(ctx: ProbeContext) -> None:
    with FrameScope(ctx.session) as scope:
        if scope.get_frame(PAST_END_SEEK) is None:
            raise ProbeFailure(f"no last frame for t={PAST_END_SEEK:f} past the end of stream")

    with FrameScope(ctx.session) as scope:
        frame = scope.get_frame(REPEAT_PAST_END_SEEK)
        if frame is not None:
            raise ProbeFailure(
                f"t={REPEAT_PAST_END_SEEK:f} delivered frame ts={frame.ts:f} "
                "although the last frame was already delivered"
            )
