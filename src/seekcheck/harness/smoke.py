"""Fixed-input checks run ahead of the sweep, and the full harness run."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Callable

from seekcheck.config.schema import HarnessConfig
from seekcheck.errors import ProbeFailure
from seekcheck.harness.actions import ActionRegistry
from seekcheck.harness.executor import (
    SequenceResult,
    SweepReport,
    create_session,
    run_sweep,
)
from seekcheck.harness.probes import FrameScope
from seekcheck.observability.logging import get_logger, log_event
from seekcheck.player.session import OPTION_AUTO_HWACCEL, SessionFactory


_LOGGER = get_logger("seekcheck.smoke")


def run_image_test(path: str, session_factory: SessionFactory, config: HarnessConfig) -> None:
    """A still image must yield a frame at any time and report its size."""

    expected = config.image
    session = create_session(session_factory, path)
    try:
        with FrameScope(session) as scope:
            if scope.get_frame(expected.request_time) is None:
                raise ProbeFailure(f"didn't get an image from {path} at t={expected.request_time:f}")
            info = session.get_info()
            if info is None:
                raise ProbeFailure(f"can not fetch image info for {path}")
            if info.width != expected.width or info.height != expected.height:
                raise ProbeFailure(
                    f"image is {info.width}x{info.height}, expected {expected.width}x{expected.height}"
                )
    finally:
        session.destroy()


def run_unavailable_source_test(
    session_factory: SessionFactory, config: HarnessConfig
) -> list[tuple[int, str]]:
    """Requests against a missing source must fail quietly through the log callback."""

    source = config.unavailable_source
    messages: list[tuple[int, str]] = []

    def _collect(context: Any, level: int, message: str) -> None:
        if context is not source:
            raise ProbeFailure(f"log callback received context {context!r}, expected {source!r}")
        messages.append((level, message))

    session = create_session(session_factory, source)
    try:
        session.set_log_callback(source, _collect)
        for t in (-1.0, 1.0, 3.0):
            session.release_frame(session.get_frame(t))
    finally:
        session.destroy()

    for level, message in messages:
        log_event(
            _LOGGER,
            "unavailable_source_log",
            level=logging.DEBUG,
            severity=logging.getLevelName(level),
            detail=message,
        )
    return messages


def run_next_frame_test(
    path: str,
    session_factory: SessionFactory,
    config: HarnessConfig,
    passes: int = 2,
) -> list[int]:
    """Walk the stream with next-frame calls; return the frame count of each pass."""

    session = create_session(session_factory, path)
    counts: list[int] = []
    try:
        session.set_option(OPTION_AUTO_HWACCEL, config.auto_hwaccel)
        for run in range(passes):
            count = 0
            last_ts: float | None = None
            while True:
                frame = session.get_next_frame()
                if frame is None:
                    break
                try:
                    if last_ts is not None and frame.ts <= last_ts:
                        raise ProbeFailure(
                            f"next frame went from ts={last_ts:f} to ts={frame.ts:f} in pass #{run + 1}"
                        )
                    last_ts = frame.ts
                    count += 1
                finally:
                    session.release_frame(frame)
            counts.append(count)
            log_event(_LOGGER, "next_frame_pass", run=run + 1, frames=count)
    finally:
        session.destroy()

    if not counts or counts[0] == 0:
        raise ProbeFailure(f"no frame decoded from {path} with next-frame calls")
    return counts


@dataclass(slots=True)
class HarnessResult:
    """Outcome of the smoke checks and the option sweep."""

    checks: dict[str, bool] = field(default_factory=dict)
    report: SweepReport | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.report is not None and self.report.ok


def run_all(
    media: str,
    image: str,
    session_factory: SessionFactory,
    *,
    config: HarnessConfig,
    registry: ActionRegistry | None = None,
    on_sequence: Callable[[SequenceResult], None] | None = None,
) -> HarnessResult:
    """Run the image, unavailable-source and next-frame checks, then the sweep."""

    result = HarnessResult()
    checks: list[tuple[str, Callable[[], Any]]] = [
        ("image", lambda: run_image_test(image, session_factory, config)),
        ("unavailable_source", lambda: run_unavailable_source_test(session_factory, config)),
        ("next_frame", lambda: run_next_frame_test(media, session_factory, config)),
    ]
    for name, check in checks:
        try:
            check()
        except ProbeFailure as exc:
            result.checks[name] = False
            result.error = f"{name} check failed: {exc}"
            log_event(_LOGGER, "check_failed", level=logging.ERROR, check=name, detail=str(exc))
            return result
        result.checks[name] = True

    result.report = run_sweep(
        media,
        session_factory,
        registry=registry,
        config=config,
        on_sequence=on_sequence,
    )
    failure = result.report.failure
    if failure is not None:
        result.error = f"{failure.label} failed in {failure.failed_action}: {failure.error}"
    return result
