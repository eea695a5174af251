"""Sequence executor and option sweep."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Any, Callable

from seekcheck.config.schema import HarnessConfig, OptionFlags
from seekcheck.errors import ProbeFailure, SessionError
from seekcheck.harness.actions import ActionRegistry, default_registry
from seekcheck.harness.combinations import ActionSequence, iter_combinations
from seekcheck.harness.oracle import FrameOracle
from seekcheck.harness.probes import ProbeContext
from seekcheck.observability.logging import get_logger, log_event
from seekcheck.player.session import (
    OPTION_AUTO_HWACCEL,
    OPTION_SKEW,
    OPTION_STREAM_SELECTION,
    OPTION_TRIM_DURATION,
    PlayerSession,
    SessionFactory,
    StreamSelection,
)


_LOGGER = get_logger("seekcheck.executor")


@dataclass(slots=True)
class SequenceResult:
    """Outcome of one action sequence on one session."""

    label: str
    flags: OptionFlags
    actions: list[str]
    failed_action: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class ConfigurationResult:
    """Outcome of the full enumeration under one option set."""

    flags: OptionFlags
    sequences_run: int = 0
    elapsed_s: float = 0.0
    failure: SequenceResult | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(slots=True)
class SweepReport:
    source: str
    configurations: list[ConfigurationResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(item.ok for item in self.configurations)

    @property
    def failure(self) -> SequenceResult | None:
        for item in self.configurations:
            if item.failure is not None:
                return item.failure
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "ok": self.ok,
            "configurations": [
                {
                    "label": item.flags.label,
                    "skew": item.flags.skew,
                    "trim_duration": item.flags.trim_duration,
                    "audio": item.flags.audio,
                    "sequences_run": item.sequences_run,
                    "elapsed_s": round(item.elapsed_s, 6),
                    "failure": None
                    if item.failure is None
                    else {
                        "sequence": item.failure.label,
                        "action": item.failure.failed_action,
                        "error": item.failure.error,
                    },
                }
                for item in self.configurations
            ],
        }


def sequence_label(registry: ActionRegistry, sequence: ActionSequence, flags: OptionFlags) -> str:
    return f"{flags.label}-{registry.label(sequence)}"


def configure_session(session: PlayerSession, flags: OptionFlags, config: HarnessConfig) -> None:
    """Apply the options of one sweep configuration to a fresh session."""

    session.set_option(OPTION_AUTO_HWACCEL, config.auto_hwaccel)
    if flags.skew:
        session.set_option(OPTION_SKEW, config.skew)
    if flags.trim_duration:
        session.set_option(OPTION_TRIM_DURATION, config.trim_duration)
    if flags.audio:
        session.set_option(OPTION_STREAM_SELECTION, StreamSelection.AUDIO)


def create_session(session_factory: SessionFactory, source: str) -> PlayerSession:
    session = session_factory(source)
    if session is None:
        raise SessionError(f"Could not create a player session for {source}")
    return session


def run_sequence(
    session: PlayerSession,
    sequence: ActionSequence,
    registry: ActionRegistry,
    oracle: FrameOracle,
    *,
    expected_width: int = 16,
    expected_height: int = 16,
) -> SequenceResult:
    """Run every action of `sequence` in order, stopping at the first failure."""

    descriptors = registry.resolve(sequence)
    result = SequenceResult(
        label=sequence_label(registry, sequence, oracle.flags),
        flags=oracle.flags,
        actions=[item.name for item in descriptors],
    )
    ctx = ProbeContext(
        session=session,
        oracle=oracle,
        expected_width=expected_width,
        expected_height=expected_height,
    )
    for descriptor in descriptors:
        try:
            descriptor.probe(ctx)
        except ProbeFailure as exc:
            result.failed_action = descriptor.name
            result.error = str(exc)
            log_event(
                _LOGGER,
                "sequence_failed",
                level=logging.ERROR,
                sequence=result.label,
                action=descriptor.name,
                detail=result.error,
            )
            return result
    log_event(_LOGGER, "sequence_passed", level=logging.DEBUG, sequence=result.label)
    return result


def run_configuration(
    source: str,
    flags: OptionFlags,
    session_factory: SessionFactory,
    *,
    registry: ActionRegistry,
    config: HarnessConfig,
    on_sequence: Callable[[SequenceResult], None] | None = None,
) -> ConfigurationResult:
    """Run every enumerated sequence under `flags`, one fresh session each."""

    oracle = FrameOracle.from_config(config, flags)
    result = ConfigurationResult(flags=flags)
    started = time.perf_counter()

    for sequence in iter_combinations(len(registry)):
        session = create_session(session_factory, source)
        try:
            configure_session(session, flags, config)
            outcome = run_sequence(
                session,
                sequence,
                registry,
                oracle,
                expected_width=config.media.width,
                expected_height=config.media.height,
            )
        finally:
            session.destroy()

        result.sequences_run += 1
        if on_sequence is not None:
            on_sequence(outcome)
        if not outcome.ok:
            result.failure = outcome
            break

    result.elapsed_s = time.perf_counter() - started
    log_event(
        _LOGGER,
        "configuration_finished",
        configuration=flags.label,
        sequences_run=result.sequences_run,
        ok=result.ok,
        elapsed_s=round(result.elapsed_s, 3),
    )
    return result


def run_sweep(
    source: str,
    session_factory: SessionFactory,
    *,
    registry: ActionRegistry | None = None,
    config: HarnessConfig | None = None,
    on_sequence: Callable[[SequenceResult], None] | None = None,
) -> SweepReport:
    """Run the enumeration for every configured option set, halting on failure."""

    registry = registry or default_registry()
    config = config or HarnessConfig()
    report = SweepReport(source=source)

    for flags in config.sweep:
        outcome = run_configuration(
            source,
            flags,
            session_factory,
            registry=registry,
            config=config,
            on_sequence=on_sequence,
        )
        report.configurations.append(outcome)
        if not outcome.ok:
            break
    return report
