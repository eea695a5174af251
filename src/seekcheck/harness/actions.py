"""Probe action catalog and registry."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Protocol

from seekcheck.harness.combinations import ActionSequence

if TYPE_CHECKING:
    from seekcheck.harness.probes import ProbeContext


class Action(IntEnum):
    END = 0
    PREFETCH = 1
    FETCH_INFO = 2
    START = 3
    MIDDLE = 4
    END_OF_STREAM = 5


class Probe(Protocol):
    """Call signature every probe must implement; raises ProbeFailure on failure."""

    def __call__(self, ctx: ProbeContext) -> None:
        ...


@dataclass(frozen=True, slots=True)
class ActionDescriptor:
    """Declarative action metadata and probe hook."""

    action: Action
    name: str
    probe: Probe


class ActionRegistry:
    """Ordered mapping from action id to descriptor.

    Ids must be contiguous from 1 so every id doubles as an enumerator digit.
    """

    def __init__(self, descriptors: list[ActionDescriptor]) -> None:
        ids = [int(item.action) for item in descriptors]
        if ids != list(range(1, len(descriptors) + 1)):
            raise ValueError(f"Action ids must run 1..{len(descriptors)} in order, got {ids}")
        self._by_id = {int(item.action): item for item in descriptors}

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[ActionDescriptor]:
        return iter(self._by_id.values())

    def __getitem__(self, action_id: int) -> ActionDescriptor:
        descriptor = self._by_id.get(int(action_id))
        if descriptor is None:
            raise KeyError(f"No action registered with id {action_id}")
        return descriptor

    def resolve(self, sequence: ActionSequence) -> list[ActionDescriptor]:
        """Return the descriptors of a sequence's actions in order."""

        if sequence.capacity != len(self):
            raise ValueError(
                f"Sequence capacity {sequence.capacity} does not match {len(self)} registered actions"
            )
        return [self[action_id] for action_id in sequence.actions]

    def label(self, sequence: ActionSequence) -> str:
        return "-".join(item.name for item in self.resolve(sequence))


def default_registry() -> ActionRegistry:
    """Return the default probe catalog."""

    from seekcheck.harness import probes

    return ActionRegistry(
        [
            ActionDescriptor(action=Action.PREFETCH, name="prefetch", probe=probes.prefetch),
            ActionDescriptor(action=Action.FETCH_INFO, name="fetchinfo", probe=probes.fetch_info),
            ActionDescriptor(action=Action.START, name="start", probe=probes.start),
            ActionDescriptor(action=Action.MIDDLE, name="middle", probe=probes.middle),
            ActionDescriptor(action=Action.END_OF_STREAM, name="end", probe=probes.end_of_stream),
        ]
    )
