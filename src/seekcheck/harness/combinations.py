"""Enumeration of duplicate-free action sequences.

A sequence is a fixed-capacity tuple of action ids where ``0`` marks the end
of the actions. Slot 0 is the least significant digit: stepping a sequence
increments slot 0, a slot running past the highest id wraps back to 1 and
carries into the next slot, and an empty slot receiving a carry extends the
sequence by one action. Candidates repeating an id are stepped over.

Starting from the empty sequence this visits every sequence of 1..K distinct
ids exactly once, shortest first, and returns to the empty sequence once the
carry runs off the last slot.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from math import perm

END = 0


@dataclass(frozen=True, slots=True)
class ActionSequence:
    """Ordered action ids padded with END up to `capacity` slots."""

    slots: tuple[int, ...]

    def __post_init__(self) -> None:
        seen_end = False
        for slot in self.slots:
            if not 0 <= slot <= len(self.slots):
                raise ValueError(f"Action id {slot} out of range for capacity {len(self.slots)}")
            if slot == END:
                seen_end = True
            elif seen_end:
                raise ValueError(f"Action after end marker in {self.slots}")

    @classmethod
    def empty(cls, capacity: int) -> ActionSequence:
        return cls((END,) * capacity)

    @classmethod
    def of(cls, capacity: int, *actions: int) -> ActionSequence:
        if len(actions) > capacity:
            raise ValueError(f"{len(actions)} actions exceed capacity {capacity}")
        return cls(tuple(actions) + (END,) * (capacity - len(actions)))

    @property
    def capacity(self) -> int:
        return len(self.slots)

    @property
    def actions(self) -> tuple[int, ...]:
        return tuple(slot for slot in self.slots if slot != END)

    def __len__(self) -> int:
        return len(self.actions)

    def __bool__(self) -> bool:
        return bool(self.slots) and self.slots[0] != END

    def has_duplicates(self) -> bool:
        actions = self.actions
        return len(set(actions)) != len(actions)


def _step(sequence: ActionSequence) -> ActionSequence:
    capacity = sequence.capacity
    digits: list[int] = []
    carry = True
    for slot in sequence.slots:
        if slot == END and not carry:
            break
        if carry:
            slot += 1
            if slot > capacity:
                slot = 1
            else:
                carry = False
        digits.append(slot)
    if carry:
        return ActionSequence.empty(capacity)
    return ActionSequence.of(capacity, *digits)


def next_combination(previous: ActionSequence) -> ActionSequence:
    """Return the sequence following `previous`, or the empty sequence when done."""

    candidate = _step(previous)
    while candidate and candidate.has_duplicates():
        candidate = _step(candidate)
    return candidate


def iter_combinations(action_count: int) -> Iterator[ActionSequence]:
    """Yield every duplicate-free sequence over `action_count` actions."""

    sequence = next_combination(ActionSequence.empty(action_count))
    while sequence:
        yield sequence
        sequence = next_combination(sequence)


def count_combinations(action_count: int) -> int:
    """Closed-form number of sequences `iter_combinations` yields."""

    return sum(perm(action_count, n) for n in range(1, action_count + 1))
