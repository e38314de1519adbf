from __future__ import annotations

from collections.abc import Mapping


class TransitionError(ValueError):
    """A status change that the lifecycle does not allow."""


BACKGROUND_CHECK_TRANSITIONS: dict[str, frozenset[str]] = {
    "PENDING": frozenset({"APPROVED", "REJECTED"}),
    "APPROVED": frozenset(),
    "REJECTED": frozenset(),
}

BOOKING_TRANSITIONS: dict[str, frozenset[str]] = {
    "PENDING": frozenset({"CONFIRMED", "CANCELLED"}),
    "CONFIRMED": frozenset(),
    "CANCELLED": frozenset(),
}

CLASS_SESSION_TRANSITIONS: dict[str, frozenset[str]] = {
    "SCHEDULED": frozenset({"COMPLETED"}),
    "COMPLETED": frozenset(),
}

WITHDRAWAL_TRANSITIONS: dict[str, frozenset[str]] = {
    "PENDING": frozenset({"APPROVED", "REJECTED"}),
    "APPROVED": frozenset({"PROCESSING"}),
    "PROCESSING": frozenset({"COMPLETED"}),
    "REJECTED": frozenset(),
    "COMPLETED": frozenset(),
}


def can_transition(table: Mapping[str, frozenset[str]], current: str, target: str) -> bool:
    return target in table.get(current, frozenset())


def ensure_transition(kind: str, table: Mapping[str, frozenset[str]], current: str, target: str) -> None:
    if not can_transition(table, current, target):
        raise TransitionError(f"{kind} cannot move from {current} to {target}")
