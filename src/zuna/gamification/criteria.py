"""Badge unlock criteria.

A criterion is one of four frozen variants. Award evaluation and progress
reporting both go through :func:`is_met` and :func:`progress_of`, so a badge's
threshold is defined in exactly one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zuna.gamification.stats import UserStats


@dataclass(frozen=True)
class Threshold:
    """Numeric stat is at least ``min_value``."""

    stat: str
    min_value: int


@dataclass(frozen=True)
class BooleanFlag:
    """Boolean stat is true."""

    stat: str


@dataclass(frozen=True)
class SetCardinality:
    """Set-valued stat has at least ``min_count`` members."""

    stat: str
    min_count: int


@dataclass(frozen=True)
class Triggered:
    """Awarded by an event check (clock time, calendar day), never by stats."""

    trigger: str
    value: str


Criterion = Threshold | BooleanFlag | SetCardinality | Triggered


def is_met(criterion: Criterion, stats: UserStats) -> bool:
    """Whether ``stats`` satisfies ``criterion``. Triggered criteria never do."""
    progress = progress_of(criterion, stats)
    if progress is None:
        return False
    current, target = progress
    return current >= target


def progress_of(criterion: Criterion, stats: UserStats) -> tuple[int, int] | None:
    """Return ``(current, target)`` for stat-backed criteria, None for triggered ones."""
    if isinstance(criterion, Threshold):
        return int(getattr(stats, criterion.stat)), criterion.min_value
    if isinstance(criterion, BooleanFlag):
        return (1 if getattr(stats, criterion.stat) else 0), 1
    if isinstance(criterion, SetCardinality):
        return len(getattr(stats, criterion.stat)), criterion.min_count
    return None
