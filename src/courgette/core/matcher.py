"""Decide whether a feature, or one scenario line of it, survives the active filters.

Features and pickles are owned by the engine; only the attributes named in the
protocols below are read. The predicate is opaque and may keep its own state,
so both lookups stop at the first pickle that settles the answer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, Sequence


class Location(Protocol):
    line: int
    column: int


class Pickle(Protocol):
    location: Location


class Feature(Protocol):
    uri: str
    pickles: Sequence[Pickle]


SelectionPredicate = Callable[[Pickle], bool]


@dataclass(frozen=True)
class PickleLocation:
    line: int
    column: int


def matches(feature: Feature, predicate: SelectionPredicate) -> bool:
    return any(predicate(pickle) for pickle in feature.pickles)


def match_location(feature: Feature, predicate: SelectionPredicate, line: int) -> PickleLocation | None:
    """Location of the pickle at `line`, or None if there is none or the predicate rejects it.

    Each example row of an outline is its own pickle with its own line, so a
    row is selected only when it passes the predicate itself.
    """
    for pickle in feature.pickles:
        if pickle.location.line != line:
            continue
        if predicate(pickle):
            return PickleLocation(line=pickle.location.line, column=pickle.location.column)
        return None
    return None


class PickleMatcher:
    def __init__(self, feature: Feature, predicate: SelectionPredicate) -> None:
        self.feature = feature
        self.predicate = predicate

    def matches(self) -> bool:
        return matches(self.feature, self.predicate)

    def match_location(self, line: int) -> PickleLocation | None:
        return match_location(self.feature, self.predicate, line)


@dataclass(frozen=True)
class FeatureRef:
    """A feature known only by its URI, for callers that never look at pickles."""

    uri: str
    pickles: tuple = ()
