"""State capability contract shared by all domain models."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, NamedTuple, Protocol

Cost = Any


class Emission(NamedTuple):
    """Number of input symbols a state consumes and what it costs."""

    consumed: int
    cost: Cost


class LatticeState(Protocol):
    """Protocol implemented by domain states.

    States are value objects: two states that compare equal are merged into a
    single lattice node when they land in the same layer.
    """

    def children(self) -> Iterable[tuple[Any, Cost]]:
        """Yield `(successor, transition_cost)` pairs."""

    def emission(self, remaining: Sequence[Any]) -> tuple[int, Cost] | None:
        """Return `(consumed, cost)` for the unconsumed input, or `None`."""
