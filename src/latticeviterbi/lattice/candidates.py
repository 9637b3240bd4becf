"""Successor generation: children combined with their emissions."""

from __future__ import annotations

import operator
from collections.abc import Iterator
from typing import Any, NamedTuple

from latticeviterbi.errors import InternalConsistencyError
from latticeviterbi.lattice.state import Cost, Emission
from latticeviterbi.lattice.window import InputSuffix


class Candidate(NamedTuple):
    """Admissible successor of a frontier state."""

    state: Any
    cost: Cost
    consumed: int


def emit(state: Any, remaining: InputSuffix[Any]) -> Emission | None:
    """Query `state.emission` and validate the claimed symbol count."""
    result = state.emission(remaining)
    if result is None:
        return None

    raw_consumed, cost = result
    invalid = f"{state!r} emitted an invalid symbol count {raw_consumed!r}"
    if isinstance(raw_consumed, bool):
        raise InternalConsistencyError(invalid)
    try:
        consumed = operator.index(raw_consumed)
    except TypeError as exc:
        raise InternalConsistencyError(invalid) from exc
    if consumed < 0:
        raise InternalConsistencyError(f"{state!r} emitted a negative symbol count {consumed}")
    if consumed and not remaining.covers(consumed - 1):
        raise InternalConsistencyError(
            f"{state!r} consumed {consumed} symbols past the end of the input "
            f"(offset {remaining.start})"
        )
    return Emission(consumed, cost)


def children_with_emission(state: Any, remaining: InputSuffix[Any]) -> Iterator[Candidate]:
    """Yield the children of `state` whose emission succeeds on `remaining`.

    Candidate cost is transition cost plus emission cost. Children that cannot
    emit are skipped and never retried.
    """
    for child, transition_cost in state.children():
        emission = emit(child, remaining)
        if emission is None:
            continue
        yield Candidate(child, transition_cost + emission.cost, emission.consumed)
