"""Per-layer lattice storage.

A layer holds every lattice node that has consumed the same number of input
symbols. States are interned into dense integer ids so that backpointers can
be stored as plain `(layer position, state id)` pairs.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Generic, NamedTuple, TypeVar

from latticeviterbi.errors import InternalConsistencyError
from latticeviterbi.lattice.state import Cost

S = TypeVar("S")


class StateTable(Generic[S]):
    """Bidirectional State <-> id interning table."""

    def __init__(self) -> None:
        self._ids: dict[S, int] = {}
        self._states: list[S] = []

    def intern(self, state: S) -> tuple[int, bool]:
        """Return `(state_id, inserted)` for `state`, adding it if unseen."""
        state_id = self._ids.get(state)
        if state_id is not None:
            return state_id, False
        state_id = len(self._states)
        self._ids[state] = state_id
        self._states.append(state)
        return state_id, True

    def find(self, state: S) -> int | None:
        return self._ids.get(state)

    def replace(self, state_id: int, state: S) -> None:
        """Rebind `state_id` to a state that is not interned yet."""
        if state in self._ids:
            raise InternalConsistencyError(f"{state!r} is already interned")
        del self._ids[self.state(state_id)]
        self._ids[state] = state_id
        self._states[state_id] = state

    def state(self, state_id: int) -> S:
        if not 0 <= state_id < len(self._states):
            raise InternalConsistencyError(f"unknown state id {state_id}")
        return self._states[state_id]

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, state: object) -> bool:
        return state in self._ids


class Backpointer(NamedTuple):
    """Address of a parent node: layer position plus state id in that layer."""

    position: int
    state_id: int


@dataclass(frozen=True)
class StateInfo:
    """Best known way of reaching a lattice node."""

    offset: int
    cost: Cost
    parent: Backpointer | None = None


class Layer(Generic[S]):
    """Interned states sharing one cumulative consumption offset."""

    def __init__(self, offset: int) -> None:
        self.offset = offset
        self._table: StateTable[S] = StateTable()
        self._info: dict[int, StateInfo] = {}

    def __len__(self) -> int:
        return len(self._info)

    def __iter__(self) -> Iterator[tuple[int, S, StateInfo]]:
        for state_id, info in self._info.items():
            yield state_id, self._table.state(state_id), info

    def __repr__(self) -> str:
        return f"Layer(offset={self.offset}, states={len(self)})"

    def find(self, state: S) -> int | None:
        return self._table.find(state)

    def state(self, state_id: int) -> S:
        return self._table.state(state_id)

    def info(self, state_id: int) -> StateInfo:
        try:
            return self._info[state_id]
        except KeyError as exc:
            raise InternalConsistencyError(
                f"state id {state_id} has no info in layer at offset {self.offset}"
            ) from exc

    def insert_new(self, state: S, info: StateInfo) -> int | None:
        """Intern a state that must not already exist; return `None` if it does."""
        state_id, inserted = self._table.intern(state)
        if not inserted:
            return None
        self._info[state_id] = info
        return state_id

    def relax(self, state: S, info: StateInfo, *, admit_new: bool = True) -> tuple[int | None, bool]:
        """Offer a candidate path to `state`.

        Returns `(state_id, improved)`. Existing entries are only replaced by a
        strictly cheaper candidate, so ties keep the first-seen path. With
        `admit_new=False` unseen states are rejected and `state_id` is `None`.
        """
        self._check_offset(info)
        state_id = self._table.find(state)
        if state_id is None:
            if not admit_new:
                return None, False
            state_id, _ = self._table.intern(state)
            self._info[state_id] = info
            return state_id, True

        current = self.info(state_id)
        if info.cost < current.cost:
            self._info[state_id] = info
            return state_id, True
        return state_id, False

    def ranked(self) -> list[tuple[int, S, StateInfo]]:
        """Entries ordered by `(cost, state_id)`."""
        return sorted(self, key=_rank_key)

    def best(self) -> tuple[int, S, StateInfo]:
        """Cheapest entry; ties go to the lowest (earliest interned) id."""
        if not self._info:
            raise InternalConsistencyError(f"layer at offset {self.offset} is empty")
        return min(self, key=_rank_key)

    def worst(self, exclude: set[int]) -> tuple[int, S, StateInfo] | None:
        """Most expensive entry whose id is not in `exclude`; ties go to the latest id."""
        candidates = [entry for entry in self if entry[0] not in exclude]
        if not candidates:
            return None
        return max(candidates, key=_rank_key)

    def replace(self, state_id: int, state: S, info: StateInfo) -> None:
        """Evict the entry at `state_id` and store `state` under the same id."""
        self._check_offset(info)
        self.info(state_id)
        self._table.replace(state_id, state)
        self._info[state_id] = info

    def prune(self, max_states: int | None = None, max_cost: Any = None) -> int:
        """Apply the beam limits and return the number of discarded entries.

        Entries costing more than `max_cost` are dropped, then only the
        `max_states` cheapest remain. Survivors are re-interned in rank order,
        so this must run before anything holds backpointers into the layer.
        """
        if max_states is None and max_cost is None:
            return 0

        ranked = self.ranked()
        kept = ranked
        if max_cost is not None:
            kept = [entry for entry in kept if not max_cost < entry[2].cost]
        if max_states is not None:
            kept = kept[:max_states]

        discarded = len(ranked) - len(kept)
        if discarded == 0:
            return 0

        self._table = StateTable()
        self._info = {}
        for _, state, info in kept:
            state_id, _ = self._table.intern(state)
            self._info[state_id] = info
        return discarded

    def _check_offset(self, info: StateInfo) -> None:
        if info.offset != self.offset:
            raise InternalConsistencyError(
                f"state info at offset {info.offset} relaxed into layer {self.offset}"
            )


def _rank_key(entry: tuple[int, Any, StateInfo]) -> tuple[Any, int]:
    return entry[2].cost, entry[0]
