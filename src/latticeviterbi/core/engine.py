"""Viterbi decoding over an implicitly generated lattice.

Layers are addressed by cumulative input consumption rather than by step
count: a state whose emission consumes several symbols lands several layers
ahead of its parent, and a zero-width emission lands in the layer that is
currently being expanded. Layers are finalized lowest offset first, which is
safe because no emission can move backwards in the input.

Within a layer, states are expanded cheapest first and at most once, so
zero-width cycles in a state model terminate. With non-negative zero-width
costs this is exactly Dijkstra's relaxation and keeps the result optimal.
"""

from __future__ import annotations

import heapq
import logging
from collections.abc import Iterable
from typing import Any

from latticeviterbi.errors import (
    DuplicateInitialStateError,
    EmptyDecoderError,
    InternalConsistencyError,
)
from latticeviterbi.lattice.candidates import children_with_emission, emit
from latticeviterbi.lattice.layer import Backpointer, Layer, StateInfo
from latticeviterbi.lattice.state import Cost
from latticeviterbi.lattice.window import WindowBuffer
from latticeviterbi.models import DecoderConfig, DecodeSummary

logger = logging.getLogger(__name__)


class Decoder:
    """Lowest-cost path search over states implementing `LatticeState`.

    Costs are only added and compared. Zero-width candidates must not be
    cheaper than their parent: a negative zero-width cost raises
    `InternalConsistencyError`, since states are settled cheapest first.
    """

    def __init__(self, max_states: int | None = None, max_cost: Cost | None = None) -> None:
        if max_states is not None and max_states <= 0:
            raise ValueError(f"max_states must be positive, got {max_states}")
        self.max_states = max_states
        self.max_cost = max_cost
        self._layers: list[Layer[Any]] = []
        self._input_length: int | None = None
        self._complete = False

    @classmethod
    def from_config(cls, config: DecoderConfig) -> Decoder:
        return cls(max_states=config.max_states, max_cost=config.max_cost)

    @property
    def layers(self) -> tuple[Layer[Any], ...]:
        """Finalized layers in increasing consumption order."""
        return tuple(self._layers)

    def reset(self) -> None:
        self._layers = []
        self._input_length = None
        self._complete = False

    def compute(self, initial_states: Iterable[tuple[Any, Cost]], symbols: Iterable[Any]) -> None:
        """Build the lattice for `symbols` starting from `initial_states`.

        `symbols` may be any iterable, including a one-shot generator; it is
        read through a `WindowBuffer` and only the span still reachable from
        a pending layer is kept in memory.
        """
        self.reset()
        window: WindowBuffer[Any] = WindowBuffer(symbols)
        pending = self._seed(initial_states, window)
        window.truncate(min(pending, default=0))

        while pending:
            offset = min(pending)
            layer = pending.pop(offset)
            pruned = layer.prune(self.max_states, self.max_cost)
            if pruned:
                logger.debug("Pruned %d states from layer at offset %d", pruned, offset)
            if not layer:
                logger.debug("Discarding empty layer at offset %d", offset)
                continue

            self._layers.append(layer)
            self._expand(layer, window, pending)
            logger.debug(
                "Layer %d finalized: offset=%d states=%d pending=%d",
                len(self._layers) - 1,
                offset,
                len(layer),
                len(pending),
            )
            window.truncate(min(pending, default=offset))

        if self._layers:
            self._record_completion(self._layers[-1], window)
        logger.debug("Decoding finished with %d layers", len(self._layers))

    def best_path(self) -> list[Any]:
        """Return the cheapest state sequence ending in the final layer."""
        self._final_layer_or_raise()
        position = len(self._layers) - 1
        state_id, _, _ = self._layers[position].best()

        path: list[Any] = []
        cursor: Backpointer | None = Backpointer(position, state_id)
        while cursor is not None:
            layer = self._layers[cursor.position]
            path.append(layer.state(cursor.state_id))
            cursor = layer.info(cursor.state_id).parent
        path.reverse()
        return path

    def best_cost(self) -> Cost:
        """Cost of the path returned by `best_path`."""
        _, _, info = self._final_layer_or_raise().best()
        return info.cost

    def summary(self) -> DecodeSummary:
        if not self._layers:
            return DecodeSummary(layer_count=0, state_count=0, complete=False)
        final = self._layers[-1]
        return DecodeSummary(
            layer_count=len(self._layers),
            state_count=sum(len(layer) for layer in self._layers),
            final_offset=final.offset,
            input_length=self._input_length,
            complete=self._complete,
            best_cost=self.best_cost(),
        )

    def _record_completion(self, final: Layer[Any], window: WindowBuffer[Any]) -> None:
        # A producer that never ends is not drained: the length stays unknown.
        if window.window_offset > final.offset:
            self._complete = False
        else:
            self._complete = not window.covers(final.offset)
        if window.exhausted:
            self._input_length = window.window_offset + window.retained

    def _final_layer_or_raise(self) -> Layer[Any]:
        if not self._layers:
            raise EmptyDecoderError("decoder has no surviving layers")
        return self._layers[-1]

    def _seed(
        self,
        initial_states: Iterable[tuple[Any, Cost]],
        window: WindowBuffer[Any],
    ) -> dict[int, Layer[Any]]:
        pending: dict[int, Layer[Any]] = {}
        remaining = window.suffix(0)
        for state, cost in initial_states:
            emission = emit(state, remaining)
            if emission is None:
                logger.debug("Dropping initial state %r: not emittable", state)
                continue
            offset = emission.consumed
            layer = pending.get(offset)
            if layer is None:
                layer = pending[offset] = Layer(offset)
            info = StateInfo(offset=offset, cost=cost + emission.cost)
            if layer.insert_new(state, info) is None:
                raise DuplicateInitialStateError(f"duplicate initial state {state!r}")
        return pending

    def _expand(
        self,
        layer: Layer[Any],
        window: WindowBuffer[Any],
        pending: dict[int, Layer[Any]],
    ) -> None:
        position = len(self._layers) - 1
        remaining = window.suffix(layer.offset)
        queue = [(info.cost, state_id) for state_id, _, info in layer]
        heapq.heapify(queue)
        expanded: set[int] = set()

        while queue:
            cost, state_id = heapq.heappop(queue)
            if state_id in expanded or layer.info(state_id).cost < cost:
                continue
            expanded.add(state_id)
            parent = Backpointer(position, state_id)

            for candidate in children_with_emission(layer.state(state_id), remaining):
                offset = layer.offset + candidate.consumed
                info = StateInfo(offset=offset, cost=cost + candidate.cost, parent=parent)
                if candidate.consumed:
                    target = pending.get(offset)
                    if target is None:
                        target = pending[offset] = Layer(offset)
                    target.relax(candidate.state, info)
                    continue

                if info.cost < cost:
                    raise InternalConsistencyError(
                        f"zero-width transition to {candidate.state!r} lowers the path cost; "
                        "negative zero-width costs are not supported"
                    )
                if self._admit_in_place(layer, candidate.state, info, expanded):
                    child_id = layer.find(candidate.state)
                    heapq.heappush(queue, (info.cost, child_id))

    def _admit_in_place(
        self,
        layer: Layer[Any],
        state: Any,
        info: StateInfo,
        expanded: set[int],
    ) -> bool:
        """Relax a zero-width candidate into the layer under expansion.

        When the beam is full, an unseen state displaces the most expensive
        entry that has not been expanded yet, provided it is strictly cheaper.
        """
        existing = layer.find(state)
        if existing is not None and existing in expanded:
            return False
        if self.max_cost is not None and self.max_cost < info.cost:
            return False
        if existing is not None or self.max_states is None or len(layer) < self.max_states:
            _, improved = layer.relax(state, info)
            return improved

        worst = layer.worst(exclude=expanded)
        if worst is None or not info.cost < worst[2].cost:
            return False
        evicted_id, evicted, _ = worst
        logger.debug("Evicting %r from layer at offset %d for %r", evicted, layer.offset, state)
        layer.replace(evicted_id, state, info)
        return True


def decode(
    initial_states: Iterable[tuple[Any, Cost]],
    symbols: Iterable[Any],
    *,
    max_states: int | None = None,
    max_cost: Cost | None = None,
) -> list[Any]:
    """Run a decoder once and return its best path."""
    decoder = Decoder(max_states=max_states, max_cost=max_cost)
    decoder.compute(initial_states, symbols)
    return decoder.best_path()
