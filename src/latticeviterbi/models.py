"""Shared data models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DecoderConfig(BaseModel):
    """Beam limits applied to every layer before it is expanded."""

    model_config = ConfigDict(frozen=True)

    max_states: int | None = Field(default=None, gt=0)
    max_cost: float | None = None


class DecodeSummary(BaseModel):
    """Outcome of a finished `Decoder.compute` call."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    layer_count: int = Field(ge=0)
    state_count: int = Field(ge=0)
    final_offset: int | None = Field(default=None, ge=0)
    input_length: int | None = Field(default=None, ge=0)
    complete: bool
    best_cost: Any = None
