"""Generic Viterbi decoding over lazily expanded state lattices."""

from latticeviterbi.core import Decoder, decode
from latticeviterbi.errors import (
    DecodeError,
    DuplicateInitialStateError,
    EmptyDecoderError,
    InternalConsistencyError,
)
from latticeviterbi.lattice import Emission, InputSuffix, LatticeState, WindowBuffer
from latticeviterbi.models import DecoderConfig, DecodeSummary

__version__ = "0.1.0"

__all__ = [
    "DecodeError",
    "DecodeSummary",
    "Decoder",
    "DecoderConfig",
    "DuplicateInitialStateError",
    "Emission",
    "EmptyDecoderError",
    "InputSuffix",
    "InternalConsistencyError",
    "LatticeState",
    "WindowBuffer",
    "decode",
]
