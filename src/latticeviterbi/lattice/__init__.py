"""Lattice building blocks used by the decode engine."""

from latticeviterbi.lattice.candidates import Candidate, children_with_emission, emit
from latticeviterbi.lattice.layer import Backpointer, Layer, StateInfo, StateTable
from latticeviterbi.lattice.state import Emission, LatticeState
from latticeviterbi.lattice.window import InputSuffix, WindowBuffer

__all__ = [
    "Backpointer",
    "Candidate",
    "Emission",
    "InputSuffix",
    "LatticeState",
    "Layer",
    "StateInfo",
    "StateTable",
    "WindowBuffer",
    "children_with_emission",
    "emit",
]
