"""Decode engine."""

from latticeviterbi.core.engine import Decoder, decode

__all__ = ["Decoder", "decode"]
