"""Decoder error types."""

from __future__ import annotations


class DecodeError(Exception):
    """Base class for all decoder failures."""


class DuplicateInitialStateError(DecodeError):
    """Two initial states interned to the same value while seeding."""


class EmptyDecoderError(DecodeError):
    """A result was requested from a decoder without surviving layers."""


class InternalConsistencyError(DecodeError):
    """A lattice or window invariant was broken."""
