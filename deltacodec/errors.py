"""Exceptions raised by DeltaCodec."""
from __future__ import annotations


class CodecError(ValueError):
    """Base class for all codec errors."""


class InvalidDimensionsError(CodecError):
    """Width or height is non-positive or odd."""


class IncompleteFrameError(CodecError):
    """Input stream ended in the middle of a raw frame."""

    def __init__(self, frame_index: int, got: int, expected: int):
        self.frame_index = frame_index
        self.got = got
        self.expected = expected
        super().__init__(
            f"incomplete frame {frame_index}: got {got} of {expected} bytes"
        )


class TruncatedStreamError(CodecError):
    """Decoded stream length is not a whole number of planar frames."""


class RunLengthError(CodecError):
    """Malformed (count, value) stream."""


class CompressionBackendError(CodecError):
    """Entropy backend could not be selected or configured, or failed to compress."""


class DecompressionBackendError(CodecError):
    """Entropy backend rejected the compressed stream."""
