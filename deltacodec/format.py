"""Byte-stream codecs: run-length coding and pluggable entropy backends."""

from __future__ import annotations

import lzma
import zlib
from typing import Protocol

import numpy as np

from .constants import (
    BACKEND_DEFLATE,
    BACKEND_LZMA,
    BACKEND_NAMES,
    BACKEND_NONE,
    BACKEND_ZLIB,
    DEFAULT_BACKEND,
    RLE_MAX_RUN,
)
from .errors import CompressionBackendError, DecompressionBackendError, RunLengthError


def rle_encode(data) -> bytes:
    """
    Encode bytes as (count, value) pairs with 1 <= count <= 255.

    Runs longer than 255 are split into full 255-byte pairs followed by the
    remainder.
    """
    arr = np.frombuffer(bytes(data), dtype=np.uint8)
    if arr.size == 0:
        return b""
    starts = np.concatenate(([0], np.flatnonzero(arr[1:] != arr[:-1]) + 1))
    lengths = np.diff(np.append(starts, arr.size))
    values = arr[starts]

    pieces = (lengths + RLE_MAX_RUN - 1) // RLE_MAX_RUN
    counts = np.full((int(pieces.sum()),), RLE_MAX_RUN, dtype=np.int64)
    counts[np.cumsum(pieces) - 1] = lengths - (pieces - 1) * RLE_MAX_RUN

    out = np.empty((counts.size, 2), dtype=np.uint8)
    out[:, 0] = counts
    out[:, 1] = np.repeat(values, pieces)
    return out.tobytes()


def rle_decode(data) -> bytes:
    buf = np.frombuffer(bytes(data), dtype=np.uint8)
    if buf.size % 2:
        raise RunLengthError("RLE stream has odd length")
    pairs = buf.reshape(-1, 2)
    if np.any(pairs[:, 0] == 0):
        raise RunLengthError("RLE stream contains a zero-length run")
    return np.repeat(pairs[:, 1], pairs[:, 0]).tobytes()


def rle_size(deltas: np.ndarray) -> int:
    """Bytes needed when the keyframe is stored raw and every P-frame as RLE."""
    if len(deltas) == 0:
        return 0
    total = len(bytes(deltas[0]))
    for delta in deltas[1:]:
        total += len(rle_encode(delta))
    return total


class EntropyCoder(Protocol):
    name: str

    def compress(self, data: bytes) -> bytes:
        ...

    def decompress(self, data: bytes) -> bytes:
        ...


class NullCoder:
    """Identity backend, useful to inspect the delta stream."""

    name = "none"

    def compress(self, data: bytes) -> bytes:
        return bytes(data)

    def decompress(self, data: bytes) -> bytes:
        return bytes(data)


class DeflateCoder:
    """
    DEFLATE backend.

    With `raw=True` (the default) the output is a bare DEFLATE stream with no
    zlib header or checksum; `raw=False` wraps it in the zlib container.
    """

    def __init__(self, level: int = 9, raw: bool = True):
        if not -1 <= int(level) <= 9:
            raise CompressionBackendError(f"DEFLATE level must be in [-1, 9], got {level}")
        self.level = int(level)
        self.raw = raw
        self.wbits = -zlib.MAX_WBITS if raw else zlib.MAX_WBITS
        self.name = "deflate" if raw else "zlib"

    def compress(self, data: bytes) -> bytes:
        try:
            comp = zlib.compressobj(self.level, zlib.DEFLATED, self.wbits)
            return comp.compress(bytes(data)) + comp.flush()
        except zlib.error as exc:
            raise CompressionBackendError(f"{self.name} compression failed: {exc}") from exc

    def decompress(self, data: bytes) -> bytes:
        decomp = zlib.decompressobj(self.wbits)
        try:
            out = decomp.decompress(bytes(data)) + decomp.flush()
        except zlib.error as exc:
            raise DecompressionBackendError(f"corrupt {self.name} stream: {exc}") from exc
        if not decomp.eof:
            raise DecompressionBackendError(f"truncated {self.name} stream")
        if decomp.unused_data:
            raise DecompressionBackendError(
                f"{len(decomp.unused_data)} trailing bytes after {self.name} stream"
            )
        return out


class LzmaCoder:
    name = "lzma"

    def __init__(self, preset: int = 6):
        if not 0 <= int(preset) <= 9:
            raise CompressionBackendError(f"LZMA preset must be in [0, 9], got {preset}")
        self.preset = int(preset)

    def compress(self, data: bytes) -> bytes:
        try:
            return lzma.compress(bytes(data), preset=self.preset)
        except lzma.LZMAError as exc:
            raise CompressionBackendError(f"lzma compression failed: {exc}") from exc

    def decompress(self, data: bytes) -> bytes:
        try:
            return lzma.decompress(bytes(data))
        except lzma.LZMAError as exc:
            raise DecompressionBackendError(f"corrupt lzma stream: {exc}") from exc
        except EOFError as exc:
            raise DecompressionBackendError(f"truncated lzma stream: {exc}") from exc


def get_coder(backend: str | int = DEFAULT_BACKEND, level: int | None = None) -> EntropyCoder:
    """Resolve a backend by name ("none", "zlib", "lzma", "deflate") or numeric id."""
    if isinstance(backend, int) and not isinstance(backend, bool):
        if backend not in BACKEND_NAMES:
            raise CompressionBackendError(f"Unknown backend id {backend}")
        backend = BACKEND_NAMES[backend]
    name = str(backend).lower()
    if name == BACKEND_NAMES[BACKEND_NONE]:
        return NullCoder()
    if name == BACKEND_NAMES[BACKEND_ZLIB]:
        return DeflateCoder(level=9 if level is None else level, raw=False)
    if name == BACKEND_NAMES[BACKEND_LZMA]:
        return LzmaCoder(preset=6 if level is None else level)
    if name == BACKEND_NAMES[BACKEND_DEFLATE]:
        return DeflateCoder(level=9 if level is None else level, raw=True)
    raise CompressionBackendError(
        f"Unknown backend {backend!r}; choose from {', '.join(BACKEND_NAMES.values())}"
    )
