"""Temporal delta prediction between consecutive planar frames."""
from __future__ import annotations

from typing import Iterable, Iterator

import numpy as np


def _as_u8(frame) -> np.ndarray:
    if isinstance(frame, (bytes, bytearray, memoryview)):
        return np.frombuffer(frame, dtype=np.uint8)
    arr = np.asarray(frame)
    if arr.dtype != np.uint8:
        raise ValueError(f"frames must be uint8, got {arr.dtype}")
    return arr


def predict_frame(previous, current) -> np.ndarray:
    """Return (current - previous) mod 256."""
    prev = _as_u8(previous)
    cur = _as_u8(current)
    if prev.shape != cur.shape:
        raise ValueError(f"frame shape mismatch: {prev.shape} vs {cur.shape}")
    return cur - prev  # uint8 arithmetic wraps


def reconstruct_frame(delta, previous) -> np.ndarray:
    """Return (delta + previous) mod 256, the inverse of predict_frame."""
    d = _as_u8(delta)
    prev = _as_u8(previous)
    if d.shape != prev.shape:
        raise ValueError(f"frame shape mismatch: {d.shape} vs {prev.shape}")
    return d + prev


def delta_encode(frames: np.ndarray) -> np.ndarray:
    """
    Delta-encode a (T, L) frame sequence.

    Row 0 is the keyframe and is copied unchanged; row i > 0 is the difference
    from row i - 1.
    """
    arr = _as_u8(frames)
    if arr.ndim != 2:
        raise ValueError("frames must have shape (T, L)")
    deltas = arr.copy()
    if arr.shape[0] > 1:
        deltas[1:] = arr[1:] - arr[:-1]
    return deltas


def iter_delta_decode(deltas: Iterable) -> Iterator[np.ndarray]:
    """Fold over delta frames, yielding each decoded frame in order."""
    previous = None
    for delta in deltas:
        if previous is None:
            current = _as_u8(delta).copy()
        else:
            current = reconstruct_frame(delta, previous)
        yield current
        previous = current


def delta_decode(deltas: np.ndarray) -> np.ndarray:
    """Inverse of delta_encode for a (T, L) array."""
    arr = _as_u8(deltas)
    if arr.ndim != 2:
        raise ValueError("deltas must have shape (T, L)")
    frames = np.empty_like(arr)
    for idx, frame in enumerate(iter_delta_decode(arr)):
        frames[idx] = frame
    return frames
