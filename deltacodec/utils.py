"""Frame ingest, raw writers and basic metrics."""
from __future__ import annotations

import math
import sys
import warnings
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator

import imageio.v2 as imageio
import numpy as np

from .errors import IncompleteFrameError
from .models import FrameGeometry


def _ensure_rgb(frame: np.ndarray) -> np.ndarray:
    arr = np.asarray(frame)
    if arr.ndim == 2:
        # Grayscale -> replicate to RGB
        arr = np.stack([arr, arr, arr], axis=-1)
    if arr.ndim == 3:
        if arr.shape[2] == 4:
            arr = arr[..., :3]
        if arr.shape[2] == 3:
            return arr.astype(np.uint8)
    raise ValueError(f"Unsupported frame shape for RGB conversion: {arr.shape}")


@contextmanager
def _open_binary(source, mode: str):
    """Yield a binary file object for a path, "-" (stdin/stdout) or an open stream."""
    if hasattr(source, "read") or hasattr(source, "write"):
        yield source
    elif str(source) == "-":
        yield sys.stdin.buffer if "r" in mode else sys.stdout.buffer
    else:
        if "w" in mode:
            Path(source).parent.mkdir(parents=True, exist_ok=True)
        with open(source, mode) as f:
            yield f


def _read_exact(f: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = f.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def iter_raw_frames(
    source,
    geometry: FrameGeometry,
    max_frames: int | None = None,
    strict: bool = False,
) -> Iterator[bytes]:
    """
    Yield consecutive RGB24 frames of `geometry.raw_size` bytes from `source`.

    A trailing partial frame is dropped with a warning, or raises
    IncompleteFrameError when `strict` is set.
    """
    with _open_binary(source, "rb") as f:
        index = 0
        while max_frames is None or index < max_frames:
            frame = _read_exact(f, geometry.raw_size)
            if not frame:
                return
            if len(frame) < geometry.raw_size:
                err = IncompleteFrameError(index, len(frame), geometry.raw_size)
                if strict:
                    raise err
                warnings.warn(f"{err}; dropping it")
                return
            yield frame
            index += 1


def read_raw_frames(
    source,
    geometry: FrameGeometry,
    max_frames: int | None = None,
    strict: bool = False,
) -> np.ndarray:
    """Read RGB24 frames as a (T, H, W, 3) uint8 array."""
    frames = [
        np.frombuffer(frame, dtype=np.uint8).reshape(geometry.height, geometry.width, 3)
        for frame in iter_raw_frames(source, geometry, max_frames=max_frames, strict=strict)
    ]
    if not frames:
        return np.zeros((0, geometry.height, geometry.width, 3), dtype=np.uint8)
    return np.stack(frames, axis=0)


def write_frames(target, frames: Iterable) -> int:
    """Write frames back to back to `target`; returns the number of bytes written."""
    written = 0
    with _open_binary(target, "wb") as f:
        for frame in frames:
            data = np.ascontiguousarray(frame, dtype=np.uint8).tobytes()
            f.write(data)
            written += len(data)
    return written


def write_bytes(target, data: bytes) -> None:
    if str(target) == "-":
        sys.stdout.buffer.write(data)
        return
    path = Path(target)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def read_bytes(source) -> bytes:
    if str(source) == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def load_video_rgb(path: str, max_frames: int | None = None) -> np.ndarray:
    """
    Load a video file as uint8 RGB frames with shape (T, H, W, 3).
    """
    reader = imageio.get_reader(path)
    frames = []
    for idx, frame in enumerate(reader):
        if max_frames is not None and idx >= max_frames:
            break
        frames.append(_ensure_rgb(frame))
    reader.close()
    if not frames:
        raise ValueError(f"No frames read from video: {path}")
    arr = np.stack(frames, axis=0)
    return arr.astype(np.uint8)


def save_video_from_rgb(frames: np.ndarray, path: str, fps: int = 30) -> None:
    """
    Save uint8 RGB frames with shape (T, H, W, 3) to a video file.
    """
    if frames.ndim != 4 or frames.shape[-1] != 3:
        raise ValueError("frames must have shape (T, H, W, 3)")
    writer = imageio.get_writer(path, fps=fps)
    for frame in frames:
        writer.append_data(frame)
    writer.close()


def mse(a: np.ndarray, b: np.ndarray) -> float:
    """Compute mean squared error between two arrays."""
    if a.shape != b.shape:
        raise ValueError(f"Shape mismatch: {a.shape} vs {b.shape}")
    diff = a.astype(np.float64) - b.astype(np.float64)
    return float(np.mean(diff * diff))


def psnr(a: np.ndarray, b: np.ndarray) -> float:
    err = mse(a, b)
    if err == 0:
        return float("inf")
    return 10 * math.log10((255.0 * 255.0) / err)


def max_abs_error(a: np.ndarray, b: np.ndarray) -> int:
    if a.shape != b.shape:
        raise ValueError(f"Shape mismatch: {a.shape} vs {b.shape}")
    if a.size == 0:
        return 0
    return int(np.max(np.abs(a.astype(np.int16) - b.astype(np.int16))))
