from __future__ import annotations

import io

import numpy as np
import pytest

from deltacodec.errors import IncompleteFrameError
from deltacodec.models import FrameGeometry
from deltacodec.utils import (
    _ensure_rgb,
    iter_raw_frames,
    max_abs_error,
    mse,
    psnr,
    read_raw_frames,
    write_frames,
)


class TrickleStream:
    """Binary stream that returns at most 5 bytes per read, like a slow pipe."""

    def __init__(self, data: bytes):
        self._buf = io.BytesIO(data)

    def read(self, n: int = -1) -> bytes:
        return self._buf.read(min(n, 5) if n >= 0 else 5)


def test_read_whole_frames(tmp_path, rgb_frames, geometry):
    src = tmp_path / "clip.rgb24"
    src.write_bytes(rgb_frames.tobytes())
    frames = read_raw_frames(src, geometry)
    assert frames.shape == rgb_frames.shape
    assert np.array_equal(frames, rgb_frames)


def test_partial_trailing_frame_dropped_with_warning(rgb_frames, geometry):
    data = rgb_frames.tobytes() + b"\x01" * (geometry.raw_size // 2)
    with pytest.warns(UserWarning, match="incomplete frame 3"):
        frames = list(iter_raw_frames(io.BytesIO(data), geometry))
    assert len(frames) == 3


def test_partial_trailing_frame_strict(rgb_frames, geometry):
    data = rgb_frames[:1].tobytes() + b"\x01" * 10
    with pytest.raises(IncompleteFrameError) as info:
        read_raw_frames(io.BytesIO(data), geometry, strict=True)
    assert info.value.frame_index == 1
    assert info.value.got == 10
    assert info.value.expected == geometry.raw_size


def test_short_reads_are_reassembled(rgb_frames, geometry):
    frames = read_raw_frames(TrickleStream(rgb_frames.tobytes()), geometry)
    assert np.array_equal(frames, rgb_frames)


def test_max_frames(rgb_frames, geometry):
    frames = read_raw_frames(io.BytesIO(rgb_frames.tobytes()), geometry, max_frames=2)
    assert frames.shape[0] == 2


def test_empty_input():
    g = FrameGeometry(4, 2)
    frames = read_raw_frames(io.BytesIO(b""), g)
    assert frames.shape == (0, 2, 4, 3)


def test_write_frames(tmp_path, rgb_frames):
    target = tmp_path / "out.raw"
    written = write_frames(target, rgb_frames)
    assert written == rgb_frames.nbytes
    assert target.read_bytes() == rgb_frames.tobytes()


def test_ensure_rgb():
    gray = np.full((2, 2), 9, dtype=np.uint8)
    assert _ensure_rgb(gray).shape == (2, 2, 3)
    rgba = np.zeros((2, 2, 4), dtype=np.uint8)
    assert _ensure_rgb(rgba).shape == (2, 2, 3)
    with pytest.raises(ValueError):
        _ensure_rgb(np.zeros((2, 2, 2), dtype=np.uint8))


def test_metrics():
    a = np.zeros((2, 2), dtype=np.uint8)
    b = np.array([[0, 2], [0, 0]], dtype=np.uint8)
    assert mse(a, b) == pytest.approx(1.0)
    assert psnr(a, a) == float("inf")
    assert psnr(a, b) == pytest.approx(48.1308, abs=1e-3)
    assert max_abs_error(b, a) == 2
    with pytest.raises(ValueError):
        mse(a, np.zeros((3,), dtype=np.uint8))
