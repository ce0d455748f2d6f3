from __future__ import annotations

import numpy as np
import pytest

from deltacodec.models import FrameGeometry


@pytest.fixture
def geometry() -> FrameGeometry:
    return FrameGeometry(8, 6)


@pytest.fixture
def rgb_frames(geometry):
    """Three frames: random keyframe, a small local change, then a shifted copy."""
    rng = np.random.default_rng(7)
    H, W = geometry.height, geometry.width
    frames = np.zeros((3, H, W, 3), dtype=np.uint8)
    frames[0] = rng.integers(0, 256, size=(H, W, 3), dtype=np.uint8)
    frames[1] = frames[0]
    frames[1, 2:4, 2:4, :] += 3
    frames[2] = np.roll(frames[1], 1, axis=1)
    return frames
