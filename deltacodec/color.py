"""RGB <-> planar YUV420 conversion."""
from __future__ import annotations

import numpy as np

from .constants import (
    B_FROM_U,
    CHROMA_OFFSET,
    G_FROM_U,
    G_FROM_V,
    R_FROM_V,
    U_COEFFS,
    V_COEFFS,
    Y_COEFFS,
)
from .errors import InvalidDimensionsError
from .models import FrameGeometry


def _to_u8(values: np.ndarray) -> np.ndarray:
    # truncation toward zero, saturating at the uint8 range
    return np.clip(np.trunc(values), 0, 255).astype(np.uint8)


def as_rgb_frame(frame, geometry: FrameGeometry) -> np.ndarray:
    """Return `frame` (bytes or array) as a (H, W, 3) uint8 view."""
    if isinstance(frame, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(frame, dtype=np.uint8)
    else:
        arr = np.asarray(frame)
        if arr.dtype != np.uint8:
            raise ValueError(f"RGB frame must be uint8, got {arr.dtype}")
    if arr.size != geometry.raw_size:
        raise ValueError(
            f"RGB frame has {arr.size} bytes, expected {geometry.raw_size} "
            f"for {geometry.width}x{geometry.height}"
        )
    return arr.reshape(geometry.height, geometry.width, 3)


def rgb_to_yuv(frame, geometry: FrameGeometry) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert one RGB24 frame to full resolution planes.

    Returns (Y, U, V) with shape (H, W). Y is truncated to uint8; U and V stay
    float64 so that subsampling averages the exact values.
    """
    rgb = as_rgb_frame(frame, geometry).astype(np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    y = Y_COEFFS[0] * r + Y_COEFFS[1] * g + Y_COEFFS[2] * b
    u = U_COEFFS[0] * r + U_COEFFS[1] * g + U_COEFFS[2] * b + CHROMA_OFFSET
    v = V_COEFFS[0] * r + V_COEFFS[1] * g + V_COEFFS[2] * b + CHROMA_OFFSET
    return _to_u8(y), u, v


def subsample_chroma(u: np.ndarray, v: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Average every 2x2 block of the chroma planes, (H, W) -> (H/2, W/2) uint8."""
    if u.shape != v.shape or u.ndim != 2:
        raise ValueError("chroma planes must be 2-D with equal shapes")
    if u.shape[0] % 2 or u.shape[1] % 2:
        raise InvalidDimensionsError(f"chroma plane shape {u.shape} is not divisible by 2")

    def block_mean(plane: np.ndarray) -> np.ndarray:
        total = plane[0::2, 0::2] + plane[0::2, 1::2] + plane[1::2, 0::2] + plane[1::2, 1::2]
        return _to_u8(total / 4)

    return block_mean(u), block_mean(v)


def rgb_to_yuv420(frame, geometry: FrameGeometry) -> np.ndarray:
    """Convert one RGB24 frame to a flat planar YUV420 frame (Y, then U, then V)."""
    y, u, v = rgb_to_yuv(frame, geometry)
    u_sub, v_sub = subsample_chroma(u, v)
    planar = np.empty((geometry.planar_size,), dtype=np.uint8)
    luma_end = geometry.luma_size
    u_end = luma_end + geometry.chroma_size
    planar[:luma_end] = y.reshape(-1)
    planar[luma_end:u_end] = u_sub.reshape(-1)
    planar[u_end:] = v_sub.reshape(-1)
    return planar


def split_planes(planar, geometry: FrameGeometry) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return (Y, U, V) views of a planar frame shaped (H, W), (H/2, W/2), (H/2, W/2)."""
    arr = np.asarray(planar, dtype=np.uint8).reshape(-1)
    if arr.size != geometry.planar_size:
        raise ValueError(
            f"planar frame has {arr.size} bytes, expected {geometry.planar_size}"
        )
    luma_end = geometry.luma_size
    u_end = luma_end + geometry.chroma_size
    chroma_shape = (geometry.chroma_height, geometry.chroma_width)
    y = arr[:luma_end].reshape(geometry.height, geometry.width)
    u = arr[luma_end:u_end].reshape(chroma_shape)
    v = arr[u_end:].reshape(chroma_shape)
    return y, u, v


def yuv420_to_rgb(planar, geometry: FrameGeometry) -> np.ndarray:
    """Re-expand a planar YUV420 frame to an (H, W, 3) uint8 RGB frame."""
    y_plane, u_plane, v_plane = split_planes(planar, geometry)
    y = y_plane.astype(np.float64)
    # pixel (row, col) reads chroma at (row // 2, col // 2)
    u = np.repeat(np.repeat(u_plane, 2, axis=0), 2, axis=1).astype(np.float64) - CHROMA_OFFSET
    v = np.repeat(np.repeat(v_plane, 2, axis=0), 2, axis=1).astype(np.float64) - CHROMA_OFFSET

    rgb = np.empty((geometry.height, geometry.width, 3), dtype=np.uint8)
    rgb[..., 0] = _to_u8(y + R_FROM_V * v)
    rgb[..., 1] = _to_u8(y - G_FROM_U * u - G_FROM_V * v)
    rgb[..., 2] = _to_u8(y + B_FROM_U * u)
    return rgb
