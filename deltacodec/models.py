"""Frame geometry and pipeline result containers."""
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .errors import InvalidDimensionsError


@dataclass(frozen=True)
class FrameGeometry:
    """
    Validated frame dimensions.

    Both dimensions must be positive and even, since chroma is averaged over
    2x2 blocks. Odd sizes are rejected rather than padded.
    """

    width: int
    height: int

    def __post_init__(self) -> None:
        for name, value in (("width", self.width), ("height", self.height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise InvalidDimensionsError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise InvalidDimensionsError(f"{name} must be positive, got {value}")
            if value % 2:
                raise InvalidDimensionsError(f"{name} must be even, got {value}")

    @property
    def luma_size(self) -> int:
        return self.width * self.height

    @property
    def chroma_width(self) -> int:
        return self.width // 2

    @property
    def chroma_height(self) -> int:
        return self.height // 2

    @property
    def chroma_size(self) -> int:
        return self.luma_size // 4

    @property
    def raw_size(self) -> int:
        """Bytes in one interleaved RGB24 frame."""
        return self.luma_size * 3

    @property
    def planar_size(self) -> int:
        """Bytes in one planar YUV420 frame."""
        return self.luma_size + 2 * self.chroma_size


@dataclass
class StageSizes:
    raw: int
    yuv420: int
    rle: int | None
    entropy: int
    backend: str = "deflate"

    def ratio(self, stage: str) -> float:
        """Size of `stage` as a percentage of the raw size."""
        value = getattr(self, stage)
        if value is None:
            raise ValueError(f"stage {stage!r} was not measured")
        if self.raw == 0:
            return 0.0
        return 100.0 * value / self.raw

    def report_lines(self) -> list[str]:
        lines = [f"Raw size: {self.raw} bytes"]
        lines.append(
            f"YUV420P size: {self.yuv420} bytes ({self.ratio('yuv420'):0.2f}% original size)"
        )
        if self.rle is not None:
            lines.append(
                f"RLE size: {self.rle} bytes ({self.ratio('rle'):0.2f}% original size)"
            )
        lines.append(
            f"{self.backend.upper()} size: {self.entropy} bytes ({self.ratio('entropy'):0.2f}% original size)"
        )
        return lines


@dataclass
class EncodeResult:
    geometry: FrameGeometry
    planar: np.ndarray  # (T, planar_size) uint8
    deltas: np.ndarray  # (T, planar_size) uint8
    bitstream: bytes
    sizes: StageSizes

    @property
    def frame_count(self) -> int:
        return int(self.planar.shape[0])


@dataclass
class DecodeResult:
    geometry: FrameGeometry
    planar: np.ndarray  # (T, planar_size) uint8
    rgb: np.ndarray = field(repr=False)  # (T, H, W, 3) uint8

    @property
    def frame_count(self) -> int:
        return int(self.planar.shape[0])
