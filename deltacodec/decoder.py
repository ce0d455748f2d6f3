"""Decoder for DeltaCodec bitstreams (inverse of the encoder stages, in reverse order)."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np

from .color import yuv420_to_rgb
from .constants import (
    DECODED_RGB_NAME,
    DECODED_YUV_NAME,
    DEFAULT_BACKEND,
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    ENCODED_BITSTREAM_NAME,
    ENCODED_YUV_NAME,
)
from .encoder import encode_rgb24_file
from .errors import TruncatedStreamError
from .format import EntropyCoder, get_coder
from .models import DecodeResult, EncodeResult, FrameGeometry
from .predict import delta_decode
from .utils import read_bytes, save_video_from_rgb, write_frames


def split_frames(stream: bytes, geometry: FrameGeometry) -> np.ndarray:
    """Split an inflated delta stream into (T, planar_size) frames."""
    frame_size = geometry.planar_size
    count, remainder = divmod(len(stream), frame_size)
    if remainder:
        raise TruncatedStreamError(
            f"stream of {len(stream)} bytes ends with a partial frame "
            f"({remainder} of {frame_size} bytes after {count} frames)"
        )
    return np.frombuffer(stream, dtype=np.uint8).reshape(count, frame_size)


def planar_to_rgb(planar: np.ndarray, geometry: FrameGeometry) -> np.ndarray:
    frames = np.empty((planar.shape[0], geometry.height, geometry.width, 3), dtype=np.uint8)
    for idx, frame in enumerate(planar):
        frames[idx] = yuv420_to_rgb(frame, geometry)
    return frames


def decode_bitstream(
    bitstream: bytes,
    geometry: FrameGeometry,
    coder: EntropyCoder | None = None,
) -> DecodeResult:
    """Inflate, undo the temporal prediction, then re-expand every frame to RGB."""
    coder = coder or get_coder(DEFAULT_BACKEND)
    stream = coder.decompress(bitstream)
    deltas = split_frames(stream, geometry)
    planar = delta_decode(deltas)
    return DecodeResult(geometry=geometry, planar=planar, rgb=planar_to_rgb(planar, geometry))


def decode_to_files(
    input_path,
    output_path,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    backend: str | int = DEFAULT_BACKEND,
    yuv_path=None,
    video_path=None,
    fps: int = 25,
) -> DecodeResult:
    """
    Decode a bitstream file into raw RGB24 at `output_path`.

    Optionally also writes the reconstructed planar YUV420 frames and an
    encoded video (any format imageio can write).
    """
    geometry = FrameGeometry(width, height)
    coder = get_coder(backend)
    result = decode_bitstream(read_bytes(input_path), geometry, coder=coder)

    write_frames(output_path, result.rgb)
    if yuv_path is not None:
        write_frames(yuv_path, result.planar)
    if video_path is not None and result.frame_count:
        save_video_from_rgb(result.rgb, str(video_path), fps=fps)

    out = sys.stderr if str(output_path) == "-" else sys.stdout
    print(
        f"Decoded {input_path} -> {output_path}. Frames={result.frame_count}, "
        f"Size={width}x{height}, Backend={coder.name}",
        file=out,
    )
    return result


def roundtrip_files(
    input_path,
    out_dir,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    backend: str | int = DEFAULT_BACKEND,
    level: int | None = None,
    workers: int | None = None,
    max_frames: int | None = None,
    strict: bool = False,
) -> tuple[EncodeResult, DecodeResult]:
    """
    Encode a raw RGB24 stream and decode it again, writing every artifact to `out_dir`.

    Produces encoded.yuv, encoded.bin, decoded.yuv and decoded.rgb24.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    bitstream_path = out_dir / ENCODED_BITSTREAM_NAME
    encoded = encode_rgb24_file(
        input_path,
        bitstream_path,
        width=width,
        height=height,
        backend=backend,
        level=level,
        yuv_path=out_dir / ENCODED_YUV_NAME,
        workers=workers,
        max_frames=max_frames,
        strict=strict,
    )
    decoded = decode_to_files(
        bitstream_path,
        out_dir / DECODED_RGB_NAME,
        width=width,
        height=height,
        backend=backend,
        yuv_path=out_dir / DECODED_YUV_NAME,
    )
    if not np.array_equal(encoded.planar, decoded.planar):
        raise RuntimeError("decoded planar frames differ from the encoded ones")
    return encoded, decoded
