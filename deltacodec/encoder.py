"""YUV420 + temporal-delta encoder for DeltaCodec."""

from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

import numpy as np

from .color import rgb_to_yuv420
from .constants import DEFAULT_BACKEND, DEFAULT_HEIGHT, DEFAULT_WIDTH
from .format import EntropyCoder, get_coder, rle_size
from .models import EncodeResult, FrameGeometry, StageSizes
from .predict import delta_encode
from .utils import iter_raw_frames, load_video_rgb, write_bytes, write_frames


def convert_frames(
    frames: Iterable,
    geometry: FrameGeometry,
    workers: int | None = None,
) -> np.ndarray:
    """
    Convert RGB24 frames to a (T, planar_size) YUV420 array.

    Frames are independent here, so with `workers > 1` they are converted on
    a thread pool. Output order always follows input order.
    """
    if workers is not None and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            planar = list(pool.map(lambda f: rgb_to_yuv420(f, geometry), frames))
    else:
        planar = [rgb_to_yuv420(f, geometry) for f in frames]
    if not planar:
        return np.zeros((0, geometry.planar_size), dtype=np.uint8)
    return np.stack(planar, axis=0)


def encode_planar(
    planar: np.ndarray,
    geometry: FrameGeometry,
    coder: EntropyCoder | None = None,
    measure_rle: bool = True,
) -> EncodeResult:
    """Delta-predict planar frames and compress the concatenated delta stream."""
    coder = coder or get_coder(DEFAULT_BACKEND)
    planar = np.asarray(planar, dtype=np.uint8).reshape(-1, geometry.planar_size)
    deltas = delta_encode(planar)
    bitstream = coder.compress(deltas.tobytes())

    count = planar.shape[0]
    sizes = StageSizes(
        raw=count * geometry.raw_size,
        yuv420=count * geometry.planar_size,
        rle=rle_size(deltas) if measure_rle else None,
        entropy=len(bitstream),
        backend=coder.name,
    )
    return EncodeResult(
        geometry=geometry,
        planar=planar,
        deltas=deltas,
        bitstream=bitstream,
        sizes=sizes,
    )


def encode_frames(
    frames: Iterable,
    geometry: FrameGeometry,
    coder: EntropyCoder | None = None,
    workers: int | None = None,
    measure_rle: bool = True,
) -> EncodeResult:
    """Run the full encoder over RGB24 frames (bytes or (H, W, 3) uint8 arrays)."""
    planar = convert_frames(frames, geometry, workers=workers)
    return encode_planar(planar, geometry, coder=coder, measure_rle=measure_rle)


def encode_rgb24_file(
    input_path,
    output_path,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    backend: str | int = DEFAULT_BACKEND,
    level: int | None = None,
    yuv_path=None,
    workers: int | None = None,
    max_frames: int | None = None,
    strict: bool = False,
    measure_rle: bool = True,
) -> EncodeResult:
    """
    Encode a raw RGB24 stream (path or "-" for stdin) into a compressed bitstream.

    The bitstream carries no header; the same width, height and backend are
    needed to decode it.
    """
    geometry = FrameGeometry(width, height)
    coder = get_coder(backend, level)
    frames = iter_raw_frames(input_path, geometry, max_frames=max_frames, strict=strict)
    result = encode_frames(frames, geometry, coder=coder, workers=workers, measure_rle=measure_rle)
    _write_outputs(result, output_path, yuv_path)
    _print_summary(result, input_path, output_path)
    return result


def encode_video_file(
    input_path: str,
    output_path,
    backend: str | int = DEFAULT_BACKEND,
    level: int | None = None,
    yuv_path=None,
    workers: int | None = None,
    max_frames: int | None = None,
    measure_rle: bool = True,
) -> EncodeResult:
    """Encode any video imageio can read; dimensions come from the video and must be even."""
    frames = load_video_rgb(input_path, max_frames=max_frames)
    _, H, W, _ = frames.shape
    geometry = FrameGeometry(W, H)
    coder = get_coder(backend, level)
    result = encode_frames(frames, geometry, coder=coder, workers=workers, measure_rle=measure_rle)
    _write_outputs(result, output_path, yuv_path)
    _print_summary(result, input_path, output_path)
    return result


def _write_outputs(result: EncodeResult, output_path, yuv_path) -> None:
    if yuv_path is not None:
        write_frames(yuv_path, result.planar)
    write_bytes(output_path, result.bitstream)


def _print_summary(result: EncodeResult, input_path, output_path) -> None:
    # keep stdout clean when the bitstream itself goes there
    out = sys.stderr if str(output_path) == "-" else sys.stdout
    geometry = result.geometry
    print(
        f"Encoded {input_path} -> {output_path}. Frames={result.frame_count}, "
        f"Size={geometry.width}x{geometry.height}, Backend={result.sizes.backend}",
        file=out,
    )
    for line in result.sizes.report_lines():
        print(line, file=out)
