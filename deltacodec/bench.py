from __future__ import annotations

import argparse
import json
import math
import subprocess
import sys
import time
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np

from .constants import BACKEND_NAMES, DEFAULT_HEIGHT, DEFAULT_WIDTH
from .decoder import decode_bitstream
from .encoder import encode_frames
from .format import get_coder
from .models import FrameGeometry
from .utils import psnr, read_raw_frames


@dataclass
class BenchResult:
    backend: str
    clip: str
    frames: int
    encode_time: float
    decode_time: float
    encode_fps: float
    decode_fps: float
    raw_bytes: int
    yuv420_bytes: int
    rle_bytes: int | None
    size_bytes: int
    ratio: float
    psnr: float | None


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def bench_clip(clip: Path, geometry: FrameGeometry, backend: str, measure_rle: bool = True) -> BenchResult:
    frames = read_raw_frames(clip, geometry)
    coder = get_coder(backend)

    start = time.perf_counter()
    encoded = encode_frames(frames, geometry, coder=coder, measure_rle=measure_rle)
    enc_time = time.perf_counter() - start

    start = time.perf_counter()
    decoded = decode_bitstream(encoded.bitstream, geometry, coder=coder)
    dec_time = time.perf_counter() - start

    t = encoded.frame_count
    quality = psnr(frames, decoded.rgb) if t else None
    if quality is not None and math.isinf(quality):
        # lossless clip; JSON has no infinity
        quality = None
    sizes = encoded.sizes
    return BenchResult(
        backend=coder.name,
        clip=clip.name,
        frames=t,
        encode_time=enc_time,
        decode_time=dec_time,
        encode_fps=t / enc_time if enc_time > 0 else 0.0,
        decode_fps=t / dec_time if dec_time > 0 else 0.0,
        raw_bytes=sizes.raw,
        yuv420_bytes=sizes.yuv420,
        rle_bytes=sizes.rle,
        size_bytes=sizes.entropy,
        ratio=sizes.ratio("entropy"),
        psnr=quality,
    )


def collect_env() -> dict:
    data = {
        "python": sys.version,
        "platform": sys.platform,
        "numpy": np.__version__,
    }
    try:
        git = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True)
    except OSError:
        return data
    if git.returncode == 0:
        data["git_commit"] = git.stdout.strip()
    return data


def write_results(out_dir: Path, results: list[BenchResult], env: dict) -> None:
    ensure_dir(out_dir)
    with open(out_dir / "results.json", "w", encoding="utf-8") as f:
        json.dump({"env": env, "results": [asdict(r) for r in results]}, f, indent=2)

    # report.md
    lines = []
    lines.append("# DeltaCodec Benchmark Report\n")
    lines.append(f"Env: {env}\n")
    lines.append("| backend | clip | frames | raw | yuv420 | rle | size (bytes) | % raw | enc time (s) | dec time (s) | psnr |")
    lines.append("|---|---|---|---|---|---|---|---|---|---|---|")
    for r in results:
        lines.append(
            f"| {r.backend} | {r.clip} | {r.frames} | {r.raw_bytes} | {r.yuv420_bytes} | "
            f"{r.rle_bytes if r.rle_bytes is not None else 'NA'} | {r.size_bytes} | {r.ratio:.2f} | "
            f"{r.encode_time:.2f} | {r.decode_time:.2f} | {r.psnr if r.psnr is not None else 'NA'} |"
        )
    (out_dir / "report.md").write_text("\n".join(lines), encoding="utf-8")

    # plots
    ensure_dir(out_dir / "plots")
    if results:
        # size per stage for every backend/clip pair
        plt.figure()
        labels = [f"{r.backend}-{r.clip}" for r in results]
        x = np.arange(len(labels))
        width = 0.2
        stages = (
            ("raw", [r.raw_bytes for r in results]),
            ("yuv420", [r.yuv420_bytes for r in results]),
            ("rle", [r.rle_bytes if r.rle_bytes is not None else 0 for r in results]),
            ("entropy", [r.size_bytes for r in results]),
        )
        for offset, (name, values) in enumerate(stages):
            plt.bar(x + (offset - 1.5) * width, values, width, label=name)
        plt.xticks(x, labels, rotation=45, ha="right")
        plt.ylabel("Size (bytes)")
        plt.legend()
        plt.tight_layout()
        plt.savefig(out_dir / "plots" / "stage_sizes.png")
        plt.close()
        # speed bars
        plt.figure()
        enc = [r.encode_fps for r in results]
        dec = [r.decode_fps for r in results]
        width = 0.35
        plt.bar(x - width / 2, enc, width, label="encode fps")
        plt.bar(x + width / 2, dec, width, label="decode fps")
        plt.xticks(x, labels, rotation=45, ha="right")
        plt.legend()
        plt.tight_layout()
        plt.savefig(out_dir / "plots" / "speed.png")
        plt.close()


def find_clips(path: Path) -> list[Path]:
    return sorted([p for p in path.glob("*.rgb24") if p.is_file()])


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Compare DeltaCodec entropy backends")
    parser.add_argument("--clips", type=Path, required=True, help="Directory containing .rgb24 clips")
    parser.add_argument("--out", type=Path, required=True, help="Output directory for results")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    parser.add_argument(
        "--backends",
        type=str,
        default=",".join(BACKEND_NAMES.values()),
        help="Comma separated backends",
    )
    parser.add_argument("--no-rle", action="store_true", help="Skip the RLE size measurement")
    args = parser.parse_args(argv)

    clips = find_clips(args.clips)
    if not clips:
        raise SystemExit(f"No .rgb24 clips found in {args.clips}")

    geometry = FrameGeometry(args.width, args.height)
    backends = [b.strip() for b in args.backends.split(",") if b.strip()]

    results: list[BenchResult] = []
    for clip in clips:
        for backend in backends:
            results.append(bench_clip(clip, geometry, backend, measure_rle=not args.no_rle))

    write_results(args.out, results, collect_env())
    print(f"Wrote results to {args.out}")


if __name__ == "__main__":
    main()
