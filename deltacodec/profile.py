from __future__ import annotations

import argparse
import json
import subprocess
import sys
import time
import tracemalloc
from pathlib import Path
from typing import Optional

import psutil

from .constants import DEFAULT_BACKEND, DEFAULT_HEIGHT, DEFAULT_WIDTH
from .decoder import decode_to_files
from .encoder import encode_rgb24_file


def current_rss_mb() -> float:
    proc = psutil.Process()
    return proc.memory_info().rss / (1024 * 1024)


def _git_head() -> str:
    try:
        proc = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True)
    except OSError:
        return ""
    return proc.stdout.strip()


def run_profile(
    input_path: Path,
    out_dir: Path,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    backend: str = DEFAULT_BACKEND,
    workers: int | None = None,
) -> dict:
    out_dir.mkdir(parents=True, exist_ok=True)
    temp_bin = out_dir / "_tmp.bin"
    result = {}

    rss_start = current_rss_mb()
    tracemalloc.start()
    try:
        t0 = time.perf_counter()
        encoded = encode_rgb24_file(
            str(input_path), temp_bin, width=width, height=height, backend=backend, workers=workers
        )
        enc_time = time.perf_counter() - t0
        rss_enc = current_rss_mb()
        _, peak_size = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    tracemalloc.start()
    try:
        t2 = time.perf_counter()
        decode_to_files(temp_bin, out_dir / "recon.rgb24", width=width, height=height, backend=backend)
        dec_time = time.perf_counter() - t2
        rss_dec = current_rss_mb()
        _, peak_size_dec = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    result["frames"] = encoded.frame_count
    result["backend"] = encoded.sizes.backend
    result["compressed_bytes"] = encoded.sizes.entropy
    result["encode_time_sec"] = enc_time
    result["decode_time_sec"] = dec_time
    result["rss_start_mb"] = rss_start
    result["rss_encode_mb"] = rss_enc
    result["rss_decode_mb"] = rss_dec
    result["tracemalloc_peak_bytes_encode"] = peak_size
    result["tracemalloc_peak_bytes_decode"] = peak_size_dec

    result["env"] = {
        "python": sys.version,
        "platform": sys.platform,
        "git": _git_head(),
    }

    with open(out_dir / "profile.json", "w", encoding="utf-8") as f:
        json.dump(result, f, indent=2)
    return result


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Profile DeltaCodec encode/decode")
    parser.add_argument("--input", type=Path, required=True, help="Input rgb24 file")
    parser.add_argument("--out", type=Path, required=True, help="Output directory for profile")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    parser.add_argument("--backend", type=str, default=DEFAULT_BACKEND)
    parser.add_argument("--workers", type=int, default=None)
    args = parser.parse_args(argv)

    res = run_profile(args.input, args.out, args.width, args.height, args.backend, args.workers)
    print(json.dumps(res, indent=2))


if __name__ == "__main__":
    main()
