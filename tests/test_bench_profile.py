from __future__ import annotations

import json
import tracemalloc

import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

from deltacodec import bench
from deltacodec.errors import InvalidDimensionsError
from deltacodec.profile import run_profile


def test_bench_writes_reports(tmp_path, rgb_frames, geometry):
    clips = tmp_path / "clips"
    clips.mkdir()
    (clips / "a.rgb24").write_bytes(rgb_frames.tobytes())
    out = tmp_path / "bench"

    bench.main([
        "--clips", str(clips),
        "--out", str(out),
        "--width", str(geometry.width),
        "--height", str(geometry.height),
        "--backends", "deflate,lzma",
    ])

    data = json.loads((out / "results.json").read_text(encoding="utf-8"))
    assert [r["backend"] for r in data["results"]] == ["deflate", "lzma"]
    assert all(r["frames"] == 3 for r in data["results"])
    assert "| deflate | a.rgb24 |" in (out / "report.md").read_text(encoding="utf-8")
    assert (out / "plots" / "stage_sizes.png").exists()
    assert (out / "plots" / "speed.png").exists()


def test_profile_run(tmp_path, rgb_frames, geometry):
    src = tmp_path / "clip.rgb24"
    src.write_bytes(rgb_frames.tobytes())
    res = run_profile(src, tmp_path / "prof", geometry.width, geometry.height)
    assert res["frames"] == 3
    assert res["tracemalloc_peak_bytes_encode"] > 0
    assert (tmp_path / "prof" / "profile.json").exists()
    assert (tmp_path / "prof" / "recon.rgb24").stat().st_size == rgb_frames.nbytes


def test_bench_lossless_clip_writes_valid_json(tmp_path, geometry):
    clips = tmp_path / "clips"
    clips.mkdir()
    black = np.zeros((2, geometry.height, geometry.width, 3), dtype=np.uint8)
    (clips / "black.rgb24").write_bytes(black.tobytes())

    res = bench.bench_clip(clips / "black.rgb24", geometry, "deflate")
    assert res.psnr is None

    out = tmp_path / "bench"
    bench.write_results(out, [res], {})

    def reject(token):
        raise ValueError(f"non-standard JSON constant {token}")

    data = json.loads((out / "results.json").read_text(encoding="utf-8"), parse_constant=reject)
    assert data["results"][0]["psnr"] is None


def test_profile_stops_tracing_on_failure(tmp_path, rgb_frames):
    src = tmp_path / "clip.rgb24"
    src.write_bytes(rgb_frames.tobytes())
    with pytest.raises(InvalidDimensionsError):
        run_profile(src, tmp_path / "prof", 7, 6)
    assert not tracemalloc.is_tracing()
