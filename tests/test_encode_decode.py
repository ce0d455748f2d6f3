from __future__ import annotations

import math

import numpy as np
import pytest

from deltacodec import (
    TruncatedStreamError,
    decode_bitstream,
    decode_to_files,
    encode_frames,
    encode_rgb24_file,
    roundtrip_files,
    split_frames,
)
from deltacodec.color import rgb_to_yuv420, yuv420_to_rgb
from deltacodec.format import get_coder, rle_encode
from deltacodec.models import FrameGeometry


def test_equal_frames_give_zero_delta():
    g = FrameGeometry(4, 2)
    frame = np.zeros((2, 4, 3), dtype=np.uint8)
    frame[:, :] = (100, 150, 200)
    result = encode_frames([frame, frame.copy()], g)

    assert result.frame_count == 2
    assert np.array_equal(result.deltas[0], result.planar[0])
    assert not result.deltas[1].any()
    n = g.planar_size
    assert len(rle_encode(result.deltas[1])) // 2 == math.ceil(n / 255)
    assert result.sizes.rle == n + 2 * math.ceil(n / 255)


def test_stage_sizes(rgb_frames, geometry):
    result = encode_frames(rgb_frames, geometry)
    sizes = result.sizes
    assert sizes.raw == 3 * geometry.raw_size
    assert sizes.yuv420 == 3 * geometry.planar_size
    assert sizes.entropy == len(result.bitstream)
    assert sizes.ratio("yuv420") == pytest.approx(50.0)
    lines = sizes.report_lines()
    assert lines[0] == f"Raw size: {sizes.raw} bytes"
    assert lines[1].startswith("YUV420P size:") and "50.00% original size" in lines[1]
    assert lines[2].startswith("RLE size:")
    assert lines[3].startswith("DEFLATE size:")


def test_skip_rle_measurement(rgb_frames, geometry):
    result = encode_frames(rgb_frames, geometry, measure_rle=False)
    assert result.sizes.rle is None
    assert len(result.sizes.report_lines()) == 3
    with pytest.raises(ValueError):
        result.sizes.ratio("rle")


@pytest.mark.parametrize("backend", ["none", "zlib", "lzma", "deflate"])
def test_encode_decode_roundtrip(rgb_frames, geometry, backend):
    coder = get_coder(backend)
    encoded = encode_frames(rgb_frames, geometry, coder=coder)
    decoded = decode_bitstream(encoded.bitstream, geometry, coder=coder)

    assert decoded.frame_count == 3
    assert np.array_equal(decoded.planar, encoded.planar)
    assert decoded.rgb.shape == rgb_frames.shape
    for original, rgb in zip(rgb_frames, decoded.rgb):
        expected = yuv420_to_rgb(rgb_to_yuv420(original, geometry), geometry)
        assert np.array_equal(rgb, expected)


def test_two_frame_small_delta_black_scene():
    g = FrameGeometry(6, 4)
    key = np.zeros((4, 6, 3), dtype=np.uint8)
    nxt = key.copy()
    nxt[0:2, 0:2] = (2, 4, 2)
    encoded = encode_frames([key, nxt], g)
    decoded = decode_bitstream(encoded.bitstream, g)

    assert np.array_equal(decoded.rgb[0], key)
    # only the changed 2x2 block differs, and only by the documented rounding
    diff = np.abs(decoded.rgb[1].astype(int) - nxt.astype(int))
    assert diff[2:, :].max() == 0
    assert diff[:, 2:].max() == 0
    assert diff.max() <= 2


def test_parallel_conversion_matches_sequential(rgb_frames, geometry):
    seq = encode_frames(rgb_frames, geometry)
    par = encode_frames(list(rgb_frames), geometry, workers=4)
    assert np.array_equal(seq.planar, par.planar)
    assert seq.bitstream == par.bitstream


def test_no_frames(geometry):
    result = encode_frames([], geometry)
    assert result.frame_count == 0
    decoded = decode_bitstream(result.bitstream, geometry)
    assert decoded.frame_count == 0
    assert decoded.rgb.shape == (0, geometry.height, geometry.width, 3)


def test_split_frames_truncated(geometry):
    assert split_frames(bytes(geometry.planar_size * 2), geometry).shape == (2, geometry.planar_size)
    with pytest.raises(TruncatedStreamError):
        split_frames(bytes(geometry.planar_size * 2 + 1), geometry)


def test_decode_truncated_stream(rgb_frames, geometry):
    coder = get_coder("deflate")
    encoded = encode_frames(rgb_frames, geometry, coder=coder)
    short = coder.compress(coder.decompress(encoded.bitstream)[:-5])
    with pytest.raises(TruncatedStreamError):
        decode_bitstream(short, geometry, coder=coder)


def test_file_roundtrip(tmp_path, rgb_frames, geometry, capsys):
    src = tmp_path / "in.rgb24"
    src.write_bytes(rgb_frames.tobytes())
    bitstream = tmp_path / "out" / "video.bin"
    yuv = tmp_path / "enc.yuv"

    encoded = encode_rgb24_file(
        src, bitstream, width=geometry.width, height=geometry.height, yuv_path=yuv
    )
    out = capsys.readouterr().out
    assert "Frames=3" in out
    assert "Raw size:" in out
    assert bitstream.read_bytes() == encoded.bitstream
    assert yuv.stat().st_size == 3 * geometry.planar_size

    rgb_out = tmp_path / "dec.rgb24"
    decoded = decode_to_files(bitstream, rgb_out, width=geometry.width, height=geometry.height)
    assert rgb_out.read_bytes() == decoded.rgb.tobytes()
    assert rgb_out.stat().st_size == 3 * geometry.raw_size


def test_roundtrip_files_writes_artifacts(tmp_path, rgb_frames, geometry):
    src = tmp_path / "in.rgb24"
    src.write_bytes(rgb_frames.tobytes())
    out_dir = tmp_path / "rt"
    encoded, decoded = roundtrip_files(
        src, out_dir, width=geometry.width, height=geometry.height, backend="lzma"
    )
    assert (out_dir / "encoded.yuv").read_bytes() == encoded.planar.tobytes()
    assert (out_dir / "decoded.yuv").read_bytes() == (out_dir / "encoded.yuv").read_bytes()
    assert (out_dir / "encoded.bin").read_bytes() == encoded.bitstream
    assert (out_dir / "decoded.rgb24").read_bytes() == decoded.rgb.tobytes()


def test_encode_video_file(monkeypatch, tmp_path, rgb_frames, geometry):
    from deltacodec.encoder import encode_video_file

    monkeypatch.setattr("deltacodec.encoder.load_video_rgb", lambda path, max_frames=None: rgb_frames)
    captured = {}

    def fake_save(frames, path, fps=30):
        captured["frames"] = frames.copy()
        captured["fps"] = fps

    monkeypatch.setattr("deltacodec.decoder.save_video_from_rgb", fake_save)

    bitstream = tmp_path / "clip.bin"
    encoded = encode_video_file("clip.mp4", bitstream)
    assert encoded.geometry == geometry

    decode_to_files(
        bitstream,
        tmp_path / "clip.rgb24",
        width=geometry.width,
        height=geometry.height,
        video_path=tmp_path / "clip.mp4",
        fps=12,
    )
    assert captured["fps"] == 12
    assert captured["frames"].shape == rgb_frames.shape
