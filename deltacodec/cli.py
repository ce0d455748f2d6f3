"""Command-line entrypoints for DeltaCodec."""
from __future__ import annotations

import argparse

from .constants import BACKEND_NAMES, DEFAULT_BACKEND, DEFAULT_HEIGHT, DEFAULT_WIDTH
from .decoder import decode_to_files, roundtrip_files
from .encoder import encode_rgb24_file, encode_video_file
from .errors import CodecError
from .version import get_version_string


def _add_geometry_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="Frame width in pixels (even)")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT, help="Frame height in pixels (even)")


def _add_backend_args(parser: argparse.ArgumentParser, with_level: bool = True) -> None:
    parser.add_argument(
        "--backend",
        type=str,
        default=DEFAULT_BACKEND,
        choices=list(BACKEND_NAMES.values()),
        help="Entropy coder applied to the delta stream",
    )
    if with_level:
        parser.add_argument("--level", type=int, default=None, help="Backend compression level/preset")


def _add_compress_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Raw rgb24 input path, or - for stdin")
    parser.add_argument("output", help="Compressed bitstream path, or - for stdout")
    _add_geometry_args(parser)
    _add_backend_args(parser)
    parser.add_argument("--yuv-out", default=None, help="Also write the planar YUV420 frames here")
    parser.add_argument("--workers", type=int, default=None, help="Threads for color conversion")
    parser.add_argument("--max-frames", type=int, default=None, help="Limit number of frames processed")
    parser.add_argument("--strict", action="store_true", help="Fail on a trailing partial frame")
    parser.add_argument(
        "--video",
        action="store_true",
        help="Treat input as a video file readable by imageio (size taken from the video)",
    )


def _add_decompress_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Compressed bitstream path, or - for stdin")
    parser.add_argument("output", help="Decoded rgb24 output path, or - for stdout")
    _add_geometry_args(parser)
    _add_backend_args(parser, with_level=False)
    parser.add_argument("--yuv-out", default=None, help="Also write the decoded planar YUV420 frames here")
    parser.add_argument("--video-out", default=None, help="Also write the decoded frames as a video file")
    parser.add_argument("--fps", type=int, default=25, help="Frames per second for --video-out")


def _run_compress(args: argparse.Namespace) -> None:
    if args.video:
        encode_video_file(
            args.input,
            args.output,
            backend=args.backend,
            level=args.level,
            yuv_path=args.yuv_out,
            workers=args.workers,
            max_frames=args.max_frames,
        )
    else:
        encode_rgb24_file(
            args.input,
            args.output,
            width=args.width,
            height=args.height,
            backend=args.backend,
            level=args.level,
            yuv_path=args.yuv_out,
            workers=args.workers,
            max_frames=args.max_frames,
            strict=args.strict,
        )


def _run_decompress(args: argparse.Namespace) -> None:
    decode_to_files(
        args.input,
        args.output,
        width=args.width,
        height=args.height,
        backend=args.backend,
        yuv_path=args.yuv_out,
        video_path=args.video_out,
        fps=args.fps,
    )


def _run_roundtrip(args: argparse.Namespace) -> None:
    roundtrip_files(
        args.input,
        args.out_dir,
        width=args.width,
        height=args.height,
        backend=args.backend,
        level=args.level,
        workers=args.workers,
        max_frames=args.max_frames,
        strict=args.strict,
    )


def _guarded(func, args: argparse.Namespace) -> None:
    try:
        func(args)
    except CodecError as exc:
        raise SystemExit(f"error: {exc}") from exc


def compress_main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="DeltaCodec encoder (rgb24 -> YUV420 deltas)")
    _add_compress_args(parser)
    _guarded(_run_compress, parser.parse_args(argv))


def decompress_main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="DeltaCodec decoder (bitstream -> rgb24)")
    _add_decompress_args(parser)
    _guarded(_run_decompress, parser.parse_args(argv))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="DeltaCodec (YUV420 + temporal delta)")
    parser.add_argument("--version", action="version", version=get_version_string())
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_enc = sub.add_parser("compress", help="Compress rgb24 frames to a bitstream")
    _add_compress_args(p_enc)

    p_dec = sub.add_parser("decompress", help="Decompress a bitstream to rgb24 frames")
    _add_decompress_args(p_dec)

    p_rt = sub.add_parser("roundtrip", help="Encode and decode, writing every intermediate file")
    p_rt.add_argument("input", help="Raw rgb24 input path, or - for stdin")
    p_rt.add_argument("out_dir", help="Directory for encoded.yuv, encoded.bin, decoded.yuv, decoded.rgb24")
    _add_geometry_args(p_rt)
    _add_backend_args(p_rt)
    p_rt.add_argument("--workers", type=int, default=None)
    p_rt.add_argument("--max-frames", type=int, default=None)
    p_rt.add_argument("--strict", action="store_true")

    args = parser.parse_args(argv)

    if args.cmd == "compress":
        _guarded(_run_compress, args)
    elif args.cmd == "decompress":
        _guarded(_run_decompress, args)
    elif args.cmd == "roundtrip":
        _guarded(_run_roundtrip, args)
    else:
        parser.error("Unknown command")


if __name__ == "__main__":
    main()
