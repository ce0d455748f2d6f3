"""YUV420 chroma subsampling + temporal delta video codec."""
from .constants import (
    BACKEND_DEFLATE,
    BACKEND_LZMA,
    BACKEND_NONE,
    BACKEND_ZLIB,
    DEFAULT_BACKEND,
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    RLE_MAX_RUN,
)
from .errors import (
    CodecError,
    CompressionBackendError,
    DecompressionBackendError,
    IncompleteFrameError,
    InvalidDimensionsError,
    RunLengthError,
    TruncatedStreamError,
)
from .models import DecodeResult, EncodeResult, FrameGeometry, StageSizes
from .color import rgb_to_yuv, rgb_to_yuv420, subsample_chroma, yuv420_to_rgb
from .predict import delta_decode, delta_encode, predict_frame, reconstruct_frame
from .format import EntropyCoder, get_coder, rle_decode, rle_encode
from .encoder import encode_frames, encode_rgb24_file, encode_video_file
from .decoder import decode_bitstream, decode_to_files, roundtrip_files, split_frames
from .version import __version__, get_version_string, get_build_meta

__all__ = [
    "BACKEND_DEFLATE",
    "BACKEND_LZMA",
    "BACKEND_NONE",
    "BACKEND_ZLIB",
    "DEFAULT_BACKEND",
    "DEFAULT_HEIGHT",
    "DEFAULT_WIDTH",
    "RLE_MAX_RUN",
    "CodecError",
    "CompressionBackendError",
    "DecompressionBackendError",
    "IncompleteFrameError",
    "InvalidDimensionsError",
    "RunLengthError",
    "TruncatedStreamError",
    "DecodeResult",
    "EncodeResult",
    "FrameGeometry",
    "StageSizes",
    "rgb_to_yuv",
    "rgb_to_yuv420",
    "subsample_chroma",
    "yuv420_to_rgb",
    "delta_decode",
    "delta_encode",
    "predict_frame",
    "reconstruct_frame",
    "EntropyCoder",
    "get_coder",
    "rle_decode",
    "rle_encode",
    "encode_frames",
    "encode_rgb24_file",
    "encode_video_file",
    "decode_bitstream",
    "decode_to_files",
    "roundtrip_files",
    "split_frames",
    "get_version_string",
    "get_build_meta",
    "__version__",
]
