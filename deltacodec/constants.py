"""Constants for the DeltaCodec YUV420 + temporal-delta pipeline."""

DEFAULT_WIDTH = 384
DEFAULT_HEIGHT = 216

# RGB -> YUV (forward) coefficients, applied as written, in float64
Y_COEFFS = (0.299, 0.587, 0.114)
U_COEFFS = (-0.169, -0.331, 0.449)
V_COEFFS = (0.499, -0.418, -0.0813)
CHROMA_OFFSET = 128.0

# YUV -> RGB (inverse) coefficients
R_FROM_V = 1.402
G_FROM_U = 0.344
G_FROM_V = 0.714
B_FROM_U = 1.772

RLE_MAX_RUN = 255  # count is a single byte

BACKEND_NONE = 0
BACKEND_ZLIB = 1
BACKEND_LZMA = 2
BACKEND_DEFLATE = 3  # raw DEFLATE stream, no zlib header

BACKEND_NAMES = {
    BACKEND_NONE: "none",
    BACKEND_ZLIB: "zlib",
    BACKEND_LZMA: "lzma",
    BACKEND_DEFLATE: "deflate",
}
DEFAULT_BACKEND = "deflate"

ENCODED_YUV_NAME = "encoded.yuv"
ENCODED_BITSTREAM_NAME = "encoded.bin"
DECODED_YUV_NAME = "decoded.yuv"
DECODED_RGB_NAME = "decoded.rgb24"
