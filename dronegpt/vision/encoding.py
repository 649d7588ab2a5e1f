# dronegpt/vision/encoding.py
"""
Raw camera buffers to JPEG.

The camera stream hands over planar YUV or packed RGB(A) bytes; OpenCV does
the colour conversion and the compression.
"""
import base64
import logging
from enum import Enum

import cv2
import numpy as np

from .exceptions import FrameDecodeError, UnsupportedFrameFormatError

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 100


class FrameFormat(Enum):
    NV21 = "NV21"
    I420 = "I420"
    RGBA_8888 = "RGBA_8888"
    RGB_888 = "RGB_888"


def _yuv420_shape(width: int, height: int) -> tuple:
    return (height * 3 // 2, width)


# format -> (buffer size, array shape, cv2 conversion code)
_CONVERSIONS = {
    FrameFormat.NV21: (lambda w, h: w * h * 3 // 2, _yuv420_shape, cv2.COLOR_YUV2BGR_NV21),
    FrameFormat.I420: (lambda w, h: w * h * 3 // 2, _yuv420_shape, cv2.COLOR_YUV2BGR_I420),
    FrameFormat.RGBA_8888: (lambda w, h: w * h * 4, lambda w, h: (h, w, 4), cv2.COLOR_RGBA2BGR),
    FrameFormat.RGB_888: (lambda w, h: w * h * 3, lambda w, h: (h, w, 3), cv2.COLOR_RGB2BGR),
}


def encode_frame(raw: bytes, frame_format: FrameFormat, width: int, height: int,
                 quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """
    Converts one raw frame to JPEG bytes.

    Args:
        raw: The pixel buffer, exactly one frame long.
        frame_format: Pixel layout of ``raw``.
        width, height: Frame dimensions in pixels.
        quality: JPEG quality, 0-100.

    Raises:
        UnsupportedFrameFormatError: for formats outside FrameFormat.
        FrameDecodeError: if the buffer size does not match the dimensions
            or OpenCV refuses the frame.
    """
    try:
        frame_format = FrameFormat(frame_format)
        expected_size, shape, conversion = _CONVERSIONS[frame_format]
    except (KeyError, ValueError):
        raise UnsupportedFrameFormatError(frame_format)

    if width <= 0 or height <= 0:
        raise FrameDecodeError(f"Invalid frame dimensions {width}x{height}")

    pixels = np.frombuffer(raw, dtype=np.uint8)
    if pixels.size != expected_size(width, height):
        raise FrameDecodeError(
            f"{frame_format} frame of {width}x{height} needs {expected_size(width, height)} bytes, got {pixels.size}"
        )

    try:
        bgr = cv2.cvtColor(pixels.reshape(shape(width, height)), conversion)
        ok, encoded = cv2.imencode('.jpg', bgr, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    except cv2.error as e:
        raise FrameDecodeError(f"OpenCV could not convert frame: {e}") from e
    if not ok:
        raise FrameDecodeError("JPEG encoding failed")

    jpeg = encoded.tobytes()
    logger.debug(f"Encoded {frame_format.value} {width}x{height} frame to {len(jpeg):,} JPEG bytes")
    return jpeg


def to_data_url(jpeg: bytes) -> str:
    """Embeds JPEG bytes as a data URL for the model request."""
    return f"data:image/jpeg;base64,{base64.b64encode(jpeg).decode('utf-8')}"
