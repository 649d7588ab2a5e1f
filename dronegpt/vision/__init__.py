"""
vision - latest camera frame, encoded as JPEG, for dronegpt
"""

from .core import VisionFeed
from .encoding import FrameFormat, encode_frame, to_data_url
from .exceptions import VisionError, UnsupportedFrameFormatError, FrameDecodeError

__all__ = [
    'VisionFeed',
    'FrameFormat',
    'encode_frame',
    'to_data_url',
    'VisionError',
    'UnsupportedFrameFormatError',
    'FrameDecodeError',
]
