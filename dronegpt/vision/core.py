# dronegpt/vision/core.py

import logging
from typing import Optional

from .encoding import DEFAULT_JPEG_QUALITY, FrameFormat, encode_frame

logger = logging.getLogger(__name__)


class VisionFeed:
    """
    Keeps only the most recent camera frame, as JPEG bytes.

    Frames arrive far faster than the control loop consumes them, so each
    new frame simply replaces the previous one.
    """

    def __init__(self, jpeg_quality: int = DEFAULT_JPEG_QUALITY):
        self.jpeg_quality = jpeg_quality
        self._image: Optional[bytes] = None
        self.frames_received = 0

    def update_frame(self, raw: bytes, frame_format: FrameFormat, width: int, height: int) -> None:
        """Encodes the newest frame and discards the previous image."""
        self._image = encode_frame(raw, frame_format, width, height, quality=self.jpeg_quality)
        self.frames_received += 1

    def snapshot(self) -> Optional[bytes]:
        """The latest JPEG, or None if no frame has arrived yet."""
        return self._image

    def attach(self, stream) -> None:
        """
        Registers this feed as a frame listener on a camera stream.

        Args:
            stream: Any object with ``add_frame_listener(callback)`` whose
                callback is invoked as ``callback(raw, frame_format, width, height)``.
        """
        stream.add_frame_listener(self.update_frame)
        logger.info("Vision feed attached to camera stream.")
