"""dronegpt/vision/exceptions.py"""

class VisionError(Exception):
    """Base exception for camera frame handling."""
    pass

class UnsupportedFrameFormatError(VisionError):
    """Raised for pixel formats the encoder cannot convert."""
    def __init__(self, frame_format, message="Unsupported frame format"):
        self.frame_format = frame_format
        super().__init__(f"{message}: {frame_format}")

class FrameDecodeError(VisionError):
    """Raised when a raw buffer does not match its declared dimensions."""
    pass
