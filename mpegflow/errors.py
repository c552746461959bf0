"""Exception hierarchy for mpegflow."""


class MpegFlowError(Exception):
    """Base class for all errors reported by mpegflow."""


class ConfigError(MpegFlowError):
    """Invalid run configuration."""


class VideoOpenError(MpegFlowError):
    """Input could not be opened (missing, unreadable or not a container)."""


class NoVideoStreamError(MpegFlowError):
    """Container has no decodable video stream."""


class DecodeError(MpegFlowError):
    """Decoder failed while the stream was being read."""


class ProtocolError(MpegFlowError):
    """Text does not follow the mpegflow output protocol."""
