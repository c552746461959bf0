"""mpegflow: dense motion vector grids from compressed video.

Main components:
- core: rasterization, gap filling, temporal interpolation, emission
- codecs: text protocol encoding/decoding
- pipeline: PyAV decoding and run orchestration
"""

from .errors import (
    MpegFlowError,
    ConfigError,
    VideoOpenError,
    NoVideoStreamError,
    DecodeError,
    ProtocolError,
)
from .core import (
    FlowConfig,
    RasterizedFrame,
    rasterize,
    rasterize_vectors,
    fill_gaps,
    maybe_fill_gaps,
    ArrangedEmitter,
    RawEmitter,
    FrameBuffer,
)
from .codecs import FlowTextCodec
from .pipeline import DecodedFrame, VideoDecoder, FlowRunner

__version__ = "0.1.0"
__all__ = [
    # Errors
    "MpegFlowError",
    "ConfigError",
    "VideoOpenError",
    "NoVideoStreamError",
    "DecodeError",
    "ProtocolError",
    # Core
    "FlowConfig",
    "RasterizedFrame",
    "rasterize",
    "rasterize_vectors",
    "fill_gaps",
    "maybe_fill_gaps",
    "ArrangedEmitter",
    "RawEmitter",
    "FrameBuffer",
    # Codecs
    "FlowTextCodec",
    # Pipeline
    "DecodedFrame",
    "VideoDecoder",
    "FlowRunner",
]
