"""mpegflow pipeline: video decoding and run orchestration."""

from .decoder import DecodedFrame, VideoDecoder, pict_type_char
from .runner import FlowRunner

__all__ = ["DecodedFrame", "VideoDecoder", "pict_type_char", "FlowRunner"]
