"""mpegflow codecs: text protocol encoding/decoding."""

from .text import FlowTextCodec

__all__ = ["FlowTextCodec"]
