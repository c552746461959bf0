"""mpegflow core: rasterization, gap filling, buffering and emission."""

from .config import FlowConfig
from .frame import (
    RasterizedFrame,
    as_motion_vectors,
    grid_shape,
    trunc_half,
    ORIGIN_VIDEO,
    ORIGIN_INTERPOLATED,
    ORIGIN_DUMMY,
)
from .rasterize import rasterize, rasterize_vectors
from .fill import fill_gaps, maybe_fill_gaps
from .emitter import ArrangedEmitter, RawEmitter
from .buffer import FrameBuffer

__all__ = [
    "FlowConfig",
    "RasterizedFrame",
    "as_motion_vectors",
    "grid_shape",
    "trunc_half",
    "ORIGIN_VIDEO",
    "ORIGIN_INTERPOLATED",
    "ORIGIN_DUMMY",
    "rasterize",
    "rasterize_vectors",
    "fill_gaps",
    "maybe_fill_gaps",
    "ArrangedEmitter",
    "RawEmitter",
    "FrameBuffer",
]
