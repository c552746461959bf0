"""Emitters: write frames to an output stream in the text protocol."""

import sys
from typing import Optional, TextIO

from ..codecs.text import FlowTextCodec
from .frame import RasterizedFrame, VectorsLike


class ArrangedEmitter:
    """Write rasterized frames as arranged blocks, each at most once.

    Header timestamps are relative to the first frame this emitter ever
    writes; that reference is fixed for the emitter's lifetime.
    """

    def __init__(self, stream: Optional[TextIO] = None, occupancy: bool = False):
        self.stream = stream if stream is not None else sys.stdout
        self.occupancy = occupancy
        self.first_pts: Optional[int] = None
        self.emitted = 0

    def emit(self, frame: RasterizedFrame) -> bool:
        """Write ``frame`` unless it was already written.

        Returns:
            True if the frame was written by this call
        """
        if frame.printed:
            return False

        if self.first_pts is None:
            self.first_pts = frame.pts

        self.stream.write(FlowTextCodec.encode_arranged(frame, self.first_pts, self.occupancy))
        frame.printed = True
        self.emitted += 1
        return True


class RawEmitter:
    """Write decoder vector lists as raw blocks. Holds no frame state."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self.emitted = 0

    def emit(self, frame_index: int, pts: int, pict_type: str, vectors: VectorsLike) -> None:
        self.stream.write(FlowTextCodec.encode_raw(frame_index, pts, pict_type, vectors))
        self.emitted += 1
