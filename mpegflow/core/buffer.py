"""Frame buffer: holds frames without motion vectors until they can be
interpolated from their temporal neighbors or must be emitted as-is."""

import logging
from collections import deque
from typing import Deque, Dict, Optional

from .emitter import ArrangedEmitter
from .frame import RasterizedFrame


logger = logging.getLogger(__name__)


class FrameBuffer:
    """Sliding window over rasterized frames awaiting an emission decision.

    Frames carrying motion vectors are emitted as soon as they arrive.
    Frames without vectors (typically intra-coded pictures) are held. When
    exactly one such frame sits between two frames with vectors, its grid
    is replaced by the mean of the two and it is emitted as
    "interpolated"; otherwise held frames are emitted unmodified.

    Lifecycle: one buffer per run; ``push`` every accepted frame in decode
    order, then ``flush`` once at end of stream.

    Example:
        buffer = FrameBuffer(ArrangedEmitter(sys.stdout))
        for frame, has_vectors in frames:
            buffer.push(frame, has_vectors)
        buffer.flush()
    """

    WINDOW = 2

    def __init__(self, emitter: ArrangedEmitter, fill_pts_gaps: bool = False, pts_step: int = 1):
        """
        Args:
            emitter: destination for emitted frames
            fill_pts_gaps: hold a "dummy" frame for every timestamp skipped
                between consecutive frames
            pts_step: pts distance between consecutive frames (the frame
                duration in time-base ticks); dummies are spaced by it
        """
        if pts_step < 1:
            raise ValueError(f"pts_step must be >= 1, got {pts_step}")
        self.emitter = emitter
        self.fill_pts_gaps = fill_pts_gaps
        self.pts_step = pts_step
        self.pending: Deque[RasterizedFrame] = deque()
        self.closed = False
        self._stats = {"pushed": 0, "emitted": 0, "interpolated": 0, "dummies": 0}

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def _emit(self, frame: RasterizedFrame) -> None:
        if self.emitter.emit(frame):
            self._stats["emitted"] += 1

    def _hold(self, frame: RasterizedFrame) -> None:
        self.pending.append(frame)
        # Interpolation only ever applies to a window of exactly two frames
        # whose head carries vectors; anything older can go out as-is.
        while len(self.pending) > self.WINDOW:
            self._emit(self.pending.popleft())

    def _insert_dummies(self, frame: RasterizedFrame) -> None:
        if not self.pending:
            return
        for pts in range(self.pending[-1].pts + self.pts_step, frame.pts, self.pts_step):
            self._hold(RasterizedFrame.dummy(pts, frame.grid_step, frame.shape))
            self._stats["dummies"] += 1

    def push(self, frame: RasterizedFrame, has_vectors: Optional[bool] = None) -> None:
        """Feed the next accepted frame.

        Args:
            frame: rasterized (and gap-filled) frame
            has_vectors: whether the decoder supplied any motion vector for
                it; defaults to ``not frame.empty``
        """
        if self.closed:
            raise RuntimeError("FrameBuffer already flushed")
        if has_vectors is None:
            has_vectors = not frame.empty

        self._stats["pushed"] += 1
        if self.fill_pts_gaps:
            self._insert_dummies(frame)

        if not has_vectors:
            self._hold(frame)
            return

        if len(self.pending) == self.WINDOW and not self.pending[0].empty:
            anchor, gap = self.pending
            gap.interpolate_from(anchor, frame)
            self._stats["interpolated"] += 1
            logger.debug("Interpolated frame pts=%d between pts=%d and pts=%d",
                         gap.pts, anchor.pts, frame.pts)
            # The anchor carries vectors, so it went out when it was pushed.
            self._emit(gap)
        else:
            for held in self.pending:
                self._emit(held)

        self.pending.clear()
        self.pending.append(frame)
        self._emit(frame)

    def flush(self) -> None:
        """End of stream: emit everything still held, in order."""
        for held in self.pending:
            self._emit(held)
        self.pending.clear()
        self.closed = True
