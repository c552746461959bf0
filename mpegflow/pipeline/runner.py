"""FlowRunner: drives decoded frames through rasterization, buffering and output."""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, TextIO, Union

from tqdm import tqdm

from ..core import (
    ArrangedEmitter,
    FlowConfig,
    FrameBuffer,
    RawEmitter,
    grid_shape,
    maybe_fill_gaps,
    rasterize_vectors,
)
from .decoder import DecodedFrame, VideoDecoder


logger = logging.getLogger(__name__)


class FlowRunner:
    """Convert a stream of decoded frames into protocol output.

    Frames whose timestamp does not exceed the last accepted one are
    dropped before any processing; they still consume a frame index.
    """

    def __init__(self, config: Optional[FlowConfig] = None, stream: Optional[TextIO] = None):
        self.config = (config or FlowConfig()).validate()
        self.stream = stream if stream is not None else sys.stdout

    def run(self, frames: Iterable[DecodedFrame], width: int, height: int,
            pts_step: int = 1) -> Dict[str, Any]:
        """Process every frame, then flush buffered output.

        If iterating ``frames`` raises, nothing held back is flushed and the
        exception propagates.

        Args:
            frames: decoded frames in decode order
            width: frame width in pixels
            height: frame height in pixels
            pts_step: frame duration in pts units, spacing for dummy frames

        Returns:
            dict with run statistics
        """
        cfg = self.config
        step = cfg.grid_step
        shape = grid_shape(width, height, step, cfg.max_grid_size)

        raw_emitter = RawEmitter(self.stream) if cfg.raw else None
        buffer = None
        if not cfg.raw:
            buffer = FrameBuffer(ArrangedEmitter(self.stream, cfg.occupancy), cfg.fill_pts_gaps, pts_step)

        results = {"decoded": 0, "skipped": 0, "emitted": 0, "interpolated": 0, "dummies": 0}
        prev_pts = None
        frame_index = 0

        iterator = tqdm(frames, desc="Decoding", unit="frame", file=sys.stderr) if cfg.progress else frames
        for decoded in iterator:
            frame_index += 1
            results["decoded"] += 1

            if prev_pts is not None and decoded.pts <= prev_pts:
                results["skipped"] += 1
                if not cfg.quiet:
                    logger.warning("Skipping frame %d (frame with pts %d already processed).",
                                   frame_index, decoded.pts)
                continue

            if raw_emitter is not None:
                raw_emitter.emit(frame_index, decoded.pts, decoded.pict_type, decoded.vectors)
            else:
                frame = rasterize_vectors(decoded.vectors, decoded.pts, frame_index,
                                          decoded.pict_type, step, shape)
                maybe_fill_gaps(frame, cfg.fill_passes)
                buffer.push(frame, has_vectors=decoded.has_vectors)

            prev_pts = decoded.pts

        if raw_emitter is not None:
            results["emitted"] = raw_emitter.emitted
        else:
            buffer.flush()
            stats = buffer.stats
            results["emitted"] = stats["emitted"]
            results["interpolated"] = stats["interpolated"]
            results["dummies"] = stats["dummies"]

        return results

    def run_video(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Decode a video file and process all of its frames."""
        with VideoDecoder(path, quiet=self.config.quiet) as decoder:
            return self.run(decoder, decoder.width, decoder.height, decoder.frame_duration)
