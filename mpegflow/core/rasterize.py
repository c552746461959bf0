"""Motion vector rasterization onto a fixed-step grid."""

from typing import Tuple

import numpy as np

from .frame import (
    OBSERVED_CELL,
    RasterizedFrame,
    VectorsLike,
    as_motion_vectors,
    displacements,
)


def _last_occurrence(flat_index: np.ndarray) -> np.ndarray:
    """Positions of the last occurrence of each distinct value."""
    reversed_index = flat_index[::-1]
    _, first_in_reversed = np.unique(reversed_index, return_index=True)
    return len(flat_index) - 1 - first_in_reversed


def rasterize(frame: RasterizedFrame, vectors: VectorsLike) -> RasterizedFrame:
    """Write motion vectors into a frame's grid in place.

    Each vector lands in the cell holding its destination point, clamped
    into the grid; destinations on or past the frame border go to the
    last row/column. When several vectors share a cell the last one in
    input order wins.

    Args:
        frame: target frame (normally freshly allocated)
        vectors: [N, 4] ``src_x, src_y, dst_x, dst_y`` or compatible

    Returns:
        the same frame, for chaining
    """
    vectors = as_motion_vectors(vectors)
    if len(vectors) == 0:
        return frame

    frame.empty = False

    rows, cols = frame.shape
    if rows == 0 or cols == 0:
        return frame

    step = frame.grid_step
    mv_dx, mv_dy = displacements(vectors)
    i = np.clip(vectors[:, 3] // step, 0, rows - 1)
    j = np.clip(vectors[:, 2] // step, 0, cols - 1)

    keep = _last_occurrence(i * cols + j)
    i, j = i[keep], j[keep]

    frame.dx[i, j] = mv_dx[keep]
    frame.dy[i, j] = mv_dy[keep]
    frame.occupancy[i, j] = OBSERVED_CELL
    return frame


def rasterize_vectors(
    vectors: VectorsLike,
    pts: int,
    frame_index: int,
    pict_type: str,
    grid_step: int,
    shape: Tuple[int, int],
) -> RasterizedFrame:
    """Allocate a video frame and rasterize vectors into it."""
    frame = RasterizedFrame.blank(pts, frame_index, pict_type, grid_step, shape)
    return rasterize(frame, vectors)
