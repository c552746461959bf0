"""Frame data model: motion vectors and rasterized displacement grids."""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

import numpy as np


ORIGIN_VIDEO = "video"
ORIGIN_INTERPOLATED = "interpolated"
ORIGIN_DUMMY = "dummy"

# Occupancy markers
EMPTY_CELL = 0
OBSERVED_CELL = 1  # written from a decoder vector
FILLED_CELL = 2  # written by gap filling

UNKNOWN_PICT_TYPE = "?"

VECTOR_FIELDS = ("src_x", "src_y", "dst_x", "dst_y")

VectorsLike = Union[None, np.ndarray, Sequence[Sequence[int]]]


def as_motion_vectors(vectors: VectorsLike) -> np.ndarray:
    """Normalize motion vectors to an [N, 4] int32 array.

    Columns are ``src_x, src_y, dst_x, dst_y``. Accepts ``None``, a
    sequence of 4-tuples, a plain [N, 4] array, or a structured array
    with named fields (as exported by FFmpeg side data).
    """
    if vectors is None:
        return np.zeros((0, 4), dtype=np.int32)

    if isinstance(vectors, np.ndarray) and vectors.dtype.names:
        missing = [name for name in VECTOR_FIELDS if name not in vectors.dtype.names]
        if missing:
            raise ValueError(f"Motion vector array lacks fields: {missing}")
        if len(vectors) == 0:
            return np.zeros((0, 4), dtype=np.int32)
        return np.stack([vectors[name] for name in VECTOR_FIELDS], axis=1).astype(np.int32)

    arr = np.asarray(vectors, dtype=np.int32)
    if arr.size == 0:
        return np.zeros((0, 4), dtype=np.int32)
    if arr.ndim != 2 or arr.shape[1] != 4:
        raise ValueError(f"Expected [N, 4] motion vectors, got shape {arr.shape}")
    return arr


def displacements(vectors: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Return (dx, dy) = destination - source for [N, 4] vectors."""
    return vectors[:, 2] - vectors[:, 0], vectors[:, 3] - vectors[:, 1]


def trunc_half(value):
    """Halve an integer (or integer array) rounding toward zero.

    Python's ``//`` floors, so -3 // 2 == -2; grid averages must truncate
    like C integer division instead (-3 / 2 == -1).
    """
    if isinstance(value, np.ndarray):
        return (np.sign(value) * (np.abs(value) // 2)).astype(value.dtype)
    return -(-value // 2) if value < 0 else value // 2


def grid_shape(width: int, height: int, step: int, max_size: int = 512) -> Tuple[int, int]:
    """Grid (rows, cols) for a frame size, capped at ``max_size``."""
    return min(height // step, max_size), min(width // step, max_size)


@dataclass(eq=False)
class RasterizedFrame:
    """One frame's displacement grid plus metadata.

    Attributes:
        pts: decoder presentation timestamp
        frame_index: 1-based decode index (-1 for placeholder frames)
        pict_type: single-character picture type
        grid_step: pixels per grid cell (8 or 16)
        shape: (rows, cols)
        origin: "video" | "interpolated" | "dummy"
        dx, dy: [rows, cols] int32 displacement
        occupancy: [rows, cols] uint8 markers (0 empty, 1 observed, 2 filled)
        empty: True until at least one cell has been written
        printed: True once emitted; a frame is emitted at most once
    """
    pts: int
    frame_index: int
    pict_type: str
    grid_step: int
    shape: Tuple[int, int]
    origin: str = ORIGIN_VIDEO
    dx: Optional[np.ndarray] = field(default=None, repr=False)
    dy: Optional[np.ndarray] = field(default=None, repr=False)
    occupancy: Optional[np.ndarray] = field(default=None, repr=False)
    empty: bool = True
    printed: bool = False

    def __post_init__(self):
        self.shape = (int(self.shape[0]), int(self.shape[1]))
        if self.dx is None:
            self.dx = np.zeros(self.shape, dtype=np.int32)
        if self.dy is None:
            self.dy = np.zeros(self.shape, dtype=np.int32)
        if self.occupancy is None:
            self.occupancy = np.zeros(self.shape, dtype=np.uint8)

    @property
    def rows(self) -> int:
        return self.shape[0]

    @property
    def cols(self) -> int:
        return self.shape[1]

    @classmethod
    def blank(cls, pts: int, frame_index: int, pict_type: str, grid_step: int,
              shape: Tuple[int, int]) -> "RasterizedFrame":
        """Zeroed, not yet written frame for a decoded picture."""
        return cls(
            pts=pts,
            frame_index=frame_index,
            pict_type=pict_type,
            grid_step=grid_step,
            shape=shape,
            origin=ORIGIN_VIDEO,
        )

    @classmethod
    def dummy(cls, pts: int, grid_step: int, shape: Tuple[int, int]) -> "RasterizedFrame":
        """Placeholder frame for a timestamp the decoder never produced."""
        return cls(
            pts=pts,
            frame_index=-1,
            pict_type=UNKNOWN_PICT_TYPE,
            grid_step=grid_step,
            shape=shape,
            origin=ORIGIN_DUMMY,
        )

    def interpolate_from(self, prev: "RasterizedFrame", nxt: "RasterizedFrame") -> None:
        """Replace the grid with the truncated cell-wise mean of two neighbors.

        Occupancy is left as it was.
        """
        self.dx = trunc_half(prev.dx + nxt.dx)
        self.dy = trunc_half(prev.dy + nxt.dy)
        self.empty = False
        self.origin = ORIGIN_INTERPOLATED
