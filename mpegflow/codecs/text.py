"""Line-oriented text protocol for rasterized and raw motion vectors."""

from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import numpy as np

from ..core.frame import RasterizedFrame, as_motion_vectors, displacements
from ..errors import ProtocolError


class FlowTextCodec:
    """Encode/decode frame blocks of the mpegflow text protocol.

    Arranged block::

        # pts=<rel pts> frame_index=<i> pict_type=<c> output_type=arranged shape=<R>x<C> origin=<o>
        <rows lines of dx, each value in a 4-character field>
        <rows lines of dy>
        <rows lines of occupancy, only with --occupancy>

    ``R`` is the number of body lines (2 or 3 times the grid rows).

    Raw block::

        # pts=<pts> frame_index=<i> pict_type=<c> output_type=raw shape=<N>x4
        <dst_x>\\t<dst_y>\\t<dx>\\t<dy>   (vectors with non-zero displacement only)

    ``N`` counts every vector, including the zero-displacement ones that
    are not written.
    """

    FIELD_WIDTH = 4
    ARRANGED = "arranged"
    RAW = "raw"
    INT_FIELDS = ("pts", "frame_index")

    @classmethod
    def encode_arranged(
        cls,
        frame: RasterizedFrame,
        first_pts: int = 0,
        occupancy: bool = False,
    ) -> str:
        """Encode a rasterized frame as an arranged block.

        Args:
            frame: frame to encode
            first_pts: pts of the first frame of the run; header pts is relative to it
            occupancy: append the occupancy grid

        Returns:
            block text, every line newline-terminated
        """
        grids = [frame.dx, frame.dy]
        if occupancy:
            grids.append(frame.occupancy)

        lines = [
            f"# pts={frame.pts - first_pts} frame_index={frame.frame_index} "
            f"pict_type={frame.pict_type} output_type={cls.ARRANGED} "
            f"shape={len(grids) * frame.rows}x{frame.cols} origin={frame.origin}"
        ]
        for grid in grids:
            for row in grid.tolist():
                lines.append("".join(f"{v:{cls.FIELD_WIDTH}d}" for v in row))
        return "\n".join(lines) + "\n"

    @classmethod
    def encode_raw(cls, frame_index: int, pts: int, pict_type: str, vectors) -> str:
        """Encode a decoder vector list as a raw block."""
        vectors = as_motion_vectors(vectors)
        lines = [
            f"# pts={pts} frame_index={frame_index} pict_type={pict_type} "
            f"output_type={cls.RAW} shape={len(vectors)}x4"
        ]
        mv_dx, mv_dy = displacements(vectors)
        for (_, _, dst_x, dst_y), dx, dy in zip(vectors.tolist(), mv_dx.tolist(), mv_dy.tolist()):
            if dx != 0 or dy != 0:
                lines.append(f"{dst_x}\t{dst_y}\t{dx}\t{dy}")
        return "\n".join(lines) + "\n"

    @classmethod
    def parse_header(cls, line: str) -> Dict[str, Any]:
        """Parse a ``# key=value ...`` header line.

        ``pts`` and ``frame_index`` become ints, ``shape`` a (rows, cols) tuple.
        """
        if not line.startswith("#"):
            raise ProtocolError(f"Not a header line: {line!r}")

        header: Dict[str, Any] = {}
        for token in line[1:].split():
            key, sep, value = token.partition("=")
            if not sep:
                raise ProtocolError(f"Malformed header field {token!r}")
            header[key] = value

        try:
            for key in cls.INT_FIELDS:
                if key in header:
                    header[key] = int(header[key])
            if "shape" in header:
                rows, cols = header["shape"].split("x")
                header["shape"] = (int(rows), int(cols))
        except ValueError as e:
            raise ProtocolError(f"Malformed header {line!r}: {e}") from e

        if "output_type" not in header or "shape" not in header:
            raise ProtocolError(f"Header lacks output_type or shape: {line!r}")
        return header

    @classmethod
    def _split_fixed(cls, line: str, cols: int) -> List[int]:
        width = cls.FIELD_WIDTH
        if len(line) != cols * width:
            raise ProtocolError(f"Expected {cols} fields of width {width}, got {line!r}")
        return [int(line[k:k + width]) for k in range(0, len(line), width)]

    @classmethod
    def _decode_block(cls, header: Dict[str, Any], body: List[str], occupancy: bool) -> Dict[str, Any]:
        block = dict(header)
        try:
            if header["output_type"] == cls.RAW:
                rows = [[int(v) for v in line.split("\t")] for line in body]
                if any(len(r) != 4 for r in rows):
                    raise ProtocolError("Raw vector lines must have 4 fields")
                block["vectors"] = np.array(rows, dtype=np.int32).reshape(-1, 4)
                return block

            if header["output_type"] != cls.ARRANGED:
                raise ProtocolError(f"Unknown output_type {header['output_type']!r}")

            total_rows, cols = header["shape"]
            n_grids = 3 if occupancy else 2
            if len(body) != total_rows or total_rows % n_grids:
                raise ProtocolError(
                    f"Arranged block expects {total_rows} lines in {n_grids} grids, got {len(body)}"
                )
            values = np.array([cls._split_fixed(line, cols) for line in body], dtype=np.int32)
            values = values.reshape(n_grids, total_rows // n_grids, cols)
        except ValueError as e:
            raise ProtocolError(f"Malformed block body: {e}") from e

        block["dx"], block["dy"] = values[0], values[1]
        if occupancy:
            block["occupancy"] = values[2].astype(np.uint8)
        return block

    @classmethod
    def decode(cls, text: str, occupancy: bool = False) -> Iterator[Dict[str, Any]]:
        """Iterate over the frame blocks in protocol text.

        Args:
            text: protocol output
            occupancy: arranged blocks carry an occupancy grid; the header
                alone cannot tell 2 from 3 grids

        Yields:
            header fields plus ``dx``/``dy``/``occupancy`` arrays for
            arranged blocks or ``vectors`` [K, 4] for raw blocks
        """
        header: Optional[Dict[str, Any]] = None
        body: List[str] = []
        for line in text.splitlines():
            if line.startswith("#"):
                if header is not None:
                    yield cls._decode_block(header, body, occupancy)
                header, body = cls.parse_header(line), []
            elif header is None:
                if line.strip():
                    raise ProtocolError(f"Data before first header: {line!r}")
            else:
                body.append(line)
        if header is not None:
            yield cls._decode_block(header, body, occupancy)

    @classmethod
    def load(cls, path: Union[str, Path], occupancy: bool = False) -> List[Dict[str, Any]]:
        """Read all frame blocks from a file."""
        with open(path) as f:
            return list(cls.decode(f.read(), occupancy=occupancy))
