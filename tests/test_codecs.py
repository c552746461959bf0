"""Tests for FlowTextCodec and the emitters."""

import io
import tempfile
from pathlib import Path

import pytest
import numpy as np

from mpegflow.codecs import FlowTextCodec
from mpegflow.core import ArrangedEmitter, RasterizedFrame, RawEmitter
from mpegflow.errors import ProtocolError


class TestFlowTextCodec:
    @pytest.fixture
    def frame(self):
        frame = RasterizedFrame(pts=1000, frame_index=1, pict_type="P", grid_step=16, shape=(2, 3))
        frame.dx[:] = [[1, -2, 0], [12, 0, -100]]
        frame.dy[:] = [[0, 3, 0], [0, 0, 7]]
        frame.occupancy[:] = [[1, 1, 0], [1, 2, 1]]
        frame.empty = False
        return frame

    def test_encode_arranged(self, frame):
        text = FlowTextCodec.encode_arranged(frame, first_pts=1000)

        assert text == (
            "# pts=0 frame_index=1 pict_type=P output_type=arranged shape=4x3 origin=video\n"
            "   1  -2   0\n"
            "  12   0-100\n"
            "   0   3   0\n"
            "   0   0   7\n"
        )

    def test_encode_arranged_occupancy(self, frame):
        text = FlowTextCodec.encode_arranged(frame, first_pts=990, occupancy=True)
        lines = text.splitlines()

        assert lines[0].startswith("# pts=10 ")
        assert "shape=6x3" in lines[0]
        assert len(lines) == 7
        assert lines[-2:] == ["   1   1   0", "   1   2   1"]

    def test_encode_raw(self):
        vectors = [(0, 0, 16, 16), (5, 5, 5, 5), (10, 10, 12, 8)]
        text = FlowTextCodec.encode_raw(3, 512, "B", vectors)

        assert text == (
            "# pts=512 frame_index=3 pict_type=B output_type=raw shape=3x4\n"
            "16\t16\t16\t16\n"
            "12\t8\t2\t-2\n"
        )

    def test_encode_raw_no_vectors(self):
        text = FlowTextCodec.encode_raw(1, 0, "I", [])
        assert text == "# pts=0 frame_index=1 pict_type=I output_type=raw shape=0x4\n"

    def test_parse_header(self):
        header = FlowTextCodec.parse_header(
            "# pts=-3 frame_index=-1 pict_type=? output_type=arranged shape=6x4 origin=dummy"
        )

        assert header["pts"] == -3
        assert header["frame_index"] == -1
        assert header["pict_type"] == "?"
        assert header["shape"] == (6, 4)
        assert header["origin"] == "dummy"

    @pytest.mark.parametrize("line", [
        "pts=0 output_type=raw shape=1x4",
        "# pts output_type=raw shape=1x4",
        "# pts=zero output_type=raw shape=1x4",
        "# pts=0 shape=1x4",
    ])
    def test_parse_header_malformed(self, line):
        with pytest.raises(ProtocolError):
            FlowTextCodec.parse_header(line)

    def test_decode_arranged(self, frame):
        text = FlowTextCodec.encode_arranged(frame, first_pts=1000, occupancy=True)
        (block,) = FlowTextCodec.decode(text, occupancy=True)

        assert block["output_type"] == "arranged"
        assert np.array_equal(block["dx"], frame.dx)
        assert np.array_equal(block["dy"], frame.dy)
        assert np.array_equal(block["occupancy"], frame.occupancy)

    def test_decode_mixed_stream(self, frame):
        text = (
            FlowTextCodec.encode_arranged(frame, first_pts=1000)
            + FlowTextCodec.encode_arranged(frame, first_pts=900)
        )
        blocks = list(FlowTextCodec.decode(text))

        assert [b["pts"] for b in blocks] == [0, 100]
        assert "occupancy" not in blocks[0]

    def test_decode_raw(self):
        text = FlowTextCodec.encode_raw(2, 7, "P", [(0, 0, 16, 16), (5, 5, 5, 5)])
        (block,) = FlowTextCodec.decode(text)

        assert block["shape"] == (2, 4)
        assert block["vectors"].tolist() == [[16, 16, 16, 16]]

    def test_decode_rejects_orphan_data(self):
        with pytest.raises(ProtocolError):
            list(FlowTextCodec.decode("   1   2\n"))

    def test_decode_rejects_wrong_line_count(self, frame):
        text = FlowTextCodec.encode_arranged(frame)
        with pytest.raises(ProtocolError):
            list(FlowTextCodec.decode(text, occupancy=True))

    def test_decode_rejects_wrong_width(self):
        text = "# pts=0 frame_index=1 pict_type=P output_type=arranged shape=2x2 origin=video\n   1\n   2\n"
        with pytest.raises(ProtocolError):
            list(FlowTextCodec.decode(text))

    def test_load(self, frame):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "flow.txt"
            path.write_text(FlowTextCodec.encode_arranged(frame, first_pts=1000))

            blocks = FlowTextCodec.load(path)

            assert len(blocks) == 1
            assert blocks[0]["frame_index"] == 1


class TestArrangedEmitter:
    def _frame(self, pts):
        return RasterizedFrame.blank(pts, pts, "P", 16, (1, 2))

    def test_emits_once(self):
        out = io.StringIO()
        emitter = ArrangedEmitter(out)
        frame = self._frame(5)

        assert emitter.emit(frame) is True
        first = out.getvalue()
        assert emitter.emit(frame) is False
        assert out.getvalue() == first
        assert frame.printed
        assert emitter.emitted == 1

    def test_relative_pts(self):
        out = io.StringIO()
        emitter = ArrangedEmitter(out)

        emitter.emit(self._frame(100))
        emitter.emit(self._frame(103))
        emitter.emit(self._frame(90))

        assert emitter.first_pts == 100
        assert [b["pts"] for b in FlowTextCodec.decode(out.getvalue())] == [0, 3, -10]

    def test_occupancy_flag(self):
        out = io.StringIO()
        ArrangedEmitter(out, occupancy=True).emit(self._frame(0))

        assert "shape=3x2" in out.getvalue()


class TestRawEmitter:
    def test_zero_vectors_counted_not_printed(self):
        out = io.StringIO()
        emitter = RawEmitter(out)

        emitter.emit(1, 0, "P", [(3, 3, 3, 3), (0, 0, 4, 0)])

        lines = out.getvalue().splitlines()
        assert lines[0].endswith("shape=2x4")
        assert lines[1:] == ["4\t0\t4\t0"]
        assert emitter.emitted == 1
