"""Video decoding with motion vector export (PyAV / FFmpeg)."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Union

import av
import numpy as np
from av.error import FFmpegError
from av.video.frame import PictureType

from ..core.frame import UNKNOWN_PICT_TYPE, as_motion_vectors
from ..errors import DecodeError, NoVideoStreamError, VideoOpenError


logger = logging.getLogger(__name__)

# FFmpeg picture type names -> av_get_picture_type_char()
PICT_TYPE_CHARS = {
    "I": "I",
    "P": "P",
    "B": "B",
    "S": "S",
    "SI": "i",
    "SP": "p",
    "BI": "b",
}


def pict_type_char(pict_type) -> str:
    """Single-character code for a PyAV picture type, '?' if unknown.

    Accepts enum members and, as newer PyAV releases return them, the raw
    integer ``AVPictureType`` value.
    """
    if pict_type is None:
        return UNKNOWN_PICT_TYPE
    name = getattr(pict_type, "name", None)
    if name is None:
        try:
            name = PictureType(int(pict_type)).name
        except (KeyError, TypeError, ValueError):
            return UNKNOWN_PICT_TYPE
    return PICT_TYPE_CHARS.get(str(name).upper(), UNKNOWN_PICT_TYPE)


def _frame_duration(stream) -> int:
    """Nominal frame duration in stream time-base ticks (1 if unknown)."""
    rate = stream.average_rate
    time_base = stream.time_base
    if not rate or not time_base:
        return 1
    return max(1, round(1 / (rate * time_base)))


@dataclass
class DecodedFrame:
    """What the decoder hands over per frame."""
    pts: int
    pict_type: str
    vectors: np.ndarray = field(default_factory=lambda: as_motion_vectors(None), repr=False)

    def __post_init__(self):
        self.vectors = as_motion_vectors(self.vectors)

    @property
    def has_vectors(self) -> bool:
        return len(self.vectors) > 0


class VideoDecoder:
    """Lazily decode a video file into frames with their motion vectors.

    Iterating yields ``DecodedFrame`` objects in decode order; the sequence
    is finite and can be consumed once. Usable as a context manager:

        with VideoDecoder("clip.mp4") as decoder:
            for frame in decoder:
                ...
    """

    def __init__(self, path: Union[str, Path], quiet: bool = False):
        self.path = Path(path)
        self.quiet = quiet
        self.width = 0
        self.height = 0
        self.frame_duration = 1
        self._container = None
        self._stream = None
        self._consumed = False
        self._decoded = 0

    def open(self) -> "VideoDecoder":
        """Open the container and prepare the first video stream.

        Raises:
            VideoOpenError: file missing, unreadable or not a media container
            NoVideoStreamError: no video stream in the container
        """
        if self.quiet:
            av.logging.set_level(av.logging.ERROR)

        try:
            self._container = av.open(str(self.path))
        except (FFmpegError, OSError) as e:
            raise VideoOpenError(f"Couldn't open file {self.path}. Possibly it doesn't exist: {e}") from e

        if not self._container.streams.video:
            self.close()
            raise NoVideoStreamError(f"Video stream not found in {self.path}")

        self._stream = self._container.streams.video[0]
        codec_context = self._stream.codec_context
        codec_context.options = {"flags2": "+export_mvs"}
        self.width = codec_context.width
        self.height = codec_context.height
        self.frame_duration = _frame_duration(self._stream)
        logger.debug("Opened %s: %dx%d, codec %s", self.path, self.width, self.height, codec_context.name)
        return self

    def close(self) -> None:
        if self._container is not None:
            self._container.close()
            self._container = None
            self._stream = None

    def __enter__(self) -> "VideoDecoder":
        if self._container is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _to_decoded(self, frame) -> DecodedFrame:
        side_data = frame.side_data.get("MOTION_VECTORS")
        vectors = side_data.to_ndarray() if side_data is not None else None

        pts: Optional[int] = frame.pts
        if pts is None:
            pts = frame.dts
        if pts is None:
            pts = self._decoded

        return DecodedFrame(pts=int(pts), pict_type=pict_type_char(frame.pict_type), vectors=vectors)

    def __iter__(self) -> Iterator[DecodedFrame]:
        if self._container is None:
            self.open()
        if self._consumed:
            raise RuntimeError("VideoDecoder can only be iterated once")
        self._consumed = True

        try:
            for frame in self._container.decode(self._stream):
                decoded = self._to_decoded(frame)
                self._decoded += 1
                yield decoded
        except FFmpegError as e:
            raise DecodeError(str(e)) from e
