"""
Test Configuration
==================

Pytest fixtures shared by the decoder and CLI tests.
"""

import pytest
import numpy as np


@pytest.fixture(scope="session")
def sample_video(tmp_path_factory):
    """Encode a short MPEG-4 clip of a textured block moving right."""
    av = pytest.importorskip("av")

    path = tmp_path_factory.mktemp("video") / "moving_block.mp4"
    width, height, n_frames = 64, 48, 6
    rng = np.random.default_rng(0)
    texture = rng.integers(0, 255, size=(16, 16, 3), dtype=np.uint8)

    container = av.open(str(path), mode="w")
    stream = container.add_stream("mpeg4", rate=25)
    stream.width = width
    stream.height = height
    stream.pix_fmt = "yuv420p"

    for k in range(n_frames):
        img = np.full((height, width, 3), 64, dtype=np.uint8)
        img[16:32, 8 + 4 * k:24 + 4 * k] = texture
        frame = av.VideoFrame.from_ndarray(img, format="rgb24")
        for packet in stream.encode(frame):
            container.mux(packet)
    for packet in stream.encode():
        container.mux(packet)
    container.close()

    return {"path": path, "width": width, "height": height, "frames": n_frames}
