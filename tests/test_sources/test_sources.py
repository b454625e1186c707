"""Tests for input sources and output sinks."""

import numpy as np
import pytest

from chromakey.core import ChromaKeyError, Frame, Pixel, StreamUnavailableError
from chromakey.sinks import MemorySink, VideoFileSink
from chromakey.sources import ArraySource, VideoFileSource, WebcamSource


class TestArraySource:
    def test_reads_copies_in_order(self):
        a = Frame.blank(2, 2, color=(1, 1, 1, 255))
        b = Frame.blank(2, 2, color=(2, 2, 2, 255))
        with ArraySource([a, b]) as src:
            assert src.resolution == (2, 2)
            first = src.read()
            first.pixels[:] = 99
            second = src.read()
            assert src.read() is None
            assert src.ended

        assert first.frame_number == 0
        assert second.pixel(0, 0) == Pixel(2, 2, 2, 255)
        assert a.pixel(0, 0) == Pixel(1, 1, 1, 255)

    def test_accepts_arrays(self):
        src = ArraySource([np.zeros((3, 5, 4), dtype=np.uint8)])
        assert src.resolution == (5, 3)

    def test_loop(self):
        src = ArraySource([Frame.blank(1, 1)], loop=True)
        src.open()
        frames = [src.read() for _ in range(5)]
        assert all(f is not None for f in frames)
        assert [f.frame_number for f in frames] == [0, 1, 2, 3, 4]
        assert not src.ended
        src.close()
        assert src.ended

    def test_iteration(self):
        with ArraySource([Frame.blank(1, 1)] * 3) as src:
            assert len(list(src)) == 3

    def test_empty_source_unavailable(self):
        with pytest.raises(StreamUnavailableError):
            ArraySource([]).open()

    def test_pause_resume(self):
        src = ArraySource([Frame.blank(1, 1)])
        assert not src.paused
        src.pause()
        assert src.paused
        src.resume()
        assert not src.paused

    def test_read_before_open(self):
        assert ArraySource([Frame.blank(1, 1)]).read() is None


class TestMemorySink:
    def test_keeps_latest_frames(self):
        received = []
        sink = MemorySink(max_frames=2, on_frame=received.append)
        sink.open(1, 1)
        for i in range(3):
            sink.push(Frame.blank(1, 1, color=(i, i, i, 255)))

        assert sink.pushed == 3
        assert len(sink.frames) == 2
        assert sink.latest.pixel(0, 0) == Pixel(2, 2, 2, 255)
        assert len(received) == 3
        assert sink.size == (1, 1)

    def test_stores_copies(self):
        sink = MemorySink()
        frame = Frame.blank(1, 1)
        sink.push(frame)
        frame.pixels[:] = 5
        assert sink.latest.pixel(0, 0) == Pixel(0, 0, 0, 255)


class TestUnavailableStreams:
    def test_missing_video_file(self, tmp_path):
        with pytest.raises(StreamUnavailableError):
            VideoFileSource(tmp_path / "missing.mp4").open()

    def test_missing_webcam(self):
        with pytest.raises(StreamUnavailableError):
            WebcamSource("/dev/does-not-exist-video99").open()


@pytest.mark.video
def test_video_round_trip(tmp_path):
    path = tmp_path / "clip.avi"
    sink = VideoFileSink(path, fps=10.0, fourcc="MJPG")
    try:
        sink.open(32, 16)
    except ChromaKeyError:
        pytest.skip("MJPG writer not available")
    for value in (0, 128, 255):
        sink.push(Frame.blank(32, 16, color=(value, value, value, 255)))
    sink.close()
    assert sink.frames_written == 3

    with VideoFileSource(path) as src:
        assert src.resolution == (32, 16)
        frames = list(src)
        assert src.ended

    assert len(frames) == 3
    assert frames[0].size == (32, 16)
    r, g, b, a = frames[2].pixel(16, 8)
    assert r > 200 and a == 255
