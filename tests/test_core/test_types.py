"""Tests for core types."""

import numpy as np
import pytest

from chromakey.core import (
    CycleStats,
    DimensionError,
    DimensionMismatch,
    Frame,
    Pixel,
    SchedulerState,
    Session,
)


class TestFrame:
    def test_dimensions(self):
        frame = Frame.blank(3, 2)
        assert frame.width == 3
        assert frame.height == 2
        assert frame.size == (3, 2)
        assert frame.flat.shape == (3 * 2 * 4,)

    def test_flat_is_row_major_rgba_view(self):
        frame = Frame.blank(2, 2, color=(0, 0, 0, 255))
        frame.pixels[0, 1] = (9, 8, 7, 6)
        assert list(frame.flat[4:8]) == [9, 8, 7, 6]

        frame.flat[0] = 42
        assert frame.pixel(0, 0) == Pixel(42, 0, 0, 255)

    def test_rejects_wrong_channel_count(self):
        with pytest.raises(DimensionError):
            Frame(pixels=np.zeros((2, 2, 3), dtype=np.uint8))

    def test_rejects_wrong_dtype(self):
        with pytest.raises(DimensionError):
            Frame(pixels=np.zeros((2, 2, 4), dtype=np.float32))

    def test_rejects_empty(self):
        with pytest.raises(DimensionError):
            Frame(pixels=np.zeros((0, 2, 4), dtype=np.uint8))
        with pytest.raises(DimensionError):
            Frame.blank(0, 5)

    def test_from_bytes(self):
        data = bytes(range(16))
        frame = Frame.from_bytes(data, width=2, height=2)
        assert frame.pixel(1, 0) == Pixel(4, 5, 6, 7)
        assert frame.to_bytes() == data
        assert frame.writeable

    def test_from_bytes_length_mismatch(self):
        with pytest.raises(DimensionError):
            Frame.from_bytes(bytes(15), width=2, height=2)

    def test_from_bgr(self):
        bgr = np.zeros((1, 2, 3), dtype=np.uint8)
        bgr[0, 0] = (1, 2, 3)  # B, G, R
        frame = Frame.from_bgr(bgr, source_name="test")
        assert frame.pixel(0, 0) == Pixel(3, 2, 1, 255)
        assert frame.source_name == "test"
        assert np.array_equal(frame.to_bgr(), bgr)

    def test_non_contiguous_input_is_copied(self):
        wide = np.zeros((2, 4, 4), dtype=np.uint8)
        frame = Frame(pixels=wide[:, ::2])
        assert frame.pixels.flags.c_contiguous
        assert frame.size == (2, 2)

    def test_read_only(self):
        frame = Frame.blank(2, 2).read_only()
        assert not frame.writeable
        with pytest.raises(ValueError):
            frame.pixels[0, 0, 0] = 1

    def test_copy_is_independent(self):
        frame = Frame.blank(2, 2, frame_number=5)
        clone = frame.copy()
        clone.pixels[:] = 1
        assert frame.pixel(0, 0) == Pixel(0, 0, 0, 255)
        assert clone.frame_number == 5


class TestSession:
    def test_defaults(self):
        session = Session()
        assert session.state == SchedulerState.IDLE
        assert not session.is_ready

    def test_ready_when_background_matches(self):
        session = Session(width=2, height=3, background=Frame.blank(2, 3))
        assert session.is_ready
        assert session.matches(Frame.blank(2, 3))
        assert not session.matches(Frame.blank(3, 2))


class TestCycleStats:
    def test_mean(self):
        stats = CycleStats()
        assert stats.mean_cycle_ms == 0.0
        stats.record(2.0)
        stats.record(4.0)
        assert stats.cycles == 2
        assert stats.last_cycle_ms == 4.0
        assert stats.mean_cycle_ms == 3.0
        assert stats.as_dict()["mean_cycle_ms"] == 3.0


def test_dimension_mismatch_message():
    err = DimensionMismatch(expected=(4, 3), actual=(2, 1))
    assert err.expected == (4, 3)
    assert err.actual == (2, 1)
    assert "2x1" in str(err)
