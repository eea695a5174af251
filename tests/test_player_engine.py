"""Tests for the reference player over synthetic media."""

import logging

import pytest

from seekcheck.harness.oracle import decode_frame_id
from seekcheck.player.engine import Player
from seekcheck.player.session import (
    OPTION_AUTO_HWACCEL,
    OPTION_SKEW,
    OPTION_STREAM_SELECTION,
    OPTION_TRIM_DURATION,
    StreamSelection,
)

from conftest import IMAGE, MEDIA


def frame_id(frame):
    return decode_frame_id(*frame.first_pixel())


class TestGetFrame:
    def test_returns_last_frame_at_or_before_time(self, player):
        frame = player.get_frame(30.1)
        assert frame.ts == pytest.approx(30.08)
        assert frame_id(frame) == 752
        player.release_frame(frame)

    def test_negative_time_gives_first_frame(self, player):
        frame = player.get_frame(-1.0)
        assert frame.ts == 0.0
        player.release_frame(frame)

    def test_backward_request_seeks_source(self, player, library):
        player.release_frame(player.get_frame(30.0))
        player.release_frame(player.get_frame(15.0))
        assert library.opened[0].seeks == [30.0, 15.0]

    def test_short_forward_request_decodes_through(self, player, library):
        player.release_frame(player.get_frame(30.0))
        frame = player.get_frame(30.5)
        assert frame.ts == pytest.approx(30.48)
        player.release_frame(frame)
        assert library.opened[0].seeks == [30.0]

    def test_exact_frame_is_not_redelivered(self, player):
        exact = player.get_frame(16.0)
        assert exact.ts == pytest.approx(16.0)
        assert player.get_frame(16.001) is None
        player.release_frame(exact)

    def test_end_of_stream_saturation(self, player):
        last = player.get_frame(999999.0)
        assert last is not None
        assert last.ts == pytest.approx(89.96)
        player.release_frame(last)
        assert player.get_frame(99999.0) is None

    def test_still_image(self, session_factory):
        session = session_factory(IMAGE)
        frame = session.get_frame(53.0)
        assert frame is not None
        info = session.get_info()
        assert (info.width, info.height) == (480, 640)
        session.release_frame(frame)
        session.destroy()


class TestGetNextFrame:
    def test_walk_from_start(self, player):
        first = player.get_next_frame()
        second = player.get_next_frame()
        assert (first.ts, second.ts) == (0.0, pytest.approx(0.04))
        player.release_frame(first)
        player.release_frame(second)

    def test_follows_seek(self, player):
        seek = player.get_frame(15.0)
        steps = [player.get_next_frame() for _ in range(3)]
        assert [frame_id(f) for f in steps] == [376, 377, 378]
        for frame in [seek, *steps]:
            player.release_frame(frame)

    def test_stops_at_trim_duration(self, session_factory):
        session = session_factory(MEDIA)
        session.set_option(OPTION_TRIM_DURATION, 53.43)
        frame = session.get_frame(60.0)
        assert frame.ts == pytest.approx(53.40)
        assert session.get_next_frame() is None
        session.release_frame(frame)
        session.destroy()


class TestOptions:
    def test_skew_shifts_media_time(self, session_factory):
        session = session_factory(MEDIA)
        session.set_option(OPTION_SKEW, 7.12)
        frame = session.get_frame(0.0)
        assert frame.ts == pytest.approx(7.12)
        session.release_frame(frame)
        session.destroy()

    def test_audio_selection(self, session_factory):
        session = session_factory(MEDIA)
        session.set_option(OPTION_STREAM_SELECTION, StreamSelection.AUDIO)
        frame = session.get_frame(15.0)
        assert frame.width == 0
        assert frame.ts == pytest.approx(15.0, abs=1024 / 44100)
        session.release_frame(frame)
        session.destroy()

    def test_unknown_option(self, player):
        with pytest.raises(ValueError, match="Unknown player option"):
            player.set_option("colour", 1)

    def test_options_locked_after_start(self, player):
        assert player.prefetch()
        with pytest.raises(RuntimeError):
            player.set_option(OPTION_AUTO_HWACCEL, False)

    def test_negative_trim_means_unbounded(self, session_factory):
        session = session_factory(MEDIA)
        session.set_option(OPTION_TRIM_DURATION, -1)
        frame = session.get_frame(60.0)
        assert frame.ts == pytest.approx(60.0)
        session.release_frame(frame)
        session.destroy()


class TestFrameOwnership:
    def test_release_tracks_outstanding(self, player):
        frame = player.get_frame(1.0)
        assert player.outstanding_frames == 1
        player.release_frame(frame)
        assert player.outstanding_frames == 0
        assert frame.released

    def test_data_unavailable_after_release(self, player):
        frame = player.get_frame(1.0)
        player.release_frame(frame)
        with pytest.raises(RuntimeError, match="after release"):
            frame.data

    def test_double_release_rejected(self, player):
        frame = player.get_frame(1.0)
        player.release_frame(frame)
        with pytest.raises(ValueError):
            player.release_frame(frame)

    def test_release_none_is_noop(self, player):
        player.release_frame(None)

    def test_destroy_reports_leaked_frames(self, session_factory, library):
        session = session_factory(MEDIA)
        messages = []
        session.set_log_callback("ctx", lambda ctx, level, msg: messages.append((ctx, level, msg)))
        frame = session.get_frame(2.0)
        session.destroy()
        assert frame.released
        assert any(level == logging.WARNING and "still held" in msg for _, level, msg in messages)
        assert library.opened[0].closed


class TestUnavailableSource:
    def test_requests_fail_quietly(self, session_factory):
        session = session_factory("/i/do/not/exist")
        messages = []
        session.set_log_callback("ctx", lambda ctx, level, msg: messages.append((ctx, level, msg)))
        assert session.get_frame(1.0) is None
        assert session.get_next_frame() is None
        assert session.get_info() is None
        assert not session.prefetch()
        session.destroy()
        assert messages[0][0] == "ctx"
        assert messages[0][1] == logging.ERROR
        assert "/i/do/not/exist" in messages[0][2]

    def test_use_after_destroy(self):
        session = Player("/i/do/not/exist")
        session.destroy()
        with pytest.raises(RuntimeError):
            session.get_frame(0.0)
