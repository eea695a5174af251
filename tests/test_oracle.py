"""Tests for the frame verification oracle."""

import math

import numpy as np
import pytest

from seekcheck.config.schema import HarnessConfig, OptionFlags
from seekcheck.errors import FrameMismatch, ProbeFailure
from seekcheck.fixtures.synthetic import encode_frame_id, paint_frame
from seekcheck.harness.oracle import FrameOracle, clip_playback_time, decode_frame_id
from seekcheck.player.session import Frame

FPS = 25


def video_frame(ts, frame_id=None):
    if frame_id is None:
        frame_id = round(ts * FPS)
    return Frame(ts, paint_frame(frame_id, 16, 16), width=16, height=16)


class TestFrameIdDecoding:
    def test_high_nibbles_only(self):
        assert decode_frame_id(0x1F, 0x20, 0x3A) == 0x123

    @pytest.mark.parametrize("frame_id", [0, 1, 16, 752, 4095])
    def test_matches_painted_colour(self, frame_id):
        assert decode_frame_id(*encode_frame_id(frame_id)) == frame_id

    def test_encode_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            encode_frame_id(4096)


class TestPlaybackTime:
    def test_negative_clips_to_zero(self):
        assert clip_playback_time(-1.0) == 0.0

    def test_unbounded_without_trim(self):
        assert clip_playback_time(999999.0) == 999999.0

    def test_clamped_to_trim(self):
        assert clip_playback_time(60.0, 53.43) == 53.43


class TestTolerance:
    def test_within_one_frame_period_passes(self):
        oracle = FrameOracle(OptionFlags())
        oracle.verify(video_frame(30.099, frame_id=752), 30.1)

    def test_timestamp_beyond_one_period_fails(self):
        oracle = FrameOracle(OptionFlags())
        with pytest.raises(FrameMismatch) as excinfo:
            oracle.verify(video_frame(30.2, frame_id=752), 30.1)
        assert excinfo.value.kind == "ts"
        assert excinfo.value.diff == pytest.approx(0.1)

    def test_colour_beyond_one_period_fails(self):
        oracle = FrameOracle(OptionFlags())
        with pytest.raises(FrameMismatch) as excinfo:
            oracle.verify(video_frame(30.08, frame_id=775), 30.1)
        assert excinfo.value.kind == "color"
        assert excinfo.value.frame_id == 775

    def test_tolerance_is_one_frame_period(self):
        assert FrameOracle(OptionFlags()).tolerance == pytest.approx(1 / FPS)

    def test_missing_frame_is_a_probe_failure(self):
        with pytest.raises(ProbeFailure, match="no frame returned") as excinfo:
            FrameOracle(OptionFlags()).verify(None, 3.0)
        assert not isinstance(excinfo.value, FrameMismatch)

    def test_diagnostic_carries_requested_and_clipped_time(self):
        oracle = FrameOracle(OptionFlags(trim_duration=True))
        with pytest.raises(FrameMismatch) as excinfo:
            oracle.verify(video_frame(60.0), 60.0)
        message = str(excinfo.value)
        assert "requested t=60.000000" in message
        assert "clipped to 53.430000" in message
        assert "diff_color" in message


class TestOptionFlags:
    def test_clamp_and_skew(self):
        oracle = FrameOracle(OptionFlags(skew=True, trim_duration=True))
        assert oracle.playback_time(60.0) == pytest.approx(53.43)
        # 53.43 + 7.12 lands on source frame 1514 (60.56s)
        oracle.verify(video_frame(60.56), 60.0)

    def test_unclamped_frame_rejected_under_trim(self):
        oracle = FrameOracle(OptionFlags(skew=True, trim_duration=True))
        with pytest.raises(FrameMismatch):
            oracle.verify(video_frame(67.12), 60.0)

    def test_skew_subtracted_from_timestamp(self):
        oracle = FrameOracle(OptionFlags(skew=True))
        oracle.verify(video_frame(7.12), 0.0)
        with pytest.raises(FrameMismatch):
            oracle.verify(video_frame(0.0), 0.0)

    def test_no_trim_is_unbounded(self):
        assert FrameOracle(OptionFlags()).trim_duration == math.inf

    def test_audio_skips_colour_check(self):
        oracle = FrameOracle(OptionFlags(audio=True))
        samples = Frame(15.02, np.zeros((1, 1024), dtype=np.int16))
        oracle.verify(samples, 15.0)

    def test_from_config(self):
        cfg = HarnessConfig(skew=1.5, trim_duration=10.0)
        cfg.media.source_fps = 50
        oracle = FrameOracle.from_config(cfg, OptionFlags(skew=True, trim_duration=True))
        assert oracle.skew == 1.5
        assert oracle.trim_duration == 10.0
        assert oracle.tolerance == pytest.approx(0.02)


class TestNextFrameTime:
    def test_video_steps_one_frame_period(self):
        oracle = FrameOracle(OptionFlags(skew=True))
        assert oracle.next_frame_time(15.0, video_frame(22.12)) == pytest.approx(15.04)

    def test_audio_steps_to_end_of_previous_frame(self):
        oracle = FrameOracle(OptionFlags(skew=True, audio=True))
        previous = Frame(22.1, np.zeros((1, 1024), dtype=np.int16), duration=1024 / 44100)
        assert oracle.next_frame_time(15.0, previous) == pytest.approx(22.1 - 7.12 + 1024 / 44100)
