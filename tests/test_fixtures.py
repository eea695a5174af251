"""Tests writing real synthetic media and reading it back through PyAV."""

import logging

from PIL import Image
import pytest

from seekcheck.cli.app import fixtures_main
from seekcheck.config.schema import ImageCheckConfig, SyntheticMediaConfig
from seekcheck.errors import SourceError
from seekcheck.fixtures.synthetic import write_test_image, write_test_video
from seekcheck.harness.oracle import decode_frame_id
from seekcheck.player.av_source import AvSource
from seekcheck.player.engine import create_player
from seekcheck.player.session import StreamSelection


@pytest.fixture(scope="module")
def short_clip(tmp_path_factory):
    path = tmp_path_factory.mktemp("media") / "clip.mkv"
    config = SyntheticMediaConfig(duration=4.0, with_audio=True)
    frames = write_test_video(path, config)
    assert frames == 100
    return path


def test_image_size(tmp_path):
    path = tmp_path / "still.jpg"
    write_test_image(path, ImageCheckConfig())
    with Image.open(path) as image:
        assert image.size == (480, 640)


def test_still_image_request_past_end_logs_no_warning(tmp_path):
    path = tmp_path / "still.jpg"
    write_test_image(path, ImageCheckConfig())
    records = []
    handler = logging.Handler()
    handler.emit = records.append
    logger = logging.getLogger("seekcheck.player.av")
    logger.addHandler(handler)
    session = create_player(str(path))
    try:
        frame = session.get_frame(53.0)
        assert frame is not None
        assert (frame.width, frame.height) == (480, 640)
        session.release_frame(frame)
    finally:
        session.destroy()
        logger.removeHandler(handler)
    assert [r for r in records if r.levelno >= logging.WARNING] == []


def test_frame_ids_survive_encoding(short_clip):
    source = AvSource(str(short_clip))
    try:
        ids = []
        while (frame := source.read()) is not None:
            ids.append(decode_frame_id(*frame.data[0, 0, :3]))
        assert ids == list(range(100))
        assert source.info().width == 16
    finally:
        source.close()


def test_audio_stream_present(short_clip):
    source = AvSource(str(short_clip), StreamSelection.AUDIO)
    try:
        frame = source.read()
        assert frame is not None
        assert frame.width == 0
    finally:
        source.close()


def test_player_seeks_real_file(short_clip):
    session = create_player(str(short_clip))
    try:
        late = session.get_frame(3.0)
        early = session.get_frame(1.0)
        assert late.ts == pytest.approx(3.0)
        assert decode_frame_id(*early.first_pixel()) == 25
        session.release_frame(late)
        session.release_frame(early)
        last = session.get_frame(999999.0)
        assert last.ts == pytest.approx(3.96)
        session.release_frame(last)
        assert session.get_frame(99999.0) is None
    finally:
        session.destroy()


def test_missing_file_is_a_source_error():
    with pytest.raises(SourceError):
        AvSource("/i/do/not/exist")


def test_fixtures_command(tmp_path, capsys):
    assert fixtures_main([str(tmp_path), "--duration", "1.0", "--no-audio"]) == 0
    assert (tmp_path / "synthetic.mkv").exists()
    assert (tmp_path / "synthetic.jpg").exists()
    assert "frames=25" in capsys.readouterr().out
