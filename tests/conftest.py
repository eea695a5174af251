"""Shared fixtures: synthetic media served to the reference player."""

import pytest

from seekcheck.config.schema import HarnessConfig
from seekcheck.fixtures.synthetic import SyntheticLibrary
from seekcheck.player.engine import Player

MEDIA = "synthetic.mkv"
IMAGE = "synthetic.jpg"


@pytest.fixture
def library():
    return SyntheticLibrary(media_path=MEDIA, image_path=IMAGE)


@pytest.fixture
def session_factory(library):
    return lambda path: Player(path, opener=library)


@pytest.fixture
def player(session_factory):
    session = session_factory(MEDIA)
    yield session
    session.destroy()


@pytest.fixture
def config():
    return HarnessConfig()
