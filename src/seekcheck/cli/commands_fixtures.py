"""`seekcheck-fixtures OUT_DIR` command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import tyro

from seekcheck.config.schema import ImageCheckConfig, SyntheticMediaConfig
from seekcheck.fixtures.synthetic import write_test_image, write_test_video


@dataclass(slots=True)
class FixturesCommand:
    """Write the synthetic test video and still image."""

    out_dir: tyro.conf.Positional[Path]
    duration: float = 90.0
    fps: int = 25
    audio: bool = True
    media_name: str = "synthetic.mkv"
    image_name: str = "synthetic.jpg"


def execute(command: FixturesCommand) -> int:
    media = SyntheticMediaConfig(
        source_fps=command.fps,
        duration=command.duration,
        with_audio=command.audio,
    )
    media_path = command.out_dir / command.media_name
    image_path = command.out_dir / command.image_name

    frames = write_test_video(media_path, media)
    write_test_image(image_path, ImageCheckConfig())
    print(f"fixtures media={media_path} frames={frames} image={image_path}")
    return 0
