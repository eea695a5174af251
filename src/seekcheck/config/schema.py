"""Dataclass-based configuration schema for seekcheck."""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class OptionFlags:
    """Player options toggled for one sweep configuration."""

    skew: bool = False
    trim_duration: bool = False
    audio: bool = False

    @property
    def label(self) -> str:
        parts = ["test", "audio" if self.audio else "video"]
        if self.skew:
            parts.append("skip")
        if self.trim_duration:
            parts.append("trimdur")
        return "-".join(parts)


def default_sweep() -> list[OptionFlags]:
    """Return the four video configurations exercised by default."""

    return [
        OptionFlags(),
        OptionFlags(skew=True),
        OptionFlags(trim_duration=True),
        OptionFlags(skew=True, trim_duration=True),
    ]


@dataclass(slots=True)
class SyntheticMediaConfig:
    """Properties of the synthetic test video the oracle knows how to decode."""

    source_fps: int = 25
    width: int = 16
    height: int = 16
    duration: float = 90.0
    with_audio: bool = True
    audio_sample_rate: int = 44100


@dataclass(slots=True)
class ImageCheckConfig:
    """Still image smoke test options."""

    request_time: float = 53.0
    width: int = 480
    height: int = 640


@dataclass(slots=True)
class HarnessConfig:
    """Top-level harness configuration."""

    media: SyntheticMediaConfig = field(default_factory=SyntheticMediaConfig)
    image: ImageCheckConfig = field(default_factory=ImageCheckConfig)
    skew: float = 7.12
    trim_duration: float = 53.43
    auto_hwaccel: bool = False
    unavailable_source: str = "/i/do/not/exist"
    sweep: list[OptionFlags] = field(default_factory=default_sweep)

    @property
    def tolerance(self) -> float:
        return 1.0 / self.media.source_fps
