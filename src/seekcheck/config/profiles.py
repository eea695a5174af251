"""Built-in sweep profiles selecting which option combinations run."""

from __future__ import annotations

from dataclasses import dataclass

from seekcheck.config.schema import HarnessConfig, OptionFlags, default_sweep


def _audio_sweep() -> tuple[OptionFlags, ...]:
    return tuple(
        OptionFlags(skew=flags.skew, trim_duration=flags.trim_duration, audio=True)
        for flags in default_sweep()
    )


@dataclass(frozen=True, slots=True)
class ProfileSpec:
    """Declarative sweep defaults for a named profile."""

    name: str
    description: str
    sweep: tuple[OptionFlags, ...]


_PROFILES: dict[str, ProfileSpec] = {
    "default": ProfileSpec(
        name="default",
        description="Video stream with every skew and trim duration combination.",
        sweep=tuple(default_sweep()),
    ),
    "audio": ProfileSpec(
        name="audio",
        description="Audio stream only; frame ids are not checked.",
        sweep=_audio_sweep(),
    ),
    "full": ProfileSpec(
        name="full",
        description="Video then audio, every skew and trim duration combination.",
        sweep=tuple(default_sweep()) + _audio_sweep(),
    ),
}


def available_profiles() -> dict[str, ProfileSpec]:
    """Return built-in profiles by name."""

    return dict(_PROFILES)


def resolve_profile(name: str) -> ProfileSpec:
    """Resolve one profile by name."""

    key = name.strip().lower()
    profile = _PROFILES.get(key)
    if profile is None:
        known = ", ".join(sorted(_PROFILES))
        raise ValueError(f"Unknown profile '{name}'. Available profiles: {known}")
    return profile


def apply_profile(config: HarnessConfig, profile_name: str) -> ProfileSpec:
    """Apply a profile directly onto a HarnessConfig instance."""

    profile = resolve_profile(profile_name)
    config.sweep = list(profile.sweep)
    return profile
