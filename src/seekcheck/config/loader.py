"""Load harness configs from Python references or JSON files."""

from __future__ import annotations

import importlib
import importlib.util
import json
from pathlib import Path
from typing import Any

from seekcheck.config.schema import (
    HarnessConfig,
    ImageCheckConfig,
    OptionFlags,
    SyntheticMediaConfig,
)


def load_object(reference: str) -> Any:
    """Load object by `module_or_path:attribute` reference."""

    module_ref, sep, attr = reference.partition(":")
    if not sep or not attr:
        raise ValueError("Config reference must be in form 'module_or_path:attribute'.")

    path = Path(module_ref).expanduser()
    if path.exists():
        spec = importlib.util.spec_from_file_location(f"_seekcheck_cfg_{path.stem}", path)
        if spec is None or spec.loader is None:
            raise RuntimeError(f"Could not load module from path: {path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
    else:
        module = importlib.import_module(module_ref)

    value: Any = module
    for part in attr.split("."):
        value = getattr(value, part)
    return value


def harness_config_from_dict(payload: dict[str, Any]) -> HarnessConfig:
    """Build a HarnessConfig from plain data; missing keys keep their defaults."""

    defaults = HarnessConfig()
    sweep = payload.get("sweep")
    return HarnessConfig(
        media=SyntheticMediaConfig(**payload.get("media", {})),
        image=ImageCheckConfig(**payload.get("image", {})),
        skew=float(payload.get("skew", defaults.skew)),
        trim_duration=float(payload.get("trim_duration", defaults.trim_duration)),
        auto_hwaccel=bool(payload.get("auto_hwaccel", defaults.auto_hwaccel)),
        unavailable_source=str(payload.get("unavailable_source", defaults.unavailable_source)),
        sweep=defaults.sweep if sweep is None else [OptionFlags(**item) for item in sweep],
    )


def load_harness_config(config_ref: str | None) -> HarnessConfig:
    """Resolve `--config`: None, a JSON file, or a `module_or_path:attribute` reference.

    The reference may name a HarnessConfig or a dict shaped like its fields.
    """

    if config_ref is None:
        return HarnessConfig()

    if config_ref.endswith(".json"):
        with Path(config_ref).expanduser().open("r", encoding="utf-8") as handle:
            return harness_config_from_dict(json.load(handle))

    loaded = load_object(config_ref)
    if isinstance(loaded, dict):
        return harness_config_from_dict(loaded)
    if not isinstance(loaded, HarnessConfig):
        type_name = type(loaded).__name__
        raise TypeError(f"Config reference must resolve to HarnessConfig, got {type_name}.")
    return loaded
