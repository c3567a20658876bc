import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

log = logging.getLogger("BoothConfig")

DEFAULT_COLOR = "#cccccc"

# Quick-pick swatches offered next to the free colour input
COLOR_PRESETS: Dict[str, str] = {
    "White": "#ffffff",
    "Black": "#000000",
    "Grey": "#cccccc",
    "Pink": "#ffd1dc",
    "Blue": "#aec6cf",
    "Red": "#ff6961",
}


@dataclass(frozen=True)
class BoothConfig:
    """Runtime settings for a booth. Times are in seconds."""
    countdown_seconds: int = 3
    tick_interval: float = 1.0
    cooldown: float = 0.5
    default_layout: str = "A"
    default_color: str = DEFAULT_COLOR
    caption_title: str = "Photo Booth"
    camera_index: int = 0
    output_dir: str = "./output"
    layouts_file: Optional[str] = None

    def __post_init__(self):
        if self.countdown_seconds < 1:
            raise ValueError(f"countdown_seconds must be >= 1, got {self.countdown_seconds}")
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be > 0, got {self.tick_interval}")
        if self.cooldown < 0:
            raise ValueError(f"cooldown must be >= 0, got {self.cooldown}")

    def with_overrides(self, **overrides: Any) -> "BoothConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def load_config(path=None) -> BoothConfig:
    """
    Load a BoothConfig from a YAML file.

    :param path: Optional path to a YAML mapping. Missing keys keep their
                 defaults; unknown keys are rejected.
    """
    if path is None:
        return BoothConfig()

    path = Path(path)
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Config file {path} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(BoothConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    try:
        config = BoothConfig(**data)
    except TypeError as e:
        raise ValueError(f"Config file {path} has a value of the wrong type: {e}") from e
    log.info(f"Loaded booth config from {path}")
    return config
