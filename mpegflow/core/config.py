"""Run configuration for motion vector extraction."""

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..errors import ConfigError


@dataclass
class FlowConfig:
    """Options selected once for the whole run.

    ``raw`` switches to raw vector output; ``grid8x8`` and ``occupancy``
    only affect the arranged (grid) output and are ignored in raw mode.
    """
    raw: bool = False
    grid8x8: bool = False
    occupancy: bool = False
    quiet: bool = False

    # Grid
    max_grid_size: int = 512  # rows/cols cap, larger frames are truncated
    fill_passes: int = 2  # gap-filling relaxation passes at step 8

    # Buffering
    # Insert "dummy" frames for missing pts. Gaps are measured in frame
    # durations (stream time base); streams with variable frame timing get
    # spurious dummies.
    fill_pts_gaps: bool = False

    progress: bool = False

    @property
    def grid_step(self) -> int:
        return 8 if self.grid8x8 else 16

    def validate(self) -> "FlowConfig":
        if self.max_grid_size < 1:
            raise ConfigError(f"max_grid_size must be >= 1, got {self.max_grid_size}")
        if self.fill_passes < 0:
            raise ConfigError(f"fill_passes must be >= 0, got {self.fill_passes}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FlowConfig":
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered).validate()

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "FlowConfig":
        """Load configuration from a YAML mapping.

        Unknown keys are ignored. An empty file yields the defaults.
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must contain a mapping")
        return cls.from_dict(data)
