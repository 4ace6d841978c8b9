"""
Configuration loader for timing defaults.

This module handles loading and parsing of YAML configuration files that set
the default timeouts and polling rates used by the fluent factories and the
script loop. Every value is in milliseconds.

Example file::

    timing:
      default_timeout: 30000
      default_polling_rate: 600
      script_polling_rate: 60
"""
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml


@dataclass(frozen=True)
class TimingConfig:
    """Default durations handed to timing factories and scripts."""
    default_timeout: float = 30_000
    default_polling_rate: float = 600
    companion_rate: float = 100
    script_polling_rate: float = 60

    def __post_init__(self):
        for config_field in fields(self):
            value = getattr(self, config_field.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(
                    f"{config_field.name} must be a number of milliseconds, got {value!r}"
                )
            if value < 0:
                raise ValueError(f"{config_field.name} must be non-negative, got {value}")


DEFAULT_TIMING = TimingConfig()


DEFAULT_CONFIG_PATH = Path(__file__).parent / "data" / "timing.yaml"


class TimingConfigLoader:
    """Loads timing defaults from a YAML file.

    Without a path the loader reads the timing.yaml bundled with the package.
    Relative paths are resolved against the project root.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or str(DEFAULT_CONFIG_PATH)
        self._config: dict[str, Any] = {}
        self._timing = DEFAULT_TIMING
        self.warnings: list[str] = []

    @property
    def timing(self) -> TimingConfig:
        return self._timing

    def _resolve_path(self) -> Path:
        # Handle both absolute and relative paths
        if not os.path.isabs(self.config_path):
            # Assume relative to project root
            project_root = Path(__file__).parent.parent
            return project_root / self.config_path
        return Path(self.config_path)

    def load_config(self) -> bool:
        """
        Load configuration from the YAML file.

        Returns:
            bool: True if config was loaded, False if the file was missing and
            defaults are in use

        Raises:
            ValueError: If the file is not valid YAML or holds invalid values
        """
        config_file = self._resolve_path()

        if not config_file.exists():
            self.warnings.append(f"Timing config file not found: {config_file}")
            self._timing = DEFAULT_TIMING
            return False

        with open(config_file, 'r', encoding='utf-8') as f:
            try:
                self._config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Failed to parse YAML timing config: {e}")

        if not isinstance(self._config, dict):
            raise ValueError(f"Timing config must be a mapping, got {type(self._config).__name__}")

        self._timing = self._parse_timing(self._config.get('timing', {}) or {})
        return True

    def _parse_timing(self, timing_section: dict[str, Any]) -> TimingConfig:
        """Build a TimingConfig from the ``timing`` section."""
        if not isinstance(timing_section, dict):
            raise ValueError("The 'timing' section must be a mapping")

        known = {config_field.name for config_field in fields(TimingConfig)}
        overrides = {}
        for key, value in timing_section.items():
            if key not in known:
                self.warnings.append(f"Unknown timing setting '{key}' ignored")
                continue
            overrides[key] = value

        return replace(DEFAULT_TIMING, **overrides)


def load_timing_config(config_path: Optional[str] = None) -> TimingConfig:
    """Load timing defaults, falling back to the built-in values."""
    loader = TimingConfigLoader(config_path)
    loader.load_config()
    return loader.timing
