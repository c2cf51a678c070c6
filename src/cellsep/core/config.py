"""
Processing configuration.

Defaults reproduce the reference batch tool. Every value can be overridden
through ``CELLSEP_*`` environment variables (a ``.env`` file in the working
directory is honoured).
"""

import math
import os
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Optional

from dotenv import load_dotenv

from ..utils.error_handler import ConfigurationError


# Approximate pi used by the reference reports
REFERENCE_PI = 3.14

DEFAULT_THRESHOLDS = {
    'blue': 35,
    'green': 15,
    'red': 35,
}


@dataclass(frozen=True)
class ProcessingConfig:
    """Configuration for contour resolution, filtering and binning."""
    min_area: float = 1.0
    min_perimeter: float = 20.0
    bin_width: float = 40
    num_bins: int = 11
    pi: float = REFERENCE_PI

    # Binarisation thresholds applied after min-max normalisation (0-255)
    thresholds: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_THRESHOLDS))
    threshold_method: str = 'binary'

    # Output settings
    debug_images: bool = True
    workers: int = 1
    list_name: str = 'image_list.dat'
    report_name: str = 'computed_metrics.csv'
    input_dir_name: str = 'original'
    result_dir_name: str = 'result'

    def validate(self) -> 'ProcessingConfig':
        """Raise ConfigurationError if any value is out of range."""
        if self.bin_width <= 0:
            raise ConfigurationError(f"bin_width must be positive, got {self.bin_width}")
        if self.num_bins < 1:
            raise ConfigurationError(f"num_bins must be at least 1, got {self.num_bins}")
        if self.pi <= 0:
            raise ConfigurationError(f"pi must be positive, got {self.pi}")
        if self.min_area < 0 or self.min_perimeter < 0:
            raise ConfigurationError("min_area and min_perimeter must be non-negative")
        if self.threshold_method.lower() not in ('binary', 'otsu'):
            raise ConfigurationError(f"Unknown threshold method: {self.threshold_method}")
        if self.workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {self.workers}")
        for name in DEFAULT_THRESHOLDS:
            value = self.thresholds.get(name)
            if value is None:
                raise ConfigurationError(f"Missing threshold for channel '{name}'")
            if not 0 <= value <= 255:
                raise ConfigurationError(f"Threshold for '{name}' must be in [0, 255], got {value}")
        return self

    def with_exact_pi(self) -> 'ProcessingConfig':
        """Copy of this config using full-precision pi."""
        return replace(self, pi=math.pi)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ('1', 'true', 'yes', 'on'):
        return True
    if lowered in ('0', 'false', 'no', 'off'):
        return False
    raise ValueError(f"not a boolean: {value!r}")


_ENV_FIELDS: Dict[str, Callable[[str], object]] = {
    'min_area': float,
    'min_perimeter': float,
    'bin_width': float,
    'num_bins': int,
    'pi': float,
    'debug_images': _parse_bool,
    'workers': int,
    'list_name': str,
    'report_name': str,
    'threshold_method': lambda value: value.strip().lower(),
}


def load_config(
    env_file: Optional[str] = None,
    **overrides
) -> ProcessingConfig:
    """
    Build a ProcessingConfig from defaults, environment and overrides.

    Parameters
    ----------
    env_file : str, optional
        Explicit .env path; by default python-dotenv searches upwards
        from the working directory
    **overrides
        Field values taking precedence over the environment

    Returns
    -------
    ProcessingConfig
        Validated configuration
    """
    load_dotenv(env_file)

    values = {}
    for name, parse in _ENV_FIELDS.items():
        raw = os.getenv(f"CELLSEP_{name.upper()}")
        if raw is None:
            continue
        try:
            values[name] = parse(raw)
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for CELLSEP_{name.upper()}: {e}") from e

    thresholds = dict(DEFAULT_THRESHOLDS)
    for channel in thresholds:
        raw = os.getenv(f"CELLSEP_THRESHOLD_{channel.upper()}")
        if raw is None:
            continue
        try:
            thresholds[channel] = int(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for CELLSEP_THRESHOLD_{channel.upper()}: {e}"
            ) from e
    values['thresholds'] = thresholds

    values.update({k: v for k, v in overrides.items() if v is not None})
    return ProcessingConfig(**values).validate()
