"""
Configuration for the mortality comparison pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
import logging
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .model import SECONDS_IN_NON_LEAP_YEAR

logger = logging.getLogger(__name__)

EMPTY_BUCKET_POLICIES = ('raise', 'omit', 'propagate')

_TRUE_WORDS = ('true', 'yes', 'on', '1')
_FALSE_WORDS = ('false', 'no', 'off', '0')


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(f"not an integer: {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"not a whole number: {value!r}")
    return int(value)


_SETTING_TYPES = {
    'seconds_per_year': _to_int,
    'childhood_exclusion_years': _to_int,
    'empty_bucket_policy': str,
    'weight_by_generation': _to_bool,
    'country_label': str,
}


@dataclass
class MortalityConfig:
    """
    Configuration for comparing ancestors against mortality tables.

    Attributes:
        seconds_per_year: Divisor for every seconds <-> years conversion (365-day year).
        childhood_exclusion_years: Deaths younger than this are left out of the comparison.
        empty_bucket_policy: What averaging does for a gender with no records:
            'raise' (InsufficientDataError), 'omit' (None for that gender) or
            'propagate' (a bare ZeroDivisionError).
        weight_by_generation: Weight nearer generations more heavily when averaging.
        country_label: Name of the reference population used in report wording.
        config_file: Path to YAML config file (optional); values under its 'mortality' section override defaults.
    """
    seconds_per_year: int = SECONDS_IN_NON_LEAP_YEAR
    childhood_exclusion_years: int = 10
    empty_bucket_policy: str = 'raise'
    weight_by_generation: bool = False
    country_label: str = "UK"
    config_file: Optional[Path] = None

    def __post_init__(self) -> None:
        """Load configuration from file if config_file is specified, then validate."""
        if self.config_file:
            if Path(self.config_file).exists():
                self._load_from_file()
            else:
                logger.warning(f"Mortality config file not found: {self.config_file}; using defaults")
        self._validate()

    def _load_from_file(self) -> None:
        """
        Load configuration from YAML file.

        Reads the 'mortality' section and applies any recognised keys.
        """
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing {self.config_file}: {e}")

        self._apply(data.get('mortality', {}) or {})
        logger.info(f"Loaded mortality config from {self.config_file}")

    def _apply(self, settings: Dict[str, Any]) -> None:
        known = {f.name for f in fields(self)} - {'config_file'}
        for key, value in settings.items():
            if key in known:
                try:
                    setattr(self, key, _SETTING_TYPES[key](value))
                except (TypeError, ValueError) as e:
                    raise ValueError(f"Invalid value for mortality config key '{key}': {value!r}") from e
            else:
                logger.warning(f"Ignoring unknown mortality config key '{key}'")

    def _validate(self) -> None:
        self._apply({name: getattr(self, name) for name in _SETTING_TYPES})
        if self.empty_bucket_policy not in EMPTY_BUCKET_POLICIES:
            raise ValueError(
                f"Unknown empty_bucket_policy '{self.empty_bucket_policy}', expected one of {EMPTY_BUCKET_POLICIES}"
            )
        if int(self.seconds_per_year) <= 0:
            raise ValueError("seconds_per_year must be positive")
        if self.childhood_exclusion_years < 0:
            raise ValueError("childhood_exclusion_years must not be negative")

    @property
    def childhood_exclusion_seconds(self) -> int:
        """Exclusion threshold in seconds."""
        return self.childhood_exclusion_years * self.seconds_per_year

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MortalityConfig:
        """
        Create configuration from dictionary.

        Accepts either the contents of the 'mortality' section or a whole
        config document containing one.

        Args:
            data: Dictionary of settings.

        Returns:
            MortalityConfig instance
        """
        settings = data.get('mortality', data) if data else {}
        config = cls()
        config._apply(settings or {})
        config._validate()
        return config

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> MortalityConfig:
        """
        Load configuration from a specific YAML file.

        Args:
            yaml_path: Path to YAML config file.

        Returns:
            MortalityConfig: Configuration instance loaded from YAML.
        """
        if not yaml_path or not Path(yaml_path).exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")
        return cls(config_file=Path(yaml_path))
