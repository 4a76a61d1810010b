"""
Central vital registry - single source of truth for vital sign definitions.

This module provides:
- YAML-based configuration loading and validation
- VitalDefinition dataclass (label, unit, default ranges)
- Read-only lookup by measurement kind

YAML access is encapsulated here - no other module should read vitals.yaml directly.

Usage:
    from core.vital_registry import get_vital, get_default_range

    bp = get_vital("bp")
    bp.display_name                       # "Blood Pressure"
    get_default_range("sugar", "fasting")  # (70, 100)
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

logger = logging.getLogger(__name__)


# =============================================================================
# VITAL DEFINITION DATACLASS
# =============================================================================

@dataclass(frozen=True)
class VitalDefinition:
    """
    Immutable definition for a vital sign.

    Attributes:
        kind: Measurement kind identifier ("bp", "sugar")
        display_name: Human-readable label used in alert messages
        unit: Measurement unit appended to formatted values
        default_ranges: Named inclusive (low, high) ranges used to seed user settings
    """
    kind: str
    display_name: str
    unit: str
    default_ranges: Tuple[Tuple[str, Tuple[int, int]], ...]

    def default_range(self, name: str) -> Tuple[int, int]:
        """
        Get one of the default ranges by name.

        Raises:
            KeyError: If the vital has no range with that name
        """
        for range_name, bounds in self.default_ranges:
            if range_name == name:
                return bounds
        raise KeyError(f"Vital '{self.kind}' has no default range '{name}'")


# =============================================================================
# YAML CONFIGURATION LOADING & VALIDATION
# =============================================================================

def _get_config_path() -> Path:
    """Get the path to the vitals configuration file."""
    return Path(__file__).parent / 'vitals.yaml'


def _load_yaml_config() -> Dict[str, Any]:
    """
    Load and parse the YAML configuration file.

    Raises:
        FileNotFoundError: If vitals.yaml is not found
        yaml.YAMLError: If YAML parsing fails
    """
    config_path = _get_config_path()
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except FileNotFoundError:
        logger.error("Vitals config file not found", extra={'path': str(config_path)})
        raise
    except yaml.YAMLError as e:
        logger.error("Failed to parse vitals config", extra={'path': str(config_path), 'error': str(e)})
        raise


def _validate_vital_entry(raw: Dict[str, Any], index: int) -> None:
    """
    Validate a single vital entry from YAML.

    Raises:
        ValueError: If required fields are missing or ranges are invalid
    """
    for field in ('kind', 'display_name', 'unit'):
        if field not in raw:
            raise ValueError(f"Vital at index {index} is missing required field: '{field}'")

    ranges = raw.get('default_ranges') or {}
    for name, bounds in ranges.items():
        if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
            raise ValueError(f"Vital '{raw['kind']}' range '{name}' must be [low, high]")
        low, high = bounds
        # bool is an int subclass; thresholds must be real integers
        if type(low) is not int or type(high) is not int:
            raise ValueError(f"Vital '{raw['kind']}' range '{name}' must use integer bounds")
        if low > high:
            raise ValueError(f"Vital '{raw['kind']}' range '{name}' has low > high")


def _parse_vital_entry(raw: Dict[str, Any]) -> VitalDefinition:
    """Parse a single vital entry from YAML into a VitalDefinition."""
    ranges = raw.get('default_ranges') or {}
    return VitalDefinition(
        kind=raw['kind'],
        display_name=raw['display_name'],
        unit=raw['unit'],
        default_ranges=tuple((name, (bounds[0], bounds[1])) for name, bounds in ranges.items()),
    )


@lru_cache(maxsize=1)
def _load_registry() -> Dict[str, VitalDefinition]:
    """
    Load and cache the vital registry from YAML.

    Cached so the YAML file is read exactly once per process.
    """
    config = _load_yaml_config()

    registry: Dict[str, VitalDefinition] = {}
    for i, raw in enumerate(config.get('vitals', [])):
        _validate_vital_entry(raw, i)
        vital = _parse_vital_entry(raw)
        if vital.kind in registry:
            logger.warning("Duplicate vital kind detected", extra={'kind': vital.kind})
        registry[vital.kind] = vital

    return registry


# =============================================================================
# PUBLIC API
# =============================================================================

def get_vital(kind: str) -> VitalDefinition:
    """
    Get a vital definition by kind.

    Raises:
        KeyError: If the kind is not in the registry
    """
    registry = _load_registry()
    if kind not in registry:
        raise KeyError(f"Unknown vital kind: '{kind}'")
    return registry[kind]


def list_vitals() -> List[VitalDefinition]:
    """List all vital definitions in registry order."""
    return list(_load_registry().values())


def get_default_range(kind: str, name: str) -> Tuple[int, int]:
    """Get a default (low, high) range for a vital kind."""
    return get_vital(kind).default_range(name)
