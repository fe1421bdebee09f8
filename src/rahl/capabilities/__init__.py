"""RAHL capabilities: registry, detection and loading."""

from .base import (
    Capability,
    CapabilityError,
    CapabilityExecutionError,
    CapabilityInfo,
    CapabilityLoadError,
    CapabilityNotFoundError,
)
from .detection import DEFAULT_RULES, DetectionRule
from .loader import build_registry, import_factory, load_registry
from .registry import CapabilityCatalog, CapabilityRegistry, get_registry, set_registry

__all__ = [
    "Capability",
    "CapabilityInfo",
    "CapabilityCatalog",
    "CapabilityRegistry",
    "get_registry",
    "set_registry",
    "DetectionRule",
    "DEFAULT_RULES",
    "build_registry",
    "import_factory",
    "load_registry",
    # Errors
    "CapabilityError",
    "CapabilityNotFoundError",
    "CapabilityExecutionError",
    "CapabilityLoadError",
]
