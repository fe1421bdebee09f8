"""
RAHL: a capability registry with keyword routing.

Capabilities are registered once at startup, picked from free text by an
ordered keyword rule table, and executed through one uniform contract.

Quick start::

    from rahl import build_registry

    registry = build_registry([Calculator, WebSearch])
    name = registry.detect("please calculate 2+2")   # "calculator"
    result = await registry.execute(name, "2+2")

Or serve it over HTTP with ``rahl.server.create_app()``.
"""

__version__ = "0.1.0"

from rahl.capabilities import (
    DEFAULT_RULES,
    Capability,
    CapabilityCatalog,
    CapabilityError,
    CapabilityExecutionError,
    CapabilityInfo,
    CapabilityLoadError,
    CapabilityNotFoundError,
    CapabilityRegistry,
    DetectionRule,
    build_registry,
    get_registry,
    import_factory,
    load_registry,
)
from rahl.config import RahlConfig, get_config, load_config

__all__ = [
    # Registry
    "Capability",
    "CapabilityInfo",
    "CapabilityCatalog",
    "CapabilityRegistry",
    "DetectionRule",
    "DEFAULT_RULES",
    "get_registry",
    "build_registry",
    "import_factory",
    "load_registry",
    # Errors
    "CapabilityError",
    "CapabilityNotFoundError",
    "CapabilityExecutionError",
    "CapabilityLoadError",
    # Config
    "RahlConfig",
    "load_config",
    "get_config",
]
