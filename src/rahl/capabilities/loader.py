"""
Startup loading: build a registry from an explicit list of capability
factories, or from import paths listed in configuration.

A capability that fails to import, construct or validate is logged and left
out; the rest still load.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from .base import CapabilityError, CapabilityLoadError
from .detection import DetectionRule
from .registry import CapabilityRegistry

if TYPE_CHECKING:
    from rahl.config import RahlConfig

logger = logging.getLogger(__name__)

Factory = Callable[[], Any]


def _label(factory: Any) -> str:
    return getattr(factory, "__qualname__", None) or getattr(factory, "__name__", None) or repr(factory)


def import_factory(path: str) -> Factory:
    """
    Resolve an import path to a capability factory.

    Accepts ``"package.module:Attr"`` or ``"package.module.Attr"``.
    """
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise CapabilityLoadError(f"Invalid capability path '{path}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise CapabilityLoadError(f"Cannot import '{module_name}': {e}") from e

    obj = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise CapabilityLoadError(f"'{module_name}' has no attribute '{attr}'") from e

    if not callable(obj):
        raise CapabilityLoadError(f"'{path}' is not callable")
    return obj


def build_registry(
    factories: Iterable[Factory],
    rules: Iterable[DetectionRule] | None = None,
) -> CapabilityRegistry:
    registry = CapabilityRegistry(rules)
    for factory in factories:
        label = _label(factory)
        try:
            registry.register(factory())
        except Exception as e:
            logger.warning(f"Failed to load capability {label}: {e}")
            registry.load_errors[label] = str(e)
            continue
        logger.info(f"Loaded capability from {label}")
    return registry


def load_registry(config: RahlConfig) -> CapabilityRegistry:
    """Build a registry from ``config.capabilities`` import paths."""
    factories: list[Factory] = []
    errors: dict[str, str] = {}
    for path in config.capabilities:
        try:
            factories.append(import_factory(path))
        except CapabilityError as e:
            logger.warning(f"Failed to load capability {path}: {e.message}")
            errors[path] = e.message

    registry = build_registry(factories, config.detection_rules)
    registry.load_errors.update(errors)
    logger.info(f"Capability registry ready: {registry.names()}")
    return registry
