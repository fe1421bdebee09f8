"""
Capability registry: name -> capability lookup, keyword detection and
delegated execution.

The registry is filled once at startup and read-only afterwards, so it needs
no locking. It adds nothing around the delegated call: no retries, caching,
rate limiting or timeouts.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable, Iterator
from typing import Any

from .base import (
    Capability,
    CapabilityExecutionError,
    CapabilityInfo,
    CapabilityNotFoundError,
    validate_capability,
)
from .detection import DEFAULT_RULES, DetectionRule, detect

logger = logging.getLogger(__name__)


class CapabilityCatalog:
    """Snapshot of registered capabilities, iterable any number of times."""

    def __init__(self, capabilities: Iterable[Capability]):
        self._items = tuple(capabilities)

    def __iter__(self) -> Iterator[CapabilityInfo]:
        return (CapabilityInfo.of(c) for c in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def to_list(self) -> list[dict[str, Any]]:
        return [info.model_dump() for info in self]


class CapabilityRegistry:
    """In-memory capability table with an ordered detection rule set."""

    def __init__(self, rules: Iterable[DetectionRule] | None = None):
        self._capabilities: dict[str, Capability] = {}
        self.rules: tuple[DetectionRule, ...] = tuple(rules) if rules is not None else DEFAULT_RULES
        self.load_errors: dict[str, str] = {}

    def register(self, capability: Capability) -> None:
        validate_capability(capability)
        if capability.name in self._capabilities:
            logger.debug(f"Replacing capability '{capability.name}'")
        self._capabilities[capability.name] = capability

    def get(self, name: str) -> Capability | None:
        if not isinstance(name, str):
            return None
        return self._capabilities.get(name)

    def list(self) -> CapabilityCatalog:
        return CapabilityCatalog(self._capabilities.values())

    def names(self) -> list[str]:
        return list(self._capabilities.keys())

    def count(self) -> int:
        return len(self._capabilities)

    def __len__(self) -> int:
        return len(self._capabilities)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._capabilities

    def detect(self, text: str | None) -> str | None:
        return detect(text, self.rules)

    async def execute(self, name: str, input: Any = None, options: dict[str, Any] | None = None) -> Any:
        capability = self.get(name)
        if capability is None:
            raise CapabilityNotFoundError(name)

        try:
            result = capability.execute(input, options or {})
            if inspect.isawaitable(result):
                result = await result
        except CapabilityExecutionError:
            raise
        except Exception as e:
            raise CapabilityExecutionError(str(e), name, getattr(e, "detail", None)) from e
        return result


_registry: CapabilityRegistry | None = None


def get_registry() -> CapabilityRegistry:
    global _registry
    if _registry is None:
        _registry = CapabilityRegistry()
    return _registry


def set_registry(registry: CapabilityRegistry) -> None:
    global _registry
    _registry = registry
