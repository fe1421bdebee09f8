"""
Capability contract and errors.

A capability is anything exposing ``name`` and ``execute(input, options)``.
Description and version are optional. No base class is required.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

DEFAULT_DESCRIPTION = "No description"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class CapabilityError(Exception):
    def __init__(self, message: str, capability: str | None = None):
        self.message = message
        self.capability = capability
        super().__init__(message)


class CapabilityNotFoundError(CapabilityError):
    def __init__(self, capability: str):
        super().__init__(f"Capability '{capability}' not found", capability)


class CapabilityExecutionError(CapabilityError):
    """Raised when a capability's own ``execute`` fails.

    ``message`` is the original error text, unmodified. ``detail`` carries any
    structured data the capability attached to its exception.
    """

    def __init__(self, message: str, capability: str, detail: Any = None):
        super().__init__(message, capability)
        self.detail = detail


class CapabilityLoadError(CapabilityError):
    pass


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------

@runtime_checkable
class Capability(Protocol):
    name: str

    def execute(self, input: Any, options: dict[str, Any] | None = None) -> Any:
        ...


class CapabilityInfo(BaseModel):
    """Discovery record for one registered capability."""
    name: str
    description: str = DEFAULT_DESCRIPTION
    version: str | None = None

    @classmethod
    def of(cls, capability: Any) -> CapabilityInfo:
        version = getattr(capability, "version", None)
        return cls(
            name=capability.name,
            description=getattr(capability, "description", None) or DEFAULT_DESCRIPTION,
            version=str(version) if version is not None else None,
        )


def validate_capability(obj: Any) -> None:
    """Raise CapabilityLoadError unless ``obj`` satisfies the capability contract."""
    name = getattr(obj, "name", None)
    if not isinstance(name, str) or not name:
        raise CapabilityLoadError(f"{type(obj).__name__} has no usable 'name'")
    if not callable(getattr(obj, "execute", None)):
        raise CapabilityLoadError(f"Capability '{name}' has no callable 'execute'", name)
    description = getattr(obj, "description", None)
    if description is not None and not isinstance(description, str):
        raise CapabilityLoadError(f"Capability '{name}' has a non-string 'description'", name)
