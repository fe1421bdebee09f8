"""
RAHL configuration.

Server settings, enabled capabilities and the detection rule table.
Reads from ~/.rahl/config.toml with environment variable overrides.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rahl.capabilities.detection import DEFAULT_RULES, DetectionRule

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

RAHL_HOME = Path(os.getenv("RAHL_HOME", Path.home() / ".rahl"))
CONFIG_PATH = RAHL_HOME / "config.toml"

DEFAULT_FALLBACK_REPLY = (
    "I'm not sure which capability fits that. "
    "Try asking me to search, calculate, run code or analyze data."
)


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class RahlConfig:
    """Top-level RAHL configuration."""

    # Server
    host: str = "0.0.0.0"
    port: int = 10000

    # Capabilities, as "package.module:Factory" import paths
    capabilities: list[str] = field(default_factory=list)

    # Ordered; first match wins
    detection_rules: list[DetectionRule] = field(default_factory=lambda: list(DEFAULT_RULES))

    # Chat
    fallback_reply: str = DEFAULT_FALLBACK_REPLY

    # Logging
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _apply_toml(config: RahlConfig, data: dict[str, Any]) -> None:
    """Overlay TOML data onto a RahlConfig."""
    server = data.get("server", {})
    if "host" in server:
        config.host = server["host"]
    if "port" in server:
        config.port = int(server["port"])

    capabilities = data.get("capabilities", {})
    if "enabled" in capabilities:
        config.capabilities = [str(p) for p in capabilities["enabled"]]

    # A [[detection]] table replaces the whole default rule list
    if "detection" in data:
        rules = []
        for i, entry in enumerate(data["detection"]):
            try:
                rules.append(DetectionRule.model_validate(entry))
            except ValidationError as e:
                raise ValueError(f"Invalid [[detection]] entry #{i + 1} ({entry!r}): {e}") from e
        config.detection_rules = rules

    chat = data.get("chat", {})
    if "fallback_reply" in chat:
        config.fallback_reply = chat["fallback_reply"]

    logging_cfg = data.get("logging", {})
    if "level" in logging_cfg:
        config.log_level = str(logging_cfg["level"]).upper()


def load_config(config_path: Path | None = None) -> RahlConfig:
    """
    Build config from defaults → TOML file → environment variables.

    Precedence (highest wins):
        1. Environment variables
        2. ~/.rahl/config.toml
        3. Built-in defaults
    """
    config = RahlConfig()

    path = config_path or CONFIG_PATH
    if path.exists():
        with open(path, "rb") as f:
            toml_data = tomllib.load(f)
        _apply_toml(config, toml_data)

    # Env overrides
    if os.getenv("RAHL_HOST"):
        config.host = os.getenv("RAHL_HOST")  # type: ignore[assignment]
    if os.getenv("RAHL_PORT"):
        config.port = int(os.getenv("RAHL_PORT"))  # type: ignore[arg-type]
    if os.getenv("RAHL_CAPABILITIES"):
        config.capabilities = [p.strip() for p in os.getenv("RAHL_CAPABILITIES", "").split(",") if p.strip()]
    if os.getenv("RAHL_LOG_LEVEL"):
        config.log_level = os.getenv("RAHL_LOG_LEVEL", "INFO").upper()

    return config


# ---------------------------------------------------------------------------
# Global singleton
# ---------------------------------------------------------------------------

_config: RahlConfig | None = None


def get_config() -> RahlConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config
