from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load YAML config (config/updater.yml by default)
- Validate against the packaged JSON schema (no extra keys allowed)
- Apply defaults (direct gateway against the public API, 30s timeout)

Only transport settings and default column names live here. The API key is
never read from this file; it comes from the command line or the
SAFETYCULTURE_API_KEY environment variable.
"""

__all__ = [
    "ConfigError",
    "GatewayConfig",
    "MappingConfig",
    "UpdaterConfig",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "default_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/updater.yml")

DEFAULT_DIRECT_URL = "https://api.safetyculture.io"
DEFAULT_TIMEOUT_SECONDS = 30.0


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class GatewayConfig:
    mode: str  # "direct" | "proxy"
    base_url: str
    timeout_seconds: float


@dataclass(frozen=True)
class MappingConfig:
    """Default column names; CLI flags take precedence."""
    record_id_column: str | None = None
    status_column: str | None = None
    notes_column: str | None = None


@dataclass(frozen=True)
class UpdaterConfig:
    gateway: GatewayConfig
    mapping: MappingConfig
    source: Path | None = None  # None = built-in defaults


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails validation (unknown keys, wrong types, bad enum value).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _build(data: dict[str, Any], source: Path | None) -> UpdaterConfig:
    gw_raw = data.get("gateway") or {}
    mode = gw_raw.get("mode", "direct")
    base_url = gw_raw.get("base_url")
    if base_url is None:
        if mode == "proxy":
            raise ConfigError("gateway.base_url is required when gateway.mode is 'proxy'")
        base_url = DEFAULT_DIRECT_URL
    map_raw = data.get("mapping") or {}
    return UpdaterConfig(
        gateway=GatewayConfig(
            mode=mode,
            base_url=base_url,
            timeout_seconds=float(gw_raw.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        ),
        mapping=MappingConfig(
            record_id_column=map_raw.get("record_id_column"),
            status_column=map_raw.get("status_column"),
            notes_column=map_raw.get("notes_column"),
        ),
        source=source,
    )


def default_config() -> UpdaterConfig:
    return _build({}, None)


def load_config(path: Path) -> UpdaterConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)
    return _build(data, path)
