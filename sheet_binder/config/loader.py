from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..binding.case import Case
from ..models.config_models import DEFAULT_EXPORT_URL, ImportConfig, SourceOverride

"""Config loader.

Responsibilities:
- Load YAML (default ``config/import.yml``)
- Validate against the bundled JSON schema (``import_schema.json``)
- Apply defaults and build the typed ImportConfig
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/import.yml")
SCHEMA_PATH = Path(__file__).parent / "import_schema.json"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: The schema file is missing or invalid, or the config data
            fails validation (unknown keys, wrong types, bad patterns).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path)
        suffix = f" (at {location})" if location else ""
        raise ConfigError(f"config validation failed: {e.message}{suffix}") from e


def _source_override(raw: dict[str, Any]) -> SourceOverride:
    gid = raw.get("gid")
    return SourceOverride(
        spreadsheet_id=raw["spreadsheet_id"],
        path=raw["path"],
        gid=None if gid is None else str(gid),
        sheet=raw.get("sheet"),
    )


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    return ImportConfig(
        modules=list(data.get("modules", [])),
        registry=data.get("registry"),
        object_store=data.get("object_store"),
        key_column=data.get("key_column", "Name"),
        default_casing=Case.parse(data.get("default_casing", "none")),
        export_url_template=data.get("export_url_template", DEFAULT_EXPORT_URL),
        sources=[_source_override(s) for s in data.get("sources", [])],
        error_log_dir=data.get("error_log_dir", "./logs"),
    )
