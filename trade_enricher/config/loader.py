from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_ERROR_LOG_DIRECTORY,
    DEFAULT_OUTPUT_DIRECTORY,
    EnricherConfig,
    ProductDataConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config (default config/enricher.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults (output_directory, error_log_directory)
- Apply environment overrides (PRODUCT_DATA_FILE)
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "PRODUCT_FILE_ENV",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/enricher.yml")
PRODUCT_FILE_ENV = "PRODUCT_DATA_FILE"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the config data
            fails schema validation (missing keys, wrong types, extra keys).
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


def load_config(path: Path) -> EnricherConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    # 環境変数 (.env 読み込み後) が YAML より優先
    product_file = os.getenv(PRODUCT_FILE_ENV) or data["product_data"]["file_path"]
    return EnricherConfig(
        product_data=ProductDataConfig(file_path=product_file),
        source_directory=data["source_directory"],
        output_directory=data.get("output_directory", DEFAULT_OUTPUT_DIRECTORY),
        error_log_directory=data.get("error_log_directory", DEFAULT_ERROR_LOG_DIRECTORY),
    )
