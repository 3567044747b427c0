"""Category mapping loader.

The mapping file is YAML: each top-level key is a category label and its value
is the list of document identifiers filed under it.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .errors import ScriptError
from .exit_codes import ERR_CONFIG

CategoryMapping = dict[str, list[str]]

DEFAULT_CONFIG = Path("configs/docs/subcategories.yaml")
SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "subcategory-config.schema.json"


def load_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ScriptError(f"config file not found: {path}", ERR_CONFIG, kind="config_missing") from exc
    except OSError as exc:
        raise ScriptError(f"cannot read config file {path}: {exc}", ERR_CONFIG, kind="config_unreadable") from exc
    except yaml.YAMLError as exc:
        raise ScriptError(f"invalid YAML in {path}: {exc}", ERR_CONFIG, kind="config_parse") from exc


def validate_mapping(payload: Any, source: Path) -> None:
    import jsonschema

    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        pointer = "/".join(str(p) for p in exc.absolute_path)
        loc = pointer or "<root>"
        raise ScriptError(
            f"config validation failed for {source} at {loc}: {exc.message}",
            ERR_CONFIG,
            kind="config_invalid",
        ) from exc


def load_category_mapping(path: Path) -> CategoryMapping:
    payload = load_yaml(path)
    validate_mapping(payload, path)
    return {category: list(ids) for category, ids in payload.items()}
