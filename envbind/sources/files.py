"""Configuration file source.

Structured files are decoded by their own format library and copied onto
the record as-is; the string coercion rules do not apply to them. ``.env``
files are returned as extra environment entries instead.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml
from dotenv import dotenv_values

from ..core.errors import FileLoadError, SchemaError
from ..core.fields import TAG_FILE_KEY
from ..core.types import is_record_type, resolve_hints

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}
JSON_SUFFIXES = {".json"}
TOML_SUFFIXES = {".toml"}
ENV_SUFFIXES = {".env"}


def _read_document(path: Path) -> Any:
    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    if suffix in JSON_SUFFIXES:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    if suffix in TOML_SUFFIXES:
        with open(path, "rb") as f:
            return tomllib.load(f)
    raise FileLoadError(f"file format '{path.suffix}' is not supported")


def parse_file(path: Union[str, Path], cfg: Any) -> Dict[str, str]:
    """Load a configuration file into ``cfg``.

    Args:
        path: File to load. The suffix selects the format.
        cfg: Root dataclass instance to update in place.

    Returns:
        Environment entries read from a ``.env`` file, otherwise empty.

    Raises:
        FileLoadError: If the file is missing, malformed, or of an
            unsupported format.
        SchemaError: If ``cfg`` is not a dataclass instance.
    """
    path = Path(path)
    if not path.is_file():
        raise FileLoadError(f"config file {path} does not exist")

    if path.suffix.lower() in ENV_SUFFIXES or path.name == ".env":
        values = dotenv_values(path)
        logger.debug("read %d entries from %s", len(values), path)
        return {k: v for k, v in values.items() if v is not None}

    try:
        data = _read_document(path)
    except (yaml.YAMLError, json.JSONDecodeError, tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise FileLoadError(f"invalid config file {path}: {e}") from e
    except OSError as e:
        raise FileLoadError(f"cannot read config file {path}: {e}") from e

    if not isinstance(data, Mapping):
        raise FileLoadError(f"config file {path} must contain a mapping at the top level")
    apply_document(cfg, data)
    logger.debug("loaded config file %s", path)
    return {}


def apply_document(cfg: Any, data: Mapping[str, Any]) -> None:
    """Copy a decoded document onto a dataclass record.

    Keys are matched against each field's ``file-key`` metadata, falling
    back to the field name. Mappings under a nested dataclass field update
    that nested record. Unknown keys are ignored; private fields and frozen
    records are left untouched.
    """
    if not dataclasses.is_dataclass(cfg) or isinstance(cfg, type):
        raise SchemaError(f"wrong type {type(cfg).__name__}, expected a dataclass instance")
    if type(cfg).__dataclass_params__.frozen:
        return

    hints = resolve_hints(cfg)
    for f in dataclasses.fields(cfg):
        if f.name.startswith("_"):
            continue
        key = f.metadata.get(TAG_FILE_KEY, f.name)
        if key not in data:
            continue
        value = data[key]
        tp = hints.get(f.name, f.type)
        if is_record_type(tp) and isinstance(value, Mapping):
            nested = getattr(cfg, f.name)
            if nested is None:
                nested = _record_class(tp)()
                setattr(cfg, f.name, nested)
            apply_document(nested, value)
        else:
            setattr(cfg, f.name, value)


def _record_class(tp: Any) -> Any:
    for candidate in getattr(tp, "__args__", (tp,)):
        if dataclasses.is_dataclass(candidate):
            return candidate
    return tp
