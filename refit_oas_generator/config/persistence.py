"""
Persisted settings documents.

A settings document is the JSON form of a ``GenerationConfig`` with
camelCase keys. Missing keys fall back to defaults and unknown keys are
ignored, so older documents keep loading.
"""

from __future__ import annotations

import json
from dataclasses import MISSING, fields, is_dataclass
from enum import Enum
from typing import Any, Final, TypeVar

from refit_oas_generator.config.settings import GenerationConfig
from refit_oas_generator.errors import ConfigurationError
from refit_oas_generator.utils.string_case import camelcase

T = TypeVar("T")

# Keys that do not follow the plain camelCase of the field name
_KEY_ALIASES: Final = {
    "specification_path": "openApiPath",
    "use_document_title": "useOpenApiTitle",
    "contract_output_filename": "contractsOutputFilename",
}


def _key_for(field_name: str) -> str:
    return _KEY_ALIASES.get(field_name) or camelcase(field_name)


def _default_of(dataclass_field: Any) -> Any:  # noqa: ANN401
    if dataclass_field.default is not MISSING:
        return dataclass_field.default
    return dataclass_field.default_factory()


def _serialize_value(value: Any) -> Any:  # noqa: ANN401
    if is_dataclass(value):
        return to_dict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return list(value)
    return value


def to_dict(settings: Any) -> dict[str, Any]:  # noqa: ANN401
    """Convert a settings dataclass into its persisted mapping."""
    return {_key_for(f.name): _serialize_value(getattr(settings, f.name)) for f in fields(settings)}


def _deserialize_value(name: str, raw: Any, default: Any) -> Any:  # noqa: ANN401, C901
    if is_dataclass(default):
        if not isinstance(raw, dict):
            msg = f"Setting '{name}' must be an object"
            raise ConfigurationError(msg)
        return from_dict(type(default), raw)

    if isinstance(default, Enum):
        enum_type = type(default)
        try:
            return enum_type(raw)
        except ValueError:
            allowed = ", ".join(member.value for member in enum_type)
            msg = f"Setting '{name}' has invalid value {raw!r} (expected one of: {allowed})"
            raise ConfigurationError(msg) from None

    if isinstance(default, bool):
        if not isinstance(raw, bool):
            msg = f"Setting '{name}' must be true or false"
            raise ConfigurationError(msg)
        return raw

    if isinstance(default, tuple):
        if raw is None:
            return ()
        if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
            msg = f"Setting '{name}' must be a list of strings"
            raise ConfigurationError(msg)
        return tuple(raw)

    if raw is not None and not isinstance(raw, str):
        msg = f"Setting '{name}' must be a string"
        raise ConfigurationError(msg)
    if raw is None and default is not None:
        return default
    return raw


def from_dict(settings_type: type[T], data: dict[str, Any]) -> T:
    """Build a settings dataclass from its persisted mapping."""
    values = {}
    for f in fields(settings_type):  # type: ignore[arg-type]
        key = _key_for(f.name)
        if key not in data:
            continue
        values[f.name] = _deserialize_value(key, data[key], _default_of(f))
    return settings_type(**values)


def dumps(config: GenerationConfig) -> str:
    """Serialize a configuration to a settings document."""
    return json.dumps(to_dict(config), indent=2) + "\n"


def loads(document: str | bytes) -> GenerationConfig:
    """Parse a settings document.

    Raises:
        ConfigurationError: If the document is not a JSON object or holds
            values of the wrong type.
    """
    try:
        data = json.loads(document)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        msg = f"Invalid settings file: {e}"
        raise ConfigurationError(msg) from e

    if not isinstance(data, dict):
        msg = "Invalid settings file: the root must be a JSON object"
        raise ConfigurationError(msg)

    return from_dict(GenerationConfig, data)
