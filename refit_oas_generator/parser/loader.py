"""
OpenAPI document loading.

Reads a specification from a local file or an http(s) URL, decodes JSON or
YAML and detects the declared specification version. The result is an
``OpenApiDocument`` snapshot shared by every generation pass of a run.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Final

import requests
import yaml

from refit_oas_generator.config.resolver import is_url
from refit_oas_generator.errors import DocumentLoadError

REQUEST_TIMEOUT_SECONDS: Final = 30

_YAML_SUFFIXES: Final = frozenset({".yaml", ".yml"})
_SWAGGER_VERSION_PATTERN: Final = re.compile(r"^2\.0$")
_OPENAPI_VERSION_PATTERN: Final = re.compile(r"^3\.[01](\.\d+)?(-.+)?$")


class DocumentDecodeError(ValueError):
    """The document text is neither valid JSON nor valid YAML."""


@dataclass(frozen=True)
class OpenApiDocument:
    """A loaded specification document.

    Attributes:
        source: The path or URL the document was read from.
        version: The declared ``swagger`` or ``openapi`` version.
        content: The decoded document, read-only at the top level.
    """

    source: str
    version: str
    content: MappingProxyType[str, Any]

    @property
    def is_swagger_v2(self) -> bool:
        return self.version.startswith("2")

    @property
    def title(self) -> str:
        info = self.content.get("info") or {}
        return str(info.get("title") or "")


def read_specification(source: str) -> str:
    """Read the raw text of a specification.

    Args:
        source: Local file path or http(s) URL.

    Returns:
        The document text.

    Raises:
        DocumentLoadError: If the document cannot be read.
    """
    if is_url(source):
        try:
            response = requests.get(source, timeout=REQUEST_TIMEOUT_SECONDS)
            response.raise_for_status()
        except requests.RequestException as e:
            msg = f"Unable to download specification from {source}: {e}"
            raise DocumentLoadError(msg, source=source) from e
        return response.text

    try:
        return Path(source).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        msg = f"Unable to read specification file {source}: {e}"
        raise DocumentLoadError(msg, source=source, exit_code=getattr(e, "errno", None)) from e


def _source_suffix(source: str) -> str:
    return Path(source.split("?", 1)[0]).suffix.lower()


def decode_specification(text: str, source: str) -> Any:  # noqa: ANN401
    """Decode JSON or YAML text.

    YAML is chosen by file suffix; other documents are tried as JSON first
    and then as YAML.

    Raises:
        DocumentDecodeError: If the text cannot be decoded.
    """
    if _source_suffix(source) in _YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            msg = f"Invalid YAML: {e}"
            raise DocumentDecodeError(msg) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as json_error:
        if _source_suffix(source) == ".json":
            msg = f"Invalid JSON: {json_error}"
            raise DocumentDecodeError(msg) from json_error
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            msg = f"Invalid JSON or YAML: {e}"
            raise DocumentDecodeError(msg) from e


def detect_version(content: dict[str, Any], source: str) -> str:
    """Return the declared specification version.

    Raises:
        DocumentLoadError: If no version is declared or the declared version
            is not Swagger 2.0 or OpenAPI 3.0/3.1. The exception carries the
            declared version string when there is one.
    """
    if "openapi" in content:
        version = str(content["openapi"]).strip()
        if _OPENAPI_VERSION_PATTERN.match(version):
            return version
    elif "swagger" in content:
        version = str(content["swagger"]).strip()
        if _SWAGGER_VERSION_PATTERN.match(version):
            return version
    else:
        msg = f"Unable to determine the specification version of {source}"
        raise DocumentLoadError(msg, source=source)

    msg = f"Unsupported OpenAPI version: {version}"
    raise DocumentLoadError(msg, source=source, version=version)


def parse_specification(text: str, source: str) -> dict[str, Any]:
    """Decode a specification and check its version.

    Raises:
        DocumentLoadError: If the text cannot be decoded, is not a mapping,
            or declares an unsupported version.
    """
    try:
        content = decode_specification(text, source)
    except DocumentDecodeError as e:
        msg = f"Unable to parse specification {source}: {e}"
        raise DocumentLoadError(msg, source=source) from e

    if not isinstance(content, dict):
        msg = f"Specification {source} must be a JSON or YAML object"
        raise DocumentLoadError(msg, source=source)

    detect_version(content, source)
    return content


def document_from_text(text: str, source: str) -> OpenApiDocument:
    """Build a document snapshot from already read text.

    Raises:
        DocumentLoadError: If the text is undecodable or declares an
            unsupported version.
    """
    content = parse_specification(text, source)
    return OpenApiDocument(
        source=source,
        version=detect_version(content, source),
        content=MappingProxyType(content),
    )


def load_document(source: str) -> OpenApiDocument:
    """Load a specification document.

    Args:
        source: Local file path or http(s) URL.

    Returns:
        The loaded document snapshot.

    Raises:
        DocumentLoadError: If the document is unreadable, undecodable, or
            declares an unsupported version.
    """
    return document_from_text(read_specification(source), source)
