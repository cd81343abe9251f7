"""
OpenAPI document validation.

Validation reports every recoverable document problem as a structured
``ValidationIssue`` instead of raising, so the caller decides whether an
invalid document is fatal. Only unreadable sources and unsupported
specification versions raise, as ``DocumentLoadError``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Final

from refit_oas_generator.errors import DocumentValidationError
from refit_oas_generator.parser.loader import (
    DocumentDecodeError,
    decode_specification,
    detect_version,
    read_specification,
)
from refit_oas_generator.parser.oas_parser import HTTP_METHODS

_PARAMETER_LOCATIONS_V2: Final = frozenset({"query", "header", "path", "formData", "body"})
_PARAMETER_LOCATIONS_V3: Final = frozenset({"query", "header", "path", "cookie"})
_PATH_TEMPLATE_PATTERN: Final = re.compile(r"\{([^}/]+)\}")


def _escape_pointer(segment: str) -> str:
    return str(segment).replace("~", "~0").replace("/", "~1")


def pointer(*segments: Any) -> str:  # noqa: ANN401
    """Build a JSON pointer fragment such as ``#/paths/~1pets/get``."""
    return "#" + "".join(f"/{_escape_pointer(s)}" for s in segments)


def _as_list(value: Any) -> list[Any]:  # noqa: ANN401
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> dict[str, Any]:  # noqa: ANN401
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation error or warning."""

    message: str
    pointer: str = "#"

    def __str__(self) -> str:
        return f"{self.message} [{self.pointer}]"


@dataclass
class ValidationDiagnostics:
    """Errors and warnings found in a document."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)


@dataclass
class DocumentStatistics:
    """Element counts of a document."""

    path_items: int = 0
    operations: int = 0
    parameters: int = 0
    request_bodies: int = 0
    responses: int = 0
    schemas: int = 0
    tags: int = 0

    def __str__(self) -> str:
        rows = [
            ("Path Items", self.path_items),
            ("Operations", self.operations),
            ("Parameters", self.parameters),
            ("Request Bodies", self.request_bodies),
            ("Responses", self.responses),
            ("Schemas", self.schemas),
            ("Tags", self.tags),
        ]
        width = max(len(label) for label, _ in rows)
        return "\n".join(f" - {label.ljust(width)} : {value}" for label, value in rows)


@dataclass
class ValidationResult:
    """Outcome of validating a document."""

    source: str
    diagnostics: ValidationDiagnostics
    statistics: DocumentStatistics
    version: str | None = None

    @property
    def is_valid(self) -> bool:
        return not self.diagnostics.errors

    def raise_if_invalid(self) -> None:
        """Raise ``DocumentValidationError`` when the document has errors."""
        if not self.is_valid:
            count = len(self.diagnostics.errors)
            msg = f"OpenAPI validation failed with {count} error(s): {self.source}"
            raise DocumentValidationError(msg, self)


class DocumentValidator:
    """Structural validator for Swagger 2.0 and OpenAPI 3.x documents."""

    def __init__(self, content: dict[str, Any], version: str) -> None:
        self.content = content
        self.version = version
        self.is_swagger_v2 = version.startswith("2")
        self.errors: list[ValidationIssue] = []
        self.warnings: list[ValidationIssue] = []

    def _error(self, message: str, location: str) -> None:
        self.errors.append(ValidationIssue(message, location))

    def _warning(self, message: str, location: str) -> None:
        self.warnings.append(ValidationIssue(message, location))

    def validate(self) -> ValidationDiagnostics:
        """Run every rule and return the collected diagnostics."""
        self._validate_info()
        self._validate_containers()
        self._validate_paths()
        self._validate_references()
        return ValidationDiagnostics(errors=self.errors, warnings=self.warnings)

    def _validate_info(self) -> None:
        info = self.content.get("info")
        if not isinstance(info, dict):
            self._error("The field 'info' in 'document' object is REQUIRED.", pointer())
            return
        for required in ("title", "version"):
            if info.get(required) in (None, ""):
                self._error(f"The field '{required}' in 'info' object is REQUIRED.", pointer("info"))

    def _validate_containers(self) -> None:
        tags = self.content.get("tags")
        if tags is not None and not isinstance(tags, list):
            self._error("The field 'tags' must be an array.", pointer("tags"))

        key = "definitions" if self.is_swagger_v2 else "components"
        container = self.content.get(key)
        if container is not None and not isinstance(container, dict):
            self._error(f"The field '{key}' must be an object.", pointer(key))

    def _iter_operations(self) -> Iterator[tuple[str, str, dict[str, Any], dict[str, Any]]]:
        for path, path_item in (self.content.get("paths") or {}).items():
            if not isinstance(path_item, dict):
                continue
            for method, operation in path_item.items():
                if str(method).lower() in HTTP_METHODS and isinstance(operation, dict):
                    yield str(path), str(method), path_item, operation

    def _validate_paths(self) -> None:
        paths = self.content.get("paths")
        if paths is None:
            is_v31 = self.version.startswith("3.1")
            if not (is_v31 and (self.content.get("webhooks") or self.content.get("components"))):
                self._error("The field 'paths' in 'document' object is REQUIRED.", pointer())
            return
        if not isinstance(paths, dict):
            self._error("The field 'paths' must be an object.", pointer("paths"))
            return

        for path, path_item in paths.items():
            if not str(path).startswith("/"):
                self._error(f"The path '{path}' MUST begin with '/'.", pointer("paths", path))
            if not isinstance(path_item, dict):
                self._error("A path item must be an object.", pointer("paths", path))
                continue
            self._validate_parameters(path_item.get("parameters") or [], ("paths", path, "parameters"))

        operation_ids: dict[str, str] = {}
        for path, method, path_item, operation in self._iter_operations():
            location = ("paths", path, method)
            self._validate_operation(path, path_item, operation, location)

            operation_id = operation.get("operationId")
            if operation_id is None:
                self._warning("The operation has no 'operationId'.", pointer(*location))
            elif not isinstance(operation_id, str):
                self._error("The field 'operationId' must be a string.", pointer(*location, "operationId"))
            elif operation_id in operation_ids:
                self._error(
                    f"OperationId '{operation_id}' is already used by {operation_ids[operation_id]}.",
                    pointer(*location, "operationId"),
                )
            else:
                operation_ids[operation_id] = pointer(*location)

    def _validate_operation(
        self,
        path: str,
        path_item: dict[str, Any],
        operation: dict[str, Any],
        location: tuple[str, ...],
    ) -> None:
        self._validate_parameters(operation.get("parameters") or [], (*location, "parameters"))

        tags = operation.get("tags")
        if tags is not None and not isinstance(tags, list):
            self._error("The field 'tags' must be an array.", pointer(*location, "tags"))

        responses = operation.get("responses")
        if not isinstance(responses, dict) or not responses:
            self._error("The field 'responses' in 'operation' object is REQUIRED.", pointer(*location))
        else:
            for status_code, response in responses.items():
                response = self._resolve(response) if isinstance(response, dict) else response
                if isinstance(response, dict) and not response.get("description"):
                    self._warning(
                        "The field 'description' in 'response' object is REQUIRED.",
                        pointer(*location, "responses", status_code),
                    )

        declared = set()
        for parameter in [*_as_list(path_item.get("parameters")), *_as_list(operation.get("parameters"))]:
            if isinstance(parameter, dict):
                resolved = self._resolve(parameter)
                if resolved.get("in") == "path":
                    declared.add(resolved.get("name"))
        for variable in _PATH_TEMPLATE_PATTERN.findall(path):
            if variable not in declared:
                self._error(
                    f"The path parameter '{variable}' is not declared for the operation.",
                    pointer(*location),
                )

    def _validate_parameters(self, parameters: Any, location: tuple[str, ...]) -> None:  # noqa: ANN401
        if not isinstance(parameters, list):
            self._error("The field 'parameters' must be an array.", pointer(*location))
            return

        allowed = _PARAMETER_LOCATIONS_V2 if self.is_swagger_v2 else _PARAMETER_LOCATIONS_V3
        for index, parameter in enumerate(parameters):
            if not isinstance(parameter, dict):
                self._error("A parameter must be an object.", pointer(*location, index))
                continue
            if "$ref" in parameter:
                continue
            if not parameter.get("name"):
                self._error("The field 'name' in 'parameter' object is REQUIRED.", pointer(*location, index))
            parameter_in = parameter.get("in")
            if parameter_in is None:
                self._error("The field 'in' in 'parameter' object is REQUIRED.", pointer(*location, index))
            elif parameter_in not in allowed:
                self._error(f"The parameter location '{parameter_in}' is not valid.", pointer(*location, index, "in"))
            elif parameter_in == "path" and parameter.get("required") is not True:
                self._error(
                    f"The path parameter '{parameter.get('name')}' MUST be required.",
                    pointer(*location, index, "required"),
                )

    def _resolve(self, data: dict[str, Any]) -> dict[str, Any]:
        ref = data.get("$ref")
        if not isinstance(ref, str) or not ref.startswith("#/"):
            return data
        target = self._lookup(ref)
        return target if isinstance(target, dict) else {}

    def _lookup(self, ref: str) -> Any:  # noqa: ANN401
        node: Any = self.content
        for part in ref[2:].split("/"):
            part = part.replace("~1", "/").replace("~0", "~")
            if isinstance(node, dict) and part in node:
                node = node[part]
            elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
                node = node[int(part)]
            else:
                return None
        return node

    def _iter_refs(self, node: Any, path: tuple[Any, ...] = ()) -> Iterator[tuple[str, tuple[Any, ...]]]:  # noqa: ANN401
        if isinstance(node, dict):
            for key, value in node.items():
                if key == "$ref" and isinstance(value, str):
                    yield value, path
                else:
                    yield from self._iter_refs(value, (*path, key))
        elif isinstance(node, list):
            for index, item in enumerate(node):
                yield from self._iter_refs(item, (*path, index))

    def _validate_references(self) -> None:
        for ref, location in self._iter_refs(self.content):
            if ref.startswith("#"):
                if ref != "#" and self._lookup(ref) is None:
                    self._error(f"The reference '{ref}' cannot be resolved.", pointer(*location))
            else:
                self._warning(f"The external reference '{ref}' is not validated.", pointer(*location))


def collect_statistics(content: dict[str, Any]) -> DocumentStatistics:
    """Count the elements of a document."""
    stats = DocumentStatistics()
    paths = _as_dict(content.get("paths"))
    root_tags = _as_list(content.get("tags"))
    tags: set[str] = {str(t.get("name")) for t in root_tags if isinstance(t, dict) and t.get("name")}

    for path_item in paths.values():
        if not isinstance(path_item, dict):
            continue
        stats.path_items += 1
        stats.parameters += len(_as_list(path_item.get("parameters")))
        for method, operation in path_item.items():
            if str(method).lower() not in HTTP_METHODS or not isinstance(operation, dict):
                continue
            stats.operations += 1
            parameters = [p for p in _as_list(operation.get("parameters")) if isinstance(p, dict)]
            stats.parameters += len(parameters)
            if "requestBody" in operation or any(p.get("in") in {"body", "formData"} for p in parameters):
                stats.request_bodies += 1
            stats.responses += len(_as_dict(operation.get("responses")))
            tags.update(str(tag) for tag in _as_list(operation.get("tags")))

    if "swagger" in content:
        schemas = _as_dict(content.get("definitions"))
    else:
        schemas = _as_dict(_as_dict(content.get("components")).get("schemas"))
    stats.schemas = len(schemas)
    stats.tags = len(tags)
    return stats


def validate_content(content: Any, source: str) -> ValidationResult:  # noqa: ANN401
    """Validate an already decoded document.

    Raises:
        DocumentLoadError: If the document declares an unsupported version.
    """
    if not isinstance(content, dict):
        issue = ValidationIssue("The document root must be an object.", pointer())
        return ValidationResult(source, ValidationDiagnostics(errors=[issue]), DocumentStatistics())

    if "openapi" not in content and "swagger" not in content:
        issue = ValidationIssue("The field 'openapi' or 'swagger' in 'document' object is REQUIRED.", pointer())
        return ValidationResult(source, ValidationDiagnostics(errors=[issue]), collect_statistics(content))

    version = detect_version(content, source)
    diagnostics = DocumentValidator(content, version).validate()
    return ValidationResult(source, diagnostics, collect_statistics(content), version=version)


def validate_text(text: str, source: str) -> ValidationResult:
    """Validate the raw text of a document.

    Syntax errors are reported as diagnostics.

    Raises:
        DocumentLoadError: If the document declares an unsupported version.
    """
    try:
        content = decode_specification(text, source)
    except DocumentDecodeError as e:
        issue = ValidationIssue(str(e), pointer())
        return ValidationResult(source, ValidationDiagnostics(errors=[issue]), DocumentStatistics())
    return validate_content(content, source)


def validate_document(source: str) -> ValidationResult:
    """Read and validate a specification document.

    Args:
        source: Local file path or http(s) URL.

    Returns:
        The validation result; syntax errors are reported as diagnostics.

    Raises:
        DocumentLoadError: If the document cannot be read or declares an
            unsupported version.
    """
    return validate_text(read_specification(source), source)
