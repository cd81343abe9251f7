"""
OpenAPI Specification Parser for C# Refit Client Generation.

This module parses Swagger 2.0 and OpenAPI 3.x documents and extracts the
operations, parameters, request bodies, responses and schemas needed to
generate a Refit interface and its data contracts.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from refit_oas_generator.parser.loader import OpenApiDocument
from refit_oas_generator.parser.selection import OperationSelection
from refit_oas_generator.utils.string_case import (
    csharp_parameter_name,
    csharp_type_name,
    normalize_csharp_identifier,
    pascalcase,
)

# HTTP methods supported by OpenAPI
HTTP_METHODS: Final = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# Refit has no attribute for these methods
_UNSUPPORTED_METHODS: Final = frozenset({"trace"})

_STRING_FORMATS: Final = {
    "date": "DateTimeOffset",
    "date-time": "DateTimeOffset",
    "uuid": "Guid",
    "guid": "Guid",
    "byte": "byte[]",
    "binary": "Stream",
    "uri": "string",
}

_NUMBER_FORMATS: Final = {
    "float": "float",
    "double": "double",
    "decimal": "decimal",
}

VALUE_TYPES: Final = frozenset(
    {"int", "long", "float", "double", "decimal", "bool", "DateTimeOffset", "Guid", "TimeSpan"}
)

_JSON_CONTENT_TYPES: Final = ("application/json", "text/json")
_MULTIPART_CONTENT_TYPE: Final = "multipart/form-data"
_URL_ENCODED_CONTENT_TYPE: Final = "application/x-www-form-urlencoded"

_SCHEMA_REF_PREFIXES: Final = ("#/components/schemas/", "#/definitions/")


def extract_ref_name(ref_string: str) -> str:
    """Extract the reference name from an OpenAPI $ref string.

    Args:
        ref_string: The $ref value (e.g., "#/components/schemas/Model").

    Returns:
        The extracted reference name (e.g., "Model").
    """
    return ref_string.split("/")[-1].replace("~1", "/").replace("~0", "~")


def is_schema_ref(ref_string: str) -> bool:
    return ref_string.startswith(_SCHEMA_REF_PREFIXES)


def _schema_type(schema: Mapping[str, Any]) -> str | None:
    """Return the declared type, ignoring "null" in OpenAPI 3.1 type lists."""
    declared = schema.get("type")
    if isinstance(declared, list):
        non_null = [t for t in declared if t != "null"]
        return non_null[0] if non_null else None
    return declared


def _is_nullable(schema: Mapping[str, Any]) -> bool:
    declared = schema.get("type")
    return bool(schema.get("nullable") or schema.get("x-nullable")) or (
        isinstance(declared, list) and "null" in declared
    )


def _prefer_content_type(content_types: Iterable[str]) -> str | None:
    """Pick the content type whose schema describes the payload best."""
    candidates = list(content_types)
    if not candidates:
        return None
    for preferred in _JSON_CONTENT_TYPES:
        if preferred in candidates:
            return preferred
    for content_type in candidates:
        if "json" in content_type:
            return content_type
    for preferred in (_MULTIPART_CONTENT_TYPE, _URL_ENCODED_CONTENT_TYPE):
        if preferred in candidates:
            return preferred
    return candidates[0]


@dataclass
class Parameter:
    """Represents an operation parameter."""

    name: str
    location: str
    csharp_type: str
    required: bool
    description: str | None = None
    format: str | None = None
    csharp_name: str = field(init=False)

    def __post_init__(self) -> None:
        self.csharp_name = csharp_parameter_name(self.name) or "value"

    @property
    def needs_alias(self) -> bool:
        """Check if the C# identifier differs from the name on the wire."""
        return self.csharp_name.lstrip("@") != self.name


@dataclass
class RequestBody:
    """Represents a request body or the form fields of a form request."""

    csharp_type: str
    content_type: str
    required: bool
    description: str | None = None
    form_fields: list[Parameter] = field(default_factory=list)

    @property
    def is_multipart(self) -> bool:
        return self.content_type == _MULTIPART_CONTENT_TYPE

    @property
    def is_url_encoded(self) -> bool:
        return self.content_type == _URL_ENCODED_CONTENT_TYPE


@dataclass
class Response:
    """Represents an operation response."""

    status_code: str
    description: str
    csharp_type: str | None = None
    content_types: list[str] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.status_code.startswith("2")


@dataclass
class Operation:
    """Represents an OpenAPI operation."""

    operation_id: str | None
    method: str
    path: str
    summary: str | None
    description: str | None
    parameters: list[Parameter]
    request_body: RequestBody | None
    responses: dict[str, Response]
    tags: list[str]
    deprecated: bool = False
    produces: list[str] = field(default_factory=list)

    @property
    def success_response(self) -> Response | None:
        """The lowest 2xx response, falling back to ``default``."""
        successes = sorted((r for r in self.responses.values() if r.is_success), key=lambda r: r.status_code)
        if successes:
            return successes[0]
        return self.responses.get("default")

    @property
    def return_type(self) -> str | None:
        response = self.success_response
        return response.csharp_type if response else None

    @property
    def first_tag(self) -> str | None:
        return self.tags[0] if self.tags else None


@dataclass
class Property:
    """Represents a schema property."""

    name: str
    csharp_type: str
    required: bool
    description: str | None = None
    csharp_name: str = field(init=False)

    def __post_init__(self) -> None:
        self.csharp_name = csharp_type_name(self.name) or "Value"


@dataclass
class EnumMember:
    """Represents one member of an enum contract."""

    csharp_name: str
    value: Any

    @property
    def is_string(self) -> bool:
        return isinstance(self.value, str)


@dataclass
class Schema:
    """Represents a schema component that becomes a data contract."""

    name: str
    kind: str
    description: str | None
    properties: list[Property] = field(default_factory=list)
    enum_members: list[EnumMember] = field(default_factory=list)
    base_type: str | None = None
    collection_item_type: str | None = None
    allows_additional_properties: bool = True
    csharp_name: str = field(init=False)

    def __post_init__(self) -> None:
        self.csharp_name = csharp_type_name(self.name) or "Model"
        for prop in self.properties:
            if prop.csharp_name == self.csharp_name:
                prop.csharp_name = f"{prop.csharp_name}Property"

    @property
    def is_enum(self) -> bool:
        return self.kind == "enum"

    @property
    def is_collection(self) -> bool:
        return self.kind == "array"


@dataclass
class ParsedSpec:
    """Represents a parsed OpenAPI specification."""

    version: str
    info: dict[str, Any]
    servers: list[str]
    operations: list[Operation]
    schemas: dict[str, Schema]
    unresolved_refs: list[str] = field(default_factory=list)

    @property
    def title(self) -> str:
        return str(self.info.get("title") or "")

    @property
    def base_url(self) -> str | None:
        return self.servers[0] if self.servers else None


class OASParser:
    """Parser for Swagger 2.0 and OpenAPI 3.x specifications."""

    def __init__(self, selection: OperationSelection | None = None) -> None:
        self.selection = selection or OperationSelection()
        self.spec_data: dict[str, Any] = {}
        self.schemas: dict[str, Any] = {}
        self.is_swagger_v2 = False
        self.unresolved_refs: set[str] = set()

    def parse_document(self, document: OpenApiDocument) -> ParsedSpec:
        """Parse a loaded document."""
        return self.parse_dict(dict(document.content))

    def parse_dict(self, spec_dict: dict[str, Any]) -> ParsedSpec:
        """Parse OpenAPI specification from dictionary."""
        self.spec_data = spec_dict
        self.is_swagger_v2 = "swagger" in spec_dict
        self.unresolved_refs = set()
        if self.is_swagger_v2:
            self.schemas = dict(spec_dict.get("definitions") or {})
        else:
            self.schemas = dict((spec_dict.get("components") or {}).get("schemas") or {})
        return self._parse_spec()

    def _parse_spec(self) -> ParsedSpec:
        """Parse the loaded specification."""
        version = str(self.spec_data.get("swagger") or self.spec_data.get("openapi") or "")
        selected = self.selection.select_operations(self._iter_raw_operations())

        operations = [
            self._parse_operation(path, method, path_item, data) for path, method, path_item, data in selected
        ]

        keep = None
        if self.selection.trim_unused_schemas:
            used = self._collect_operation_refs(data for _, _, _, data in selected)
            used.update(self._collect_path_level_refs(path_item for _, _, path_item, _ in selected))
            keep = self.selection.schemas_to_keep(used, self._build_schema_dependency_graph())

        schemas = self._parse_schemas(keep)

        return ParsedSpec(
            version=version,
            info=dict(self.spec_data.get("info") or {}),
            servers=self._extract_servers(),
            operations=operations,
            schemas=schemas,
            unresolved_refs=sorted(self.unresolved_refs),
        )

    def _iter_raw_operations(self) -> list[tuple[str, str, dict[str, Any], dict[str, Any]]]:
        """List (path, method, path item, operation) tuples in document order."""
        raw_operations = []
        for path, path_item in (self.spec_data.get("paths") or {}).items():
            if not isinstance(path_item, dict):
                continue
            path_item = self._resolve_if_ref(path_item)
            for method in path_item:
                if method.lower() in HTTP_METHODS and method.lower() not in _UNSUPPORTED_METHODS:
                    operation_data = path_item[method]
                    if isinstance(operation_data, dict):
                        raw_operations.append((str(path), method.lower(), path_item, operation_data))
        return raw_operations

    def _extract_servers(self) -> list[str]:
        if self.is_swagger_v2:
            host = self.spec_data.get("host")
            if not host:
                return []
            schemes = self.spec_data.get("schemes") or ["https"]
            return [f"{schemes[0]}://{host}{self.spec_data.get('basePath', '')}".rstrip("/")]
        return [str(server["url"]) for server in self.spec_data.get("servers") or [] if server.get("url")]

    # References

    def _resolve_reference(self, ref: str) -> dict[str, Any]:
        """Resolve a local JSON reference."""
        if not ref.startswith("#/"):
            return {}

        resolved: Any = self.spec_data
        for part in ref[2:].split("/"):
            part = part.replace("~1", "/").replace("~0", "~")
            if not isinstance(resolved, dict):
                return {}
            resolved = resolved.get(part)
        return resolved if isinstance(resolved, dict) else {}

    def _resolve_if_ref(self, data: dict[str, Any]) -> dict[str, Any]:
        """Follow non-schema references such as shared parameters and responses."""
        visited: set[str] = set()
        while isinstance(data, dict) and "$ref" in data and not is_schema_ref(data["$ref"]):
            ref = data["$ref"]
            if ref in visited:
                return {}
            visited.add(ref)
            data = self._resolve_reference(ref)
        return data

    def _extract_refs_from_schema_part(self, schema_part: Any, visited: set[str] | None = None) -> set[str]:  # noqa: ANN401
        """Extract every schema reference reachable from a part of the document."""
        visited = set() if visited is None else visited
        refs: set[str] = set()
        if isinstance(schema_part, dict):
            ref = schema_part.get("$ref")
            if isinstance(ref, str):
                if is_schema_ref(ref):
                    refs.add(extract_ref_name(ref))
                elif ref not in visited:
                    visited.add(ref)
                    refs.update(self._extract_refs_from_schema_part(self._resolve_reference(ref), visited))
            for key, value in schema_part.items():
                if key != "$ref":
                    refs.update(self._extract_refs_from_schema_part(value, visited))
        elif isinstance(schema_part, list):
            for item in schema_part:
                refs.update(self._extract_refs_from_schema_part(item, visited))
        return refs

    def _collect_operation_refs(self, operations: Iterable[dict[str, Any]]) -> set[str]:
        refs: set[str] = set()
        for operation_data in operations:
            refs.update(self._extract_refs_from_schema_part(operation_data))
        return refs

    def _collect_path_level_refs(self, path_items: Iterable[dict[str, Any]]) -> set[str]:
        refs: set[str] = set()
        for path_item in path_items:
            refs.update(self._extract_refs_from_schema_part(path_item.get("parameters") or []))
        return refs

    def _build_schema_dependency_graph(self) -> dict[str, set[str]]:
        """Build a dependency graph for all schemas."""
        return {name: self._extract_refs_from_schema_part(data) for name, data in self.schemas.items()}

    # Types

    def _is_primitive_alias(self, schema: dict[str, Any]) -> bool:
        """Check if a named schema is a plain primitive that produces no contract."""
        schema_type = _schema_type(schema)
        return (
            schema_type in {"string", "integer", "number", "boolean"}
            and "enum" not in schema
            and "$ref" not in schema
            and not schema.get("allOf")
        )

    def is_value_type(self, csharp_type: str) -> bool:
        """Check if a C# type is a struct or enum and so needs ``?`` to be optional."""
        if csharp_type in VALUE_TYPES:
            return True
        for name, raw in self.schemas.items():
            if csharp_type_name(name) == csharp_type and isinstance(raw, dict):
                return "enum" in raw and _schema_type(raw) in {"string", "integer", None}
        return False

    def csharp_type_from_openapi(self, schema: Any, visited: set[str] | None = None) -> str:  # noqa: ANN401, C901, PLR0911, PLR0912
        """Convert an OpenAPI schema to a C# type string.

        Args:
            schema: The schema dictionary from the document.
            visited: Set of visited references to prevent cycles.

        Returns:
            C# type string.
        """
        if not isinstance(schema, dict) or not schema:
            return "object"
        visited = set() if visited is None else visited

        if "$ref" in schema:
            ref_name = extract_ref_name(schema["$ref"])
            target = self.schemas.get(ref_name)
            if target is None and is_schema_ref(str(schema["$ref"])):
                self.unresolved_refs.add(ref_name)
            if isinstance(target, dict) and ref_name not in visited and self._is_primitive_alias(target):
                visited.add(ref_name)
                return self.csharp_type_from_openapi(target, visited)
            return csharp_type_name(ref_name)

        for composite in ("allOf", "oneOf", "anyOf"):
            members = [m for m in schema.get(composite) or [] if isinstance(m, dict) and _schema_type(m) != "null"]
            if len(members) == 1:
                return self.csharp_type_from_openapi(members[0], visited)
            if members:
                return "object"

        schema_type = _schema_type(schema)
        schema_format = schema.get("format")

        if schema_type == "array":
            return f"ICollection<{self.csharp_type_from_openapi(schema.get('items') or {}, visited)}>"

        if schema_type == "string":
            return _STRING_FORMATS.get(schema_format, "string")

        if schema_type == "integer":
            return "long" if schema_format == "int64" else "int"

        if schema_type == "number":
            return _NUMBER_FORMATS.get(schema_format, "double")

        if schema_type == "boolean":
            return "bool"

        if schema_type == "file":
            return "Stream"

        additional = schema.get("additionalProperties")
        if (schema_type in {"object", None}) and not schema.get("properties"):
            if isinstance(additional, dict):
                return f"IDictionary<string, {self.csharp_type_from_openapi(additional, visited)}>"
            if additional is True:
                return "IDictionary<string, object>"

        return "object"

    def _optional_type(self, csharp_type: str, *, required: bool, nullable: bool = False) -> str:
        if (not required or nullable) and self.is_value_type(csharp_type):
            return f"{csharp_type}?"
        return csharp_type

    # Operations

    def _parse_operation(
        self,
        path: str,
        method: str,
        path_item: dict[str, Any],
        operation_data: dict[str, Any],
    ) -> Operation:
        """Parse a single operation."""
        raw_parameters = self._merge_parameters(
            path_item.get("parameters") or [], operation_data.get("parameters") or []
        )

        parameters = []
        body_parameter = None
        form_parameters = []
        for param_data in raw_parameters:
            location = param_data.get("in")
            if location == "body":
                body_parameter = param_data
            elif location == "formData":
                form_parameters.append(param_data)
            elif location in {"path", "query", "header"}:
                parameters.append(self._parse_parameter(param_data))

        operation_id = operation_data.get("operationId")
        operation_key = operation_id or f"{method} {path}"

        if self.is_swagger_v2:
            request_body = self._parse_v2_request_body(body_parameter, form_parameters, operation_data, operation_key)
        else:
            request_body = self._parse_v3_request_body(operation_data.get("requestBody"), operation_key)

        responses = {}
        for status_code, response_data in (operation_data.get("responses") or {}).items():
            status = str(status_code)
            responses[status] = self._parse_response(status, self._resolve_if_ref(response_data or {}), operation_key)

        operation = Operation(
            operation_id=operation_id,
            method=method.upper(),
            path=path,
            summary=operation_data.get("summary"),
            description=operation_data.get("description"),
            parameters=parameters,
            request_body=request_body,
            responses=responses,
            tags=[str(tag) for tag in operation_data.get("tags") or []],
            deprecated=bool(operation_data.get("deprecated", False)),
            produces=self._accept_content_types(operation_data),
        )
        self._ensure_unique_parameter_names(operation)
        return operation

    def _merge_parameters(self, path_level: list[Any], operation_level: list[Any]) -> list[dict[str, Any]]:
        """Merge path-item and operation parameters; operation parameters win."""
        merged: dict[tuple[Any, Any], dict[str, Any]] = {}
        for param_data in [*path_level, *operation_level]:
            resolved = self._resolve_if_ref(param_data) if isinstance(param_data, dict) else {}
            if resolved.get("name"):
                merged[(resolved.get("name"), resolved.get("in"))] = resolved
        return list(merged.values())

    def _parameter_schema(self, param_data: dict[str, Any]) -> dict[str, Any]:
        if "schema" in param_data:
            return param_data["schema"] or {}
        # Swagger 2.0 declares the type on the parameter itself
        return {key: value for key, value in param_data.items() if key in {"type", "format", "items", "enum"}}

    def _parse_parameter(self, param_data: dict[str, Any]) -> Parameter:
        """Parse a path, query or header parameter."""
        schema = self._parameter_schema(param_data)
        location = param_data.get("in", "query")
        required = bool(param_data.get("required", False)) or location == "path"
        csharp_type = self.csharp_type_from_openapi(schema)

        return Parameter(
            name=str(param_data["name"]),
            location=location,
            csharp_type=self._optional_type(csharp_type, required=required),
            required=required,
            description=param_data.get("description"),
            format=schema.get("format"),
        )

    def _parse_form_field(
        self, name: str, schema: dict[str, Any], *, required: bool, description: str | None
    ) -> Parameter:
        is_file = _schema_type(schema) == "file" or schema.get("format") == "binary"
        csharp_type = "StreamPart" if is_file else self.csharp_type_from_openapi(schema)
        return Parameter(
            name=name,
            location="formData",
            csharp_type=self._optional_type(csharp_type, required=required),
            required=required,
            description=description,
            format=schema.get("format"),
        )

    def _parse_v2_request_body(
        self,
        body_parameter: dict[str, Any] | None,
        form_parameters: list[dict[str, Any]],
        operation_data: dict[str, Any],
        operation_key: str,
    ) -> RequestBody | None:
        consumes = operation_data.get("consumes") or self.spec_data.get("consumes") or []

        if body_parameter is not None:
            return RequestBody(
                csharp_type=self._body_type(body_parameter.get("schema") or {}, operation_key, "Request"),
                content_type=_prefer_content_type(consumes) or "application/json",
                required=bool(body_parameter.get("required", False)),
                description=body_parameter.get("description"),
            )

        if form_parameters:
            content_type = _URL_ENCODED_CONTENT_TYPE
            if _MULTIPART_CONTENT_TYPE in consumes or any(p.get("type") == "file" for p in form_parameters):
                content_type = _MULTIPART_CONTENT_TYPE
            fields = [
                self._parse_form_field(
                    str(p["name"]),
                    self._parameter_schema(p),
                    required=bool(p.get("required", False)),
                    description=p.get("description"),
                )
                for p in form_parameters
            ]
            return RequestBody(
                csharp_type="Dictionary<string, object>",
                content_type=content_type,
                required=any(f.required for f in fields),
                form_fields=fields,
            )

        return None

    def _parse_v3_request_body(self, request_body_data: Any, operation_key: str) -> RequestBody | None:  # noqa: ANN401
        if not isinstance(request_body_data, dict):
            return None
        request_body_data = self._resolve_if_ref(request_body_data)
        content = request_body_data.get("content") or {}
        content_type = _prefer_content_type(content.keys())
        if content_type is None:
            return None

        schema = (content.get(content_type) or {}).get("schema") or {}
        required = bool(request_body_data.get("required", False))
        description = request_body_data.get("description")

        if content_type == _MULTIPART_CONTENT_TYPE:
            resolved = self._resolve_schema(schema)
            required_fields = set(resolved.get("required") or [])
            fields = [
                self._parse_form_field(
                    str(name),
                    self._resolve_schema(prop) if isinstance(prop, dict) else {},
                    required=name in required_fields,
                    description=prop.get("description") if isinstance(prop, dict) else None,
                )
                for name, prop in (resolved.get("properties") or {}).items()
            ]
            if fields:
                return RequestBody(
                    csharp_type="Dictionary<string, object>",
                    content_type=content_type,
                    required=required,
                    description=description,
                    form_fields=fields,
                )

        return RequestBody(
            csharp_type=self._body_type(schema, operation_key, "Request"),
            content_type=content_type,
            required=required,
            description=description,
        )

    def _resolve_schema(self, schema: dict[str, Any]) -> dict[str, Any]:
        if "$ref" in schema and is_schema_ref(schema["$ref"]):
            target = self.schemas.get(extract_ref_name(schema["$ref"]))
            return target if isinstance(target, dict) else {}
        return schema

    def _body_type(self, schema: dict[str, Any], operation_key: str, suffix: str) -> str:
        """Map a body schema, turning inline object schemas into named contracts."""
        if self._should_create_inline_model(schema):
            model_name = f"{pascalcase(normalize_csharp_identifier(operation_key))}{suffix}"
            if model_name not in self.schemas:
                self.schemas[model_name] = schema
            return csharp_type_name(model_name)
        return self.csharp_type_from_openapi(schema)

    def _should_create_inline_model(self, schema: dict[str, Any]) -> bool:
        """Determine if we should create a contract for an inline schema."""
        if "$ref" in schema:
            return False
        return _schema_type(schema) in {"object", None} and bool(schema.get("properties"))

    def _parse_response(self, status_code: str, response_data: dict[str, Any], operation_key: str) -> Response:
        """Parse a response."""
        if self.is_swagger_v2:
            content_types = []
            schema = response_data.get("schema")
        else:
            content = response_data.get("content") or {}
            content_types = [str(ct) for ct in content]
            preferred = _prefer_content_type(content_types)
            schema = (content.get(preferred) or {}).get("schema") if preferred else None

        csharp_type = None
        if isinstance(schema, dict):
            if status_code.startswith("2"):
                csharp_type = self._body_type(schema, operation_key, "Response")
            else:
                csharp_type = self.csharp_type_from_openapi(schema)

        return Response(
            status_code=status_code,
            description=str(response_data.get("description") or ""),
            csharp_type=csharp_type,
            content_types=content_types,
        )

    def _accept_content_types(self, operation_data: dict[str, Any]) -> list[str]:
        """Content types a client should accept for the operation's success responses."""
        if self.is_swagger_v2:
            return [str(ct) for ct in operation_data.get("produces") or self.spec_data.get("produces") or []]

        accepted: list[str] = []
        for status_code, response_data in (operation_data.get("responses") or {}).items():
            if not str(status_code).startswith("2"):
                continue
            content = self._resolve_if_ref(response_data or {}).get("content") or {}
            accepted.extend(str(ct) for ct in content if ct not in accepted)
        return accepted

    @staticmethod
    def _ensure_unique_parameter_names(operation: Operation) -> None:
        taken = {"cancellationToken"}
        all_parameters = list(operation.parameters)
        if operation.request_body:
            all_parameters.extend(operation.request_body.form_fields)
            if not operation.request_body.form_fields:
                taken.add("body")
        for param in all_parameters:
            name = param.csharp_name
            counter = 2
            while name in taken:
                name = f"{param.csharp_name}{counter}"
                counter += 1
            param.csharp_name = name
            taken.add(name)

    # Schemas

    def _parse_schemas(self, keep: set[str] | None) -> dict[str, Schema]:
        """Parse all schemas that produce a contract."""
        schemas = {}
        for schema_name, schema_data in self.schemas.items():
            if keep is not None and schema_name not in keep and not self._is_inline_model(schema_name):
                continue
            if not isinstance(schema_data, dict) or self._is_primitive_alias(schema_data):
                continue
            schemas[schema_name] = self._parse_schema(schema_name, schema_data)
        return schemas

    def _is_inline_model(self, schema_name: str) -> bool:
        components = (
            self.spec_data.get("definitions")
            if self.is_swagger_v2
            else (self.spec_data.get("components") or {}).get("schemas")
        )
        return schema_name not in (components or {})

    def _parse_schema(self, name: str, schema_data: dict[str, Any]) -> Schema:
        """Parse a single schema."""
        if "enum" in schema_data:
            return Schema(
                name=name,
                kind="enum",
                description=schema_data.get("description"),
                enum_members=self._enum_members(schema_data["enum"]),
            )

        if _schema_type(schema_data) == "array":
            return Schema(
                name=name,
                kind="array",
                description=schema_data.get("description"),
                collection_item_type=self.csharp_type_from_openapi(schema_data.get("items") or {}),
            )

        base_type, merged = self._flatten_all_of(schema_data)
        required_fields = set(merged.get("required") or [])
        properties = [
            self._create_property(str(prop_name), prop_data, required_fields)
            for prop_name, prop_data in (merged.get("properties") or {}).items()
        ]

        return Schema(
            name=name,
            kind="object",
            description=schema_data.get("description"),
            properties=properties,
            base_type=base_type,
            allows_additional_properties=schema_data.get("additionalProperties") is not False,
        )

    def _flatten_all_of(self, schema_data: dict[str, Any]) -> tuple[str | None, dict[str, Any]]:
        """Split ``allOf`` into one inherited base type and the merged own members."""
        members = schema_data.get("allOf")
        if not isinstance(members, list):
            return None, schema_data

        base_type = None
        properties = dict(schema_data.get("properties") or {})
        required = list(schema_data.get("required") or [])
        for member in members:
            if not isinstance(member, dict):
                continue
            if "$ref" in member and base_type is None:
                base_type = self.csharp_type_from_openapi(member)
                continue
            resolved = self._resolve_schema(member)
            properties.update(resolved.get("properties") or {})
            required.extend(resolved.get("required") or [])

        return base_type, {"properties": properties, "required": required}

    def _create_property(self, prop_name: str, prop_data: Any, required_fields: set[str]) -> Property:  # noqa: ANN401
        """Create a Property object from property data."""
        prop_data = prop_data if isinstance(prop_data, dict) else {}
        required = prop_name in required_fields
        csharp_type = self.csharp_type_from_openapi(prop_data)
        return Property(
            name=prop_name,
            csharp_type=self._optional_type(csharp_type, required=required, nullable=_is_nullable(prop_data)),
            required=required,
            description=prop_data.get("description"),
        )

    @staticmethod
    def _enum_members(values: list[Any]) -> list[EnumMember]:
        members = []
        taken: set[str] = set()
        for value in values:
            if value is None:
                continue
            base = csharp_type_name(str(value)) if isinstance(value, str) else f"_{value}"
            base = base or "Empty"
            name = base
            counter = 2
            while name in taken:
                name = f"{base}{counter}"
                counter += 1
            taken.add(name)
            members.append(EnumMember(csharp_name=name, value=value))
        return members
