"""
Interface and operation naming.

Method names come from a named strategy, are passed through the optional
operation name template and are finally made unique with numeric suffixes.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Final

from refit_oas_generator.config.settings import (
    DEFAULT_INTERFACE_NAME,
    OPERATION_NAME_PLACEHOLDER,
    GenerationConfig,
    OperationNameGenerator,
)
from refit_oas_generator.utils.string_case import (
    capitalize_words,
    csharp_type_name,
    normalize_csharp_identifier,
    pascalcase,
)

if TYPE_CHECKING:
    from refit_oas_generator.parser.oas_parser import Operation, ParsedSpec

_PATH_PARAMETER: Final = re.compile(r"^\{(.+)\}$")

OperationNamer = Callable[["Operation"], str]


def interface_name(config: GenerationConfig, spec: ParsedSpec) -> str:
    """Name of the single generated interface.

    The document title is used unless the naming policy disables it, in
    which case the fixed interface name applies.

    Examples:
        "Swagger Petstore - OpenAPI 3.0" -> "ISwaggerPetstoreOpenAPI30"
    """
    base = ""
    if config.naming.use_document_title:
        base = capitalize_words(spec.title)
    if not base:
        base = capitalize_words(config.naming.interface_name or DEFAULT_INTERFACE_NAME)
    return f"I{normalize_csharp_identifier(base)}"


def tag_interface_name(tag: str | None, fallback: str) -> str:
    """Name of the interface that groups the operations of a tag."""
    if not tag:
        return fallback
    return f"I{csharp_type_name(tag)}Api"


def endpoint_interface_name(method_name: str) -> str:
    return f"I{method_name}Endpoint"


def _path_segments_name(operation: Operation) -> str:
    """Build a name from the HTTP method and the path segments.

    Examples:
        GET /pet/findByStatus -> "GetPetFindByStatus"
        DELETE /store/order/{orderId} -> "DeleteStoreOrderByOrderId"
    """
    parts = [operation.method.title()]
    for segment in operation.path.strip("/").split("/"):
        if not segment:
            continue
        match = _PATH_PARAMETER.match(segment)
        if match:
            parts.append("By" + pascalcase(normalize_csharp_identifier(match.group(1))))
        else:
            parts.append(pascalcase(normalize_csharp_identifier(segment)))
    return "".join(parts)


def _operation_id_name(operation: Operation) -> str:
    if not operation.operation_id:
        return _path_segments_name(operation)
    return pascalcase(normalize_csharp_identifier(operation.operation_id))


def _default_name(operation: Operation) -> str:
    # An operation id that is only punctuation falls back to the path
    return _operation_id_name(operation) or _path_segments_name(operation)


def _first_tag_and_operation_id_name(operation: Operation) -> str:
    name = _operation_id_name(operation)
    if operation.first_tag:
        return pascalcase(normalize_csharp_identifier(operation.first_tag)) + name
    return name


OPERATION_NAMERS: Final[dict[OperationNameGenerator, OperationNamer]] = {
    OperationNameGenerator.DEFAULT: _default_name,
    OperationNameGenerator.SINGLE_CLIENT_FROM_OPERATION_ID: _operation_id_name,
    OperationNameGenerator.SINGLE_CLIENT_FROM_PATH_SEGMENTS: _path_segments_name,
    OperationNameGenerator.MULTIPLE_CLIENTS_FROM_FIRST_TAG_AND_OPERATION_ID: _first_tag_and_operation_id_name,
}


def apply_template(name: str, template: str | None) -> str:
    """Substitute a base name into an operation name template.

    Examples:
        >>> apply_template("GetPet", "{operationName}Async")
        'GetPetAsync'
    """
    if not template:
        return name
    return template.replace(OPERATION_NAME_PLACEHOLDER, name)


def make_unique(names: Iterable[str]) -> list[str]:
    """Append numeric suffixes to repeated names, keeping the first as is.

    Examples:
        >>> make_unique(["Get", "Get", "Get2"])
        ['Get', 'Get2', 'Get22']
    """
    taken: set[str] = set()
    unique = []
    for name in names:
        candidate = name
        counter = 2
        while candidate in taken:
            candidate = f"{name}{counter}"
            counter += 1
        taken.add(candidate)
        unique.append(candidate)
    return unique


def operation_method_names(operations: list[Operation], config: GenerationConfig) -> list[str]:
    """Method names for the operations, in the same order.

    Args:
        operations: Selected operations of the document.
        config: Generation settings holding the naming policy.

    Returns:
        One unique C# method name per operation.
    """
    namer = OPERATION_NAMERS[config.naming.operation_name_generator]
    template = config.naming.operation_name_template
    names = []
    for operation in operations:
        base = namer(operation) or "Execute"
        names.append(normalize_csharp_identifier(apply_template(base, template)))
    return make_unique(names)
