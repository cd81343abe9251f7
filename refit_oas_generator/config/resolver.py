"""
Configuration resolution.

``resolve_config`` turns parsed command-line arguments and an optional
persisted settings document into a ``GenerationConfig``. It performs no I/O;
the settings document is handed in as text or bytes.
"""

from __future__ import annotations

import re
from argparse import Namespace
from pathlib import Path
from typing import Any

from refit_oas_generator.config import persistence
from refit_oas_generator.config.settings import (
    DEFAULT_NAMESPACE,
    DEFAULT_OUTPUT_FILENAME,
    OPERATION_NAME_PLACEHOLDER,
    DocumentationFlags,
    GenerationConfig,
    MultipleInterfaces,
    NamingPolicy,
    OperationNameGenerator,
    ReturnStyle,
    SchemaFilters,
    TypeAccessibility,
)
from refit_oas_generator.errors import ConfigurationError

_URL_PREFIXES = ("http://", "https://")


def is_url(path: str) -> bool:
    """Check whether a specification path points to a remote document."""
    return path.lower().startswith(_URL_PREFIXES)


def _arg(args: Namespace | Any, name: str, default: Any = None) -> Any:  # noqa: ANN401
    value = getattr(args, name, default)
    return default if value is None else value


def _text(args: Namespace | Any, name: str) -> str | None:  # noqa: ANN401
    value = _arg(args, name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _unique(values: Any) -> tuple[str, ...]:  # noqa: ANN401
    """Drop blanks and duplicates while keeping the first-seen order."""
    return tuple(dict.fromkeys(str(v).strip() for v in values or () if str(v).strip()))


def parse_enum_option(enum_type: type[Any], value: str | None, option: str) -> Any:  # noqa: ANN401
    """Look up an enum member by value, case-insensitively.

    Raises:
        ConfigurationError: If ``value`` names no member.
    """
    if value is None:
        return None
    for member in enum_type:
        if member.value.lower() == value.lower():
            return member
    allowed = ", ".join(member.value for member in enum_type)
    msg = f"Invalid value '{value}' for {option} (expected one of: {allowed})"
    raise ConfigurationError(msg)


def _return_style(args: Namespace | Any) -> ReturnStyle:  # noqa: ANN401
    if _arg(args, "use_observable_response", False):
        return ReturnStyle.REACTIVE_STREAM
    if _arg(args, "use_api_response", False):
        return ReturnStyle.WRAPPED_RESPONSE
    return ReturnStyle.PLAIN_RESULT


def config_from_arguments(args: Namespace | Any) -> GenerationConfig:  # noqa: ANN401
    """Map command-line flags onto a configuration."""
    interface_name = _text(args, "interface_name")
    output_path = _text(args, "output_path")
    generator = parse_enum_option(
        OperationNameGenerator, _text(args, "operation_name_generator"), "--operation-name-generator"
    )
    multiple_interfaces = parse_enum_option(
        MultipleInterfaces, _text(args, "multiple_interfaces"), "--multiple-interfaces"
    )

    return GenerationConfig(
        specification_path=_text(args, "spec_path") or "",
        namespace=_text(args, "namespace") or DEFAULT_NAMESPACE,
        output_folder=_text(args, "output_folder"),
        output_filename=output_path if output_path != DEFAULT_OUTPUT_FILENAME else None,
        contract_output_filename=_text(args, "contracts_output"),
        generate_contracts=not _arg(args, "interface_only", False),
        generate_dependency_injection=bool(_arg(args, "di_registration", False)),
        dependency_injection_base_url=_text(args, "di_base_url"),
        split_contracts=bool(_arg(args, "split_contracts", False)),
        naming=NamingPolicy(
            use_document_title=interface_name is None,
            interface_name=interface_name,
            operation_name_template=_text(args, "operation_name_template"),
            operation_name_generator=generator or OperationNameGenerator.DEFAULT,
        ),
        filters=SchemaFilters(
            include_path_patterns=_unique(_arg(args, "match_paths", ())),
            include_tags=_unique(_arg(args, "tags", ())),
            exclude_namespaces=_unique(_arg(args, "exclude_namespaces", ())),
            trim_unused_schemas=bool(_arg(args, "trim_unused_schema", False)),
            keep_schema_patterns=_unique(_arg(args, "keep_schemas", ())),
        ),
        documentation=DocumentationFlags(
            add_auto_generated_header=not _arg(args, "no_auto_generated_header", False),
            add_accept_headers=not _arg(args, "no_accept_headers", False),
            generate_xml_doc_comments=not _arg(args, "no_xml_doc_comments", False),
            generate_operation_headers=not _arg(args, "no_operation_headers", False),
            generate_deprecated_operations=not _arg(args, "no_deprecated_operations", False),
        ),
        return_style=_return_style(args),
        use_cancellation_tokens=bool(_arg(args, "cancellation_tokens", False)),
        type_accessibility=TypeAccessibility.INTERNAL if _arg(args, "internal", False) else TypeAccessibility.PUBLIC,
        additional_namespaces=_unique(_arg(args, "additional_namespaces", ())),
        generate_default_additional_properties=not _arg(args, "skip_default_additional_properties", False),
        multiple_interfaces=multiple_interfaces or MultipleInterfaces.UNSET,
        optional_parameters=bool(_arg(args, "optional_parameters", False)),
        use_iso_date_format=bool(_arg(args, "use_iso_date_format", False)),
    )


def _check_patterns(patterns: tuple[str, ...], setting: str) -> None:
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            msg = f"Invalid regular expression '{pattern}' in {setting}: {e}"
            raise ConfigurationError(msg) from e


def _check_consistency(config: GenerationConfig) -> None:
    if not config.namespace.strip():
        msg = "Namespace must not be empty"
        raise ConfigurationError(msg)

    template = config.naming.operation_name_template
    if template is not None and OPERATION_NAME_PLACEHOLDER not in template:
        msg = f"Operation name template '{template}' must contain {OPERATION_NAME_PLACEHOLDER}"
        raise ConfigurationError(msg)

    _check_patterns(config.filters.include_path_patterns, "path filters")
    _check_patterns(config.filters.keep_schema_patterns, "keep-schema patterns")
    _check_patterns(config.filters.exclude_namespaces, "namespace exclusions")


def resolve_config(args: Namespace | Any, persisted: str | bytes | None = None) -> GenerationConfig:  # noqa: ANN401
    """Resolve the configuration of a run.

    A persisted settings document replaces every setting except the
    specification path: the path given on the command line always wins and
    the document's path is only used when none was given.

    Args:
        args: Parsed command-line arguments.
        persisted: Contents of a settings document, if one was supplied.

    Returns:
        The resolved configuration.

    Raises:
        ConfigurationError: If the specification path is missing or a
            setting is invalid.
    """
    cli_path = _text(args, "spec_path")
    config = persistence.loads(persisted) if persisted is not None else config_from_arguments(args)

    specification_path = cli_path or config.specification_path.strip()
    if not specification_path:
        msg = "Specification path is required"
        raise ConfigurationError(msg)

    config = config.with_specification_path(specification_path)
    _check_consistency(config)
    return config


def check_specification_path(config: GenerationConfig) -> None:
    """Ensure a local specification path references an existing file.

    Raises:
        ConfigurationError: If the file does not exist.
    """
    path = config.specification_path
    if is_url(path):
        return
    if not Path(path).is_file():
        msg = f"File not found - {path}"
        raise ConfigurationError(msg)
