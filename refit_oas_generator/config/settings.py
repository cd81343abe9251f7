"""
Generation settings.

The resolved configuration of a run is an immutable tree of dataclasses.
Every generation option is an explicit field; nothing is read from global
state once a ``GenerationConfig`` exists.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Final

DEFAULT_NAMESPACE: Final = "GeneratedCode"
DEFAULT_OUTPUT_FILENAME: Final = "Output.cs"
DEFAULT_OUTPUT_FOLDER: Final = "./Generated"
DEFAULT_INTERFACE_NAME: Final = "ApiClient"
OPERATION_NAME_PLACEHOLDER: Final = "{operationName}"


class ReturnStyle(Enum):
    """Shape of the value returned by a generated operation method."""

    PLAIN_RESULT = "PlainResult"
    WRAPPED_RESPONSE = "WrappedResponse"
    REACTIVE_STREAM = "ReactiveStream"


class TypeAccessibility(Enum):
    """C# accessibility modifier of every generated type."""

    PUBLIC = "Public"
    INTERNAL = "Internal"

    @property
    def keyword(self) -> str:
        return self.value.lower()


class MultipleInterfaces(Enum):
    """How operations are spread over generated interfaces."""

    UNSET = "Unset"
    BY_ENDPOINT = "ByEndpoint"
    BY_TAG = "ByTag"


class OperationNameGenerator(Enum):
    """Named strategies that derive a method name from an operation."""

    DEFAULT = "Default"
    SINGLE_CLIENT_FROM_OPERATION_ID = "SingleClientFromOperationId"
    SINGLE_CLIENT_FROM_PATH_SEGMENTS = "SingleClientFromPathSegments"
    MULTIPLE_CLIENTS_FROM_FIRST_TAG_AND_OPERATION_ID = "MultipleClientsFromFirstTagAndOperationId"


@dataclass(frozen=True)
class NamingPolicy:
    """Rules for interface and operation names.

    ``interface_name`` only applies when ``use_document_title`` is false.
    """

    use_document_title: bool = True
    interface_name: str | None = None
    operation_name_template: str | None = None
    operation_name_generator: OperationNameGenerator = OperationNameGenerator.DEFAULT


@dataclass(frozen=True)
class SchemaFilters:
    """Operation selection, schema trimming and namespace exclusion."""

    include_path_patterns: tuple[str, ...] = ()
    include_tags: tuple[str, ...] = ()
    exclude_namespaces: tuple[str, ...] = ()
    trim_unused_schemas: bool = False
    keep_schema_patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class DocumentationFlags:
    """Toggles for headers, attributes and comments in the generated code."""

    add_auto_generated_header: bool = True
    add_accept_headers: bool = True
    generate_xml_doc_comments: bool = True
    generate_operation_headers: bool = True
    generate_deprecated_operations: bool = True


@dataclass(frozen=True)
class GenerationConfig:
    """Resolved configuration of a generation run."""

    specification_path: str = ""
    namespace: str = DEFAULT_NAMESPACE
    output_folder: str | None = None
    output_filename: str | None = None
    contract_output_filename: str | None = None
    generate_contracts: bool = True
    generate_interface: bool = True
    generate_dependency_injection: bool = False
    dependency_injection_base_url: str | None = None
    split_contracts: bool = False
    naming: NamingPolicy = field(default_factory=NamingPolicy)
    filters: SchemaFilters = field(default_factory=SchemaFilters)
    documentation: DocumentationFlags = field(default_factory=DocumentationFlags)
    return_style: ReturnStyle = ReturnStyle.PLAIN_RESULT
    use_cancellation_tokens: bool = False
    type_accessibility: TypeAccessibility = TypeAccessibility.PUBLIC
    additional_namespaces: tuple[str, ...] = ()
    generate_default_additional_properties: bool = True
    multiple_interfaces: MultipleInterfaces = MultipleInterfaces.UNSET
    optional_parameters: bool = False
    use_iso_date_format: bool = False

    def with_specification_path(self, specification_path: str) -> GenerationConfig:
        return replace(self, specification_path=specification_path)

    def interface_pass(self) -> GenerationConfig:
        """Configuration of the first pass; contracts move to the second pass in split mode."""
        if not self.split_contracts:
            return self
        return replace(self, generate_contracts=False)

    def contracts_pass(self) -> GenerationConfig:
        """Configuration of the contracts-only second pass of split mode."""
        return replace(
            self,
            generate_contracts=True,
            generate_interface=False,
            generate_dependency_injection=False,
        )
