"""
C# code model builders.

The builders turn a parsed specification into small view models that the
templates render line by line: Refit interfaces with their methods, data
contracts and the dependency injection registration.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from refit_oas_generator.config.settings import MultipleInterfaces, ReturnStyle
from refit_oas_generator.generator.filters import csharp_string_literal, refit_method_attribute, xml_doc_lines
from refit_oas_generator.generator.naming import (
    endpoint_interface_name,
    interface_name,
    operation_method_names,
    tag_interface_name,
)

if TYPE_CHECKING:
    from refit_oas_generator.config.settings import GenerationConfig
    from refit_oas_generator.parser.oas_parser import Operation, Parameter, ParsedSpec, Schema

ISO_DATE_FORMAT: Final = "yyyy-MM-dd"
ENDPOINT_METHOD_NAME: Final = "Execute"
CANCELLATION_TOKEN_PARAMETER: Final = "CancellationToken cancellationToken = default"

_PATH_TEMPLATE: Final = re.compile(r"\{([^}]+)\}")
_EXCEPTION_DOC: Final = (
    '/// <exception cref="ApiException">Thrown when the request returns a non-success status code.</exception>'
)

BASE_USINGS: Final = ("System", "System.Collections.Generic")
INTERFACE_USINGS: Final = ("Refit", "System.Net.Http", "System.Threading.Tasks")
CONTRACT_USINGS: Final = ("System.Text.Json.Serialization",)


@dataclass
class MethodModel:
    """One Refit method, rendered as attributes followed by a signature."""

    name: str
    return_type: str
    attributes: list[str] = field(default_factory=list)
    parameters: list[str] = field(default_factory=list)
    doc_lines: list[str] = field(default_factory=list)


@dataclass
class InterfaceModel:
    name: str
    methods: list[MethodModel] = field(default_factory=list)
    doc_lines: list[str] = field(default_factory=list)


@dataclass
class PropertyModel:
    name: str
    csharp_type: str
    json_name: str
    description: str | None = None


@dataclass
class EnumMemberModel:
    name: str
    value: str
    wire_value: str | None = None


@dataclass
class ContractModel:
    """A data contract: a class, a collection class or an enum."""

    name: str
    kind: str
    description: str | None = None
    base_type: str | None = None
    properties: list[PropertyModel] = field(default_factory=list)
    members: list[EnumMemberModel] = field(default_factory=list)
    has_extension_data: bool = False
    is_string_enum: bool = False


@dataclass
class RegistrationModel:
    """Dependency injection registration of every generated interface."""

    interface_names: list[str]
    base_url: str | None = None


class InterfaceBuilder:
    """Builds the Refit interfaces of a specification."""

    def __init__(self, config: GenerationConfig, spec: ParsedSpec) -> None:
        self.config = config
        self.spec = spec
        self.documented = config.documentation.generate_xml_doc_comments

    def build(self) -> list[InterfaceModel]:
        operations = self.spec.operations
        names = operation_method_names(operations, self.config)
        default_name = interface_name(self.config, self.spec)

        if self.config.multiple_interfaces is MultipleInterfaces.BY_ENDPOINT:
            return [
                InterfaceModel(
                    name=endpoint_interface_name(name),
                    methods=[self.build_method(operation, ENDPOINT_METHOD_NAME)],
                    doc_lines=self._operation_summary(operation),
                )
                for operation, name in zip(operations, names)
            ]

        if self.config.multiple_interfaces is MultipleInterfaces.BY_TAG:
            grouped: dict[str, InterfaceModel] = {}
            for operation, name in zip(operations, names):
                group_name = tag_interface_name(operation.first_tag, default_name)
                if group_name not in grouped:
                    grouped[group_name] = InterfaceModel(name=group_name, doc_lines=self._interface_summary())
                grouped[group_name].methods.append(self.build_method(operation, name))
            return list(grouped.values())

        return [
            InterfaceModel(
                name=default_name,
                methods=[self.build_method(operation, name) for operation, name in zip(operations, names)],
                doc_lines=self._interface_summary(),
            )
        ]

    def build_method(self, operation: Operation, name: str) -> MethodModel:
        parameters, documented_names = self._parameters(operation)
        return MethodModel(
            name=name,
            return_type=self._return_type(operation),
            attributes=self._attributes(operation),
            parameters=parameters,
            doc_lines=self._method_doc_lines(operation, documented_names),
        )

    def _interface_summary(self) -> list[str]:
        if not self.documented:
            return []
        return xml_doc_lines(self.spec.info.get("description") or self.spec.title)

    def _operation_summary(self, operation: Operation) -> list[str]:
        if not self.documented:
            return []
        return xml_doc_lines(operation.summary or operation.description or f"{operation.method} {operation.path}")

    def _return_type(self, operation: Operation) -> str:
        result = operation.return_type
        style = self.config.return_style
        if style is ReturnStyle.REACTIVE_STREAM:
            return f"IObservable<{result or 'Unit'}>"
        if style is ReturnStyle.WRAPPED_RESPONSE:
            return f"Task<IApiResponse<{result}>>" if result else "Task<IApiResponse>"
        return f"Task<{result}>" if result else "Task"

    def _attributes(self, operation: Operation) -> list[str]:
        attributes = []
        if operation.deprecated:
            attributes.append("System.Obsolete")
        if self.config.documentation.add_accept_headers and operation.produces:
            attributes.append(f"Headers({csharp_string_literal('Accept: ' + ', '.join(operation.produces))})")
        if operation.request_body and operation.request_body.is_multipart and operation.request_body.form_fields:
            attributes.append("Multipart")
        verb = refit_method_attribute(operation.method)
        attributes.append(f"{verb}({csharp_string_literal(operation.path)})")
        return attributes

    def _ordered_parameters(self, operation: Operation) -> list[Parameter]:
        """Path parameters in template order, then query and header parameters."""
        path_parameters = [p for p in operation.parameters if p.location == "path"]
        placeholders = _PATH_TEMPLATE.findall(operation.path)
        path_parameters.sort(key=lambda p: placeholders.index(p.name) if p.name in placeholders else len(placeholders))
        query_parameters = [p for p in operation.parameters if p.location == "query"]
        return [*path_parameters, *query_parameters]

    def _parameters(self, operation: Operation) -> tuple[list[str], list[tuple[str, str]]]:
        """Render the method parameters.

        Returns:
            The rendered parameters and (C# name, documentation) pairs for
            the XML comments.
        """
        entries: list[tuple[bool, str, str, str]] = []

        for param in self._ordered_parameters(operation):
            entries.append((param.required, self._render_parameter(param), param.csharp_name, self._describe(param)))

        body = operation.request_body
        if body is not None:
            if body.is_multipart and body.form_fields:
                for form_field in body.form_fields:
                    entries.append(
                        (
                            form_field.required,
                            self._render_parameter(form_field),
                            form_field.csharp_name,
                            self._describe(form_field),
                        )
                    )
            else:
                attribute = "[Body(BodySerializationMethod.UrlEncoded)]" if body.is_url_encoded else "[Body]"
                entries.append(
                    (
                        body.required,
                        self._with_default(f"{attribute} {body.csharp_type} body", required=body.required),
                        "body",
                        body.description or "The request body.",
                    )
                )

        if self.config.documentation.generate_operation_headers:
            for param in operation.parameters:
                if param.location == "header":
                    rendered = self._render_parameter(param)
                    entries.append((param.required, rendered, param.csharp_name, self._describe(param)))

        if self.config.optional_parameters:
            # Parameters with a default value must follow the required ones
            entries.sort(key=lambda entry: not entry[0])

        rendered = [entry[1] for entry in entries]
        documented = [(entry[2], entry[3]) for entry in entries]
        if self.config.use_cancellation_tokens:
            rendered.append(CANCELLATION_TOKEN_PARAMETER)
            documented.append(("cancellationToken", "A token to cancel the request."))
        return rendered, documented

    @staticmethod
    def _describe(param: Parameter) -> str:
        return param.description or param.name

    def _with_default(self, rendered: str, *, required: bool) -> str:
        if self.config.optional_parameters and not required:
            return f"{rendered} = default"
        return rendered

    def _render_parameter(self, param: Parameter) -> str:
        attributes = []
        if param.location == "query":
            if self.config.use_iso_date_format and param.format == "date":
                attributes.append(f'Query(Format = "{ISO_DATE_FORMAT}")')
            else:
                attributes.append("Query")
        elif param.location == "header":
            attributes.append(f"Header({csharp_string_literal(param.name)})")

        if param.location != "header" and param.needs_alias:
            attributes.append(f"AliasAs({csharp_string_literal(param.name)})")

        prefix = f"[{', '.join(attributes)}] " if attributes else ""
        return self._with_default(f"{prefix}{param.csharp_type} {param.csharp_name}", required=param.required)

    def _method_doc_lines(self, operation: Operation, parameters: list[tuple[str, str]]) -> list[str]:
        if not self.documented:
            return []

        lines = self._operation_summary(operation)
        if operation.summary and operation.description and operation.description != operation.summary:
            lines.extend(xml_doc_lines(operation.description, "remarks"))
        for name, description in parameters:
            lines.extend(xml_doc_lines(description, "param", f'name="{name.lstrip("@")}"'))

        response = operation.success_response
        if response is not None and response.description:
            lines.extend(xml_doc_lines(response.description, "returns"))
        if self.config.return_style is not ReturnStyle.WRAPPED_RESPONSE:
            lines.append(_EXCEPTION_DOC)
        return lines


class ContractBuilder:
    """Builds the data contracts of a specification."""

    def __init__(self, config: GenerationConfig, spec: ParsedSpec) -> None:
        self.config = config
        self.spec = spec

    def build(self) -> list[ContractModel]:
        return [self.build_contract(schema) for schema in self.spec.schemas.values()]

    def _description(self, text: str | None) -> str | None:
        return text if self.config.documentation.generate_xml_doc_comments else None

    def build_contract(self, schema: Schema) -> ContractModel:
        if schema.is_enum:
            members = []
            for index, member in enumerate(schema.enum_members):
                if member.is_string:
                    members.append(
                        EnumMemberModel(
                            name=member.csharp_name,
                            value=str(index),
                            wire_value=member.value,
                        )
                    )
                else:
                    members.append(EnumMemberModel(name=member.csharp_name, value=_enum_literal(member.value, index)))
            return ContractModel(
                name=schema.csharp_name,
                kind="enum",
                description=self._description(schema.description),
                members=members,
                is_string_enum=any(member.is_string for member in schema.enum_members),
            )

        if schema.is_collection:
            return ContractModel(
                name=schema.csharp_name,
                kind="collection",
                description=self._description(schema.description),
                base_type=f"System.Collections.ObjectModel.Collection<{schema.collection_item_type}>",
            )

        properties = [
            PropertyModel(
                name=prop.csharp_name,
                csharp_type=prop.csharp_type,
                json_name=prop.name,
                description=self._description(prop.description),
            )
            for prop in schema.properties
        ]
        return ContractModel(
            name=schema.csharp_name,
            kind="class",
            description=self._description(schema.description),
            base_type=schema.base_type,
            properties=properties,
            has_extension_data=(
                self.config.generate_default_additional_properties
                and schema.allows_additional_properties
                and schema.base_type is None
            ),
        )


def _enum_literal(value: object, index: int) -> str:
    if isinstance(value, bool):
        return str(index)
    if isinstance(value, int):
        return str(value)
    return str(index)


def file_usings(
    config: GenerationConfig,
    interfaces: list[InterfaceModel],
    contracts: list[ContractModel],
    registration: RegistrationModel | None,
) -> list[str]:
    """Using directives of a generated file.

    Defaults depend on what the file contains. Additional namespaces are
    appended and every namespace matching an exclusion pattern is removed.
    """
    usings = set(BASE_USINGS)
    if interfaces:
        usings.update(INTERFACE_USINGS)
        if config.use_cancellation_tokens:
            usings.add("System.Threading")
        if config.return_style is ReturnStyle.REACTIVE_STREAM:
            usings.add("System.Reactive")
    if contracts:
        usings.update(CONTRACT_USINGS)
        if any(contract.kind == "enum" for contract in contracts):
            usings.add("System.Runtime.Serialization")
    if registration is not None:
        usings.update({"Microsoft.Extensions.DependencyInjection", "Refit"})

    ordered = sorted(usings, key=lambda ns: (not ns.startswith("System"), ns))
    for namespace in config.additional_namespaces:
        if namespace and namespace not in ordered:
            ordered.append(namespace)

    excluded = config.filters.exclude_namespaces
    return [ns for ns in ordered if not any(re.search(pattern, ns) for pattern in excluded)]
