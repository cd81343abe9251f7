"""Tests for the C# Refit code generation."""

from dataclasses import replace
from pathlib import Path
from types import MappingProxyType

import pytest

from conftest import generate
from refit_oas_generator.config.settings import (
    DocumentationFlags,
    GenerationConfig,
    MultipleInterfaces,
    NamingPolicy,
    OperationNameGenerator,
    ReturnStyle,
    SchemaFilters,
    TypeAccessibility,
)
from refit_oas_generator.errors import GenerationError
from refit_oas_generator.generator.code_model import ContractModel, EnumMemberModel, PropertyModel, RegistrationModel
from refit_oas_generator.generator.template_engine import CSharpTemplateEngine, create_generator
from refit_oas_generator.parser.loader import OpenApiDocument, load_document


def contract_block(output: str, declaration: str) -> str:
    """Text of one generated type, from its declaration to its closing brace."""
    start = output.index(declaration)
    end = output.index("\n    }\n", start)
    return output[start:end]


class TestMinimalDocument:
    """A two-operation, one-schema document with default settings."""

    @pytest.fixture
    def output(self, minimal_document: OpenApiDocument) -> str:
        return generate(GenerationConfig(), minimal_document)

    def test_one_interface_with_two_methods(self, output: str) -> None:
        assert output.count("partial interface ") == 1
        assert "public partial interface IPetAPI" in output
        assert "Task<ICollection<Pet>> ListPets([Query] int? limit);" in output
        assert "Task<Pet> GetPetById(long petId);" in output

    def test_one_contract_matching_the_schema(self, output: str) -> None:
        assert output.count("partial class ") == 1
        assert "public partial class Pet\n" in output
        assert '[JsonPropertyName("name")]' in output
        assert "public string Name { get; set; }" in output
        assert "public long Id { get; set; }" in output

    def test_refit_attributes(self, output: str) -> None:
        assert '[Get("/pets")]' in output
        assert '[Get("/pets/{petId}")]' in output
        assert '[Headers("Accept: application/json")]' in output

    def test_default_namespace_and_usings(self, output: str) -> None:
        assert "namespace GeneratedCode\n{" in output
        assert "using Refit;" in output
        assert "using System.Text.Json.Serialization;" in output

    def test_auto_generated_header(self, output: str) -> None:
        assert output.startswith("// <auto-generated>")
        assert "///" not in output.split("using System;")[0]

    def test_xml_doc_comments(self, output: str) -> None:
        assert "/// <summary>" in output
        assert "/// List all pets" in output
        assert '/// <param name="limit">How many items to return</param>' in output
        assert "/// <returns>The pet</returns>" in output

    def test_extension_data(self, output: str) -> None:
        assert "[JsonExtensionData]" in output
        assert "public IDictionary<string, object> AdditionalProperties { get; set; }" in output

    def test_line_endings(self, output: str) -> None:
        assert "\r" not in output
        assert output.endswith("}\n")
        assert not output.endswith("\n\n")

    def test_interface_only(self, minimal_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(generate_contracts=False), minimal_document)

        assert "public partial interface IPetAPI" in output
        assert "class Pet" not in output
        assert "JsonPropertyName" not in output

    def test_contracts_only(self, minimal_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(generate_interface=False), minimal_document)

        assert "partial interface" not in output
        assert "[Get(" not in output
        assert "public partial class Pet\n" in output
        assert "using Refit;" not in output


class TestGenerationProperties:
    """Properties that hold for every document and configuration."""

    @pytest.mark.parametrize(
        "config",
        [
            GenerationConfig(),
            GenerationConfig(return_style=ReturnStyle.REACTIVE_STREAM, use_cancellation_tokens=True),
            GenerationConfig(multiple_interfaces=MultipleInterfaces.BY_TAG, generate_dependency_injection=True),
        ],
    )
    def test_deterministic(self, petstore_document: OpenApiDocument, config: GenerationConfig) -> None:
        first = create_generator(config, petstore_document).generate()
        second = create_generator(config, petstore_document).generate()

        assert first == second

    def test_no_contracts(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(generate_contracts=False), petstore_document)

        for name in ("Order", "Category", "User", "Pet", "ApiResponse"):
            assert f"partial class {name}\n" not in output
        assert "enum OrderStatus" not in output

    def test_no_xml_doc_comments(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(documentation=DocumentationFlags(generate_xml_doc_comments=False))
        output = generate(config, petstore_document)

        assert "///" not in output
        assert "<summary>" not in output
        assert "<param" not in output

    def test_namespace(self, minimal_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(namespace="Some.Other.Namespace"), minimal_document)

        assert "namespace Some.Other.Namespace\n{" in output
        assert output.count("namespace ") == 1

    def test_fixed_interface_name(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(naming=NamingPolicy(use_document_title=False, interface_name="SomeOtherName"))
        output = generate(config, petstore_document)

        assert "partial interface ISomeOtherName" in output
        assert "ISwaggerPetstoreOpenAPI30" not in output

    def test_document_title_interface_name(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(), petstore_document)

        assert "public partial interface ISwaggerPetstoreOpenAPI30" in output

    def test_fixed_name_ignored_with_document_title(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(naming=NamingPolicy(use_document_title=True, interface_name="SomeOtherName"))
        output = generate(config, petstore_document)

        assert "ISomeOtherName" not in output
        assert "ISwaggerPetstoreOpenAPI30" in output


class TestOperations:
    """Method signatures and attributes generated for the petstore document."""

    @pytest.fixture
    def output(self, petstore_document: OpenApiDocument) -> str:
        return generate(GenerationConfig(), petstore_document)

    def test_request_body(self, output: str) -> None:
        assert "Task<Pet> AddPet([Body] Pet body);" in output
        assert '[Headers("Accept: application/json, application/xml")]' in output
        assert '[Post("/pet")]' in output

    def test_path_level_parameters(self, output: str) -> None:
        assert "Task<Pet> GetPetById(long petId);" in output

    def test_header_parameter(self, output: str) -> None:
        assert 'Task DeletePet(long petId, [Header("api_key")] string apiKey);' in output
        assert '[Delete("/pet/{petId}")]' in output

    def test_operation_headers_disabled(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(documentation=DocumentationFlags(generate_operation_headers=False))
        output = generate(config, petstore_document)

        assert "Task DeletePet(long petId);" in output
        assert "[Header(" not in output

    def test_accept_headers_disabled(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(documentation=DocumentationFlags(add_accept_headers=False))
        output = generate(config, petstore_document)

        assert "[Headers(" not in output

    def test_multipart(self, output: str) -> None:
        assert "[Multipart]" in output
        assert "Task<ApiResponse> UploadFile(long petId, StreamPart file);" in output

    def test_query_parameters(self, output: str) -> None:
        assert "Task<ICollection<Pet>> FindPetsByStatus([Query] string status);" in output
        assert "Task<IDictionary<string, int>> GetInventory([Query] DateTimeOffset? since);" in output

    def test_deprecated_operation(self, output: str) -> None:
        method = output.index("FindPetsByTags(")
        assert "[System.Obsolete]" in output[output.rindex("/// <summary>", 0, method) : method]

    def test_deprecated_operations_disabled(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(documentation=DocumentationFlags(generate_deprecated_operations=False))
        output = generate(config, petstore_document)

        assert "FindPetsByTags" not in output
        assert "System.Obsolete" not in output

    def test_auto_generated_header_disabled(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(documentation=DocumentationFlags(add_auto_generated_header=False))
        output = generate(config, petstore_document)

        assert "<auto-generated>" not in output
        assert output.startswith("using System;\n")

    def test_wrapped_response(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(return_style=ReturnStyle.WRAPPED_RESPONSE), petstore_document)

        assert "Task<IApiResponse<Pet>> GetPetById(long petId);" in output
        assert "Task<IApiResponse> DeletePet(" in output
        assert "ApiException" not in output

    def test_reactive_stream(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(return_style=ReturnStyle.REACTIVE_STREAM), petstore_document)

        assert "IObservable<Pet> GetPetById(long petId);" in output
        assert "IObservable<Unit> DeletePet(" in output
        assert "using System.Reactive;" in output

    def test_cancellation_tokens(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(use_cancellation_tokens=True), petstore_document)

        assert "Task<Pet> GetPetById(long petId, CancellationToken cancellationToken = default);" in output
        assert "using System.Threading;" in output
        assert '/// <param name="cancellationToken">' in output

    def test_optional_parameters(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(optional_parameters=True), petstore_document)

        assert 'Task DeletePet(long petId, [Header("api_key")] string apiKey = default);' in output
        assert "FindPetsByStatus([Query] string status = default);" in output

    def test_iso_date_format(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(use_iso_date_format=True), petstore_document)

        assert 'GetInventory([Query(Format = "yyyy-MM-dd")] DateTimeOffset? since);' in output

    def test_internal_accessibility(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(type_accessibility=TypeAccessibility.INTERNAL), petstore_document)

        assert "internal partial interface ISwaggerPetstoreOpenAPI30" in output
        assert "internal partial class Pet\n" in output
        assert "internal enum OrderStatus" in output
        assert "public partial" not in output
        assert "public enum" not in output


class TestNaming:
    """Operation naming strategies and templates."""

    def test_operation_name_template(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(naming=NamingPolicy(operation_name_template="{operationName}Async"))
        output = generate(config, petstore_document)

        assert "Task<Pet> GetPetByIdAsync(long petId);" in output
        assert "Task<Pet> AddPetAsync([Body] Pet body);" in output

    def test_path_segments_strategy(self, petstore_document: OpenApiDocument) -> None:
        naming = NamingPolicy(operation_name_generator=OperationNameGenerator.SINGLE_CLIENT_FROM_PATH_SEGMENTS)
        output = generate(GenerationConfig(naming=naming), petstore_document)

        assert "Task<Pet> GetPetByPetId(long petId);" in output
        assert "Task DeletePetByPetId(" in output
        assert "GetStoreInventory(" in output
        assert "GetPetFindByStatus(" in output

    def test_first_tag_and_operation_id_strategy(self, petstore_document: OpenApiDocument) -> None:
        naming = NamingPolicy(
            operation_name_generator=OperationNameGenerator.MULTIPLE_CLIENTS_FROM_FIRST_TAG_AND_OPERATION_ID
        )
        output = generate(GenerationConfig(naming=naming), petstore_document)

        assert "Task<Pet> PetGetPetById(long petId);" in output
        assert "StoreGetOrderById(" in output

    def test_duplicate_names_are_suffixed(self) -> None:
        content = {
            "openapi": "3.0.0",
            "info": {"title": "Dupes", "version": "1"},
            "paths": {
                "/a": {"get": {"operationId": "fetch", "responses": {"204": {"description": "ok"}}}},
                "/b": {"get": {"operationId": "Fetch", "responses": {"204": {"description": "ok"}}}},
            },
        }
        document = _document(content)
        output = generate(GenerationConfig(), document)

        assert "Task Fetch();" in output
        assert "Task Fetch2();" in output

    def test_operations_without_id(self) -> None:
        content = {
            "openapi": "3.0.0",
            "info": {"title": "Anonymous", "version": "1"},
            "paths": {"/users/{id}": {"put": {"parameters": [{"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}], "responses": {"204": {"description": "ok"}}}}},  # noqa: E501
        }
        output = generate(GenerationConfig(), _document(content))

        assert "Task PutUsersById(string id);" in output

    def test_multiple_interfaces_by_tag(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(multiple_interfaces=MultipleInterfaces.BY_TAG), petstore_document)

        assert output.count("partial interface ") == 2
        assert "public partial interface IPetApi" in output
        assert "public partial interface IStoreApi" in output
        pet_api = contract_block(output, "partial interface IPetApi")
        assert "GetOrderById" not in pet_api

    def test_multiple_interfaces_by_endpoint(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(multiple_interfaces=MultipleInterfaces.BY_ENDPOINT), petstore_document)

        assert output.count("partial interface ") == 8
        assert "public partial interface IGetPetByIdEndpoint" in output
        assert "Task<Pet> Execute(long petId);" in output


class TestContracts:
    """Data contracts generated for the petstore document."""

    @pytest.fixture
    def output(self, petstore_document: OpenApiDocument) -> str:
        return generate(GenerationConfig(), petstore_document)

    def test_enum(self, output: str) -> None:
        block = contract_block(output, "public enum OrderStatus")
        assert '[EnumMember(Value = @"placed")]' in block
        assert "Placed = 0," in block
        assert "Delivered = 2," in block
        assert "[JsonConverter(typeof(JsonStringEnumConverter))]" in output
        assert "using System.Runtime.Serialization;" in output

    def test_enum_reference_is_nullable(self, output: str) -> None:
        assert "public OrderStatus? Status { get; set; }" in contract_block(output, "public partial class Order\n")

    def test_property_types(self, output: str) -> None:
        pet = contract_block(output, "public partial class Pet\n")
        assert "public long? Id { get; set; }" in pet
        assert "public string Name { get; set; }" in pet
        assert "public Category Category { get; set; }" in pet
        assert "public ICollection<string> PhotoUrls { get; set; }" in pet
        assert "/// A pet for sale in the pet store" in output

    def test_additional_properties_false(self, output: str) -> None:
        assert "AdditionalProperties" not in contract_block(output, "public partial class User\n")
        assert "AdditionalProperties" in contract_block(output, "public partial class Category\n")

    def test_skip_default_additional_properties(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(generate_default_additional_properties=False), petstore_document)

        assert "JsonExtensionData" not in output

    def test_inheritance_and_collections(self) -> None:
        content = {
            "openapi": "3.0.0",
            "info": {"title": "Zoo", "version": "1"},
            "paths": {},
            "components": {
                "schemas": {
                    "Animal": {"type": "object", "properties": {"name": {"type": "string"}}},
                    "Dog": {
                        "allOf": [
                            {"$ref": "#/components/schemas/Animal"},
                            {"type": "object", "properties": {"barks": {"type": "boolean"}}},
                        ]
                    },
                    "Dogs": {"type": "array", "items": {"$ref": "#/components/schemas/Dog"}},
                }
            },
        }
        output = generate(GenerationConfig(), _document(content))

        assert "public partial class Dog : Animal" in output
        assert "public bool? Barks { get; set; }" in output
        assert "public partial class Dogs : System.Collections.ObjectModel.Collection<Dog>" in output

    def test_inline_request_body_becomes_contract(self) -> None:
        content = {
            "openapi": "3.0.0",
            "info": {"title": "Inline", "version": "1"},
            "paths": {
                "/login": {
                    "post": {
                        "operationId": "login",
                        "requestBody": {
                            "content": {
                                "application/json": {
                                    "schema": {"type": "object", "properties": {"user": {"type": "string"}}}
                                }
                            }
                        },
                        "responses": {"204": {"description": "ok"}},
                    }
                }
            },
        }
        output = generate(GenerationConfig(), _document(content))

        assert "Task Login([Body] LoginRequest body);" in output
        assert "public partial class LoginRequest\n" in output


class TestFiltering:
    """Operation selection and schema trimming."""

    def test_include_tags(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(filters=SchemaFilters(include_tags=("store",))), petstore_document)

        assert "GetOrderById(" in output
        assert "GetPetById(" not in output

    def test_include_path_patterns(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(filters=SchemaFilters(include_path_patterns=("^/store",)))
        output = generate(config, petstore_document)

        assert "GetOrderById(" in output
        assert "GetInventory(" in output
        assert "AddPet(" not in output

    def test_trim_unused_schemas(self, petstore_document: OpenApiDocument) -> None:
        filters = SchemaFilters(include_tags=("store",), trim_unused_schemas=True)
        output = generate(GenerationConfig(filters=filters), petstore_document)

        assert "public partial class Order\n" in output
        assert "public enum OrderStatus" in output
        assert "partial class Pet\n" not in output
        assert "partial class User\n" not in output

    def test_keep_schema_patterns(self, petstore_document: OpenApiDocument) -> None:
        filters = SchemaFilters(include_tags=("store",), trim_unused_schemas=True, keep_schema_patterns=("^Pet$",))
        output = generate(GenerationConfig(filters=filters), petstore_document)

        assert "public partial class Pet\n" in output
        assert "public partial class Category\n" in output
        assert "partial class User\n" not in output

    def test_additional_and_excluded_namespaces(self, minimal_document: OpenApiDocument) -> None:
        config = GenerationConfig(
            additional_namespaces=("MyCompany.Shared",),
            filters=SchemaFilters(exclude_namespaces=(r"^System\.Net\.Http$",)),
        )
        output = generate(config, minimal_document)

        assert "using MyCompany.Shared;" in output
        assert "using System.Net.Http;" not in output
        assert "using System.Threading.Tasks;" in output


class TestDependencyInjection:
    def test_registration_with_document_server(self, minimal_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(generate_dependency_injection=True), minimal_document)

        assert "public static partial class IServiceCollectionExtensions" in output
        assert ".AddRefitClient<IPetAPI>()" in output
        assert '.ConfigureHttpClient(c => c.BaseAddress = new Uri("https://api.example.com/v1"));' in output
        assert "using Microsoft.Extensions.DependencyInjection;" in output

    def test_registration_with_relative_server(self, petstore_document: OpenApiDocument) -> None:
        output = generate(GenerationConfig(generate_dependency_injection=True), petstore_document)

        assert "ConfigureRefitClients(this IServiceCollection services, Uri baseUrl)" in output
        assert "c.BaseAddress = baseUrl" in output

    def test_registration_with_configured_base_url(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(
            generate_dependency_injection=True,
            dependency_injection_base_url="https://petstore3.swagger.io/api/v3",
        )
        output = generate(config, petstore_document)

        assert 'new Uri("https://petstore3.swagger.io/api/v3")' in output

    def test_no_registration_without_interface(self, minimal_document: OpenApiDocument) -> None:
        config = GenerationConfig(generate_dependency_injection=True, generate_interface=False)
        output = generate(config, minimal_document)

        assert "IServiceCollectionExtensions" not in output


class TestSwaggerV2:
    @pytest.fixture
    def output(self, swagger_document: OpenApiDocument) -> str:
        return generate(GenerationConfig(), swagger_document)

    def test_interface_name(self, output: str) -> None:
        assert "public partial interface ILegacyStore" in output

    def test_aliased_query_parameter(self, output: str) -> None:
        assert 'Task<ICollection<Item>> ListItems([Query, AliasAs("page-size")] int? pageSize);' in output

    def test_body_parameter(self, output: str) -> None:
        assert "Task<Item> CreateItem([Body] Item body);" in output

    def test_form_data_file(self, output: str) -> None:
        assert "Task UploadAttachment(string id, StreamPart file);" in output
        assert "[Multipart]" in output

    def test_definitions(self, output: str) -> None:
        assert "public Guid? Id { get; set; }" in output
        assert "public decimal? Price { get; set; }" in output

    def test_global_produces(self, output: str) -> None:
        assert output.count('[Headers("Accept: application/json")]') == 3


class TestGeneratorSetup:
    def test_missing_schema_component(self, specs_dir: Path) -> None:
        document = load_document(str(specs_dir / "missing_ref.json"))

        with pytest.raises(GenerationError, match="Thing"):
            create_generator(GenerationConfig(), document)

    def test_split_passes_share_document(self, petstore_document: OpenApiDocument) -> None:
        config = GenerationConfig(split_contracts=True)

        interface_source = generate(config.interface_pass(), petstore_document)
        contract_source = generate(config.contracts_pass(), petstore_document)

        assert "partial interface" in interface_source
        assert "partial class" not in interface_source
        assert "partial interface" not in contract_source
        assert "public partial class Pet\n" in contract_source
        assert replace(config, generate_contracts=False) == config.interface_pass()


class TestTemplates:
    @pytest.fixture
    def engine(self) -> CSharpTemplateEngine:
        return CSharpTemplateEngine()

    def test_contract_template_formats_raw_values(self, engine: CSharpTemplateEngine) -> None:
        contract = ContractModel(
            name="Thing",
            kind="class",
            description="A thing",
            properties=[PropertyModel(name="Label", csharp_type="string", json_name='the "label"')],
        )

        source = engine.render_template("contract.cs.j2", {"contract": contract, "accessibility": "public"})

        assert source.splitlines()[:3] == ["    /// <summary>", "    /// A thing", "    /// </summary>"]
        assert '[JsonPropertyName("the \\"label\\"")]' in source

    def test_enum_template_keeps_empty_wire_value(self, engine: CSharpTemplateEngine) -> None:
        contract = ContractModel(
            name="Mode",
            kind="enum",
            members=[EnumMemberModel(name="Empty", value="0", wire_value="")],
            is_string_enum=True,
        )

        source = engine.render_template("contract.cs.j2", {"contract": contract, "accessibility": "public"})

        assert '[EnumMember(Value = @"")]' in source

    @pytest.mark.parametrize(
        ("base_url", "expected"),
        [
            ("https://api.example.com", 'c.BaseAddress = new Uri("https://api.example.com"));'),
            (None, "c.BaseAddress = baseUrl);"),
        ],
    )
    def test_registration_base_address(
        self, engine: CSharpTemplateEngine, base_url: str | None, expected: str
    ) -> None:
        registration = RegistrationModel(interface_names=["IPets"], base_url=base_url)

        source = engine.render_template(
            "registration.cs.j2", {"registration": registration, "accessibility": "public"}
        )

        assert expected in source

    def test_registered_filters(self, engine: CSharpTemplateEngine) -> None:
        assert {"xml_doc_lines", "csharp_string_literal", "verbatim_string_literal"} <= set(engine.env.filters)


def _document(content: dict) -> OpenApiDocument:
    return OpenApiDocument(source="inline.json", version=str(content["openapi"]), content=MappingProxyType(content))
