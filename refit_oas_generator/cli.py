#!/usr/bin/env python3
"""Command-line interface for the Refit OAS Generator."""

import argparse
import sys
from pathlib import Path

from refit_oas_generator.config.settings import DEFAULT_NAMESPACE, DEFAULT_OUTPUT_FILENAME
from refit_oas_generator.errors import ConfigurationError
from refit_oas_generator.orchestrator import run_generation
from refit_oas_generator.reporting import ConsoleReporter, ReportingSink, TelemetryChannel, configure_logging


def parse_command_line_args(args: list[str] | None = None) -> argparse.Namespace:
    """Create and configure the command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="refit-oas-generator",
        description="Generate a C# Refit client from an OpenAPI specification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ./openapi.json
  %(prog)s https://petstore3.swagger.io/api/v3/openapi.yaml --namespace Petstore
  %(prog)s ./openapi.json --output ./Client.cs --interface-only
  %(prog)s ./openapi.json --split-contracts --contracts-output ./Contracts.cs
  %(prog)s --settings-file ./petstore.refitter
        """,
    )
    parser.add_argument(
        "spec_path",
        nargs="?",
        help="Path or URL to the OpenAPI specification file (JSON or YAML)",
        metavar="SPEC_PATH",
    )
    parser.add_argument(
        "--settings-file",
        help="Path to a settings document; replaces every other generation option",
        dest="settings_file",
    )
    parser.add_argument(
        "--save-settings",
        help="Write the resolved settings as a settings document to this path",
        dest="save_settings",
    )

    output = parser.add_argument_group("output")
    output.add_argument(
        "--namespace",
        "-n",
        default=DEFAULT_NAMESPACE,
        help="Namespace of the generated code (default: %(default)s)",
    )
    output.add_argument(
        "--output",
        "-o",
        default=DEFAULT_OUTPUT_FILENAME,
        help="Path to the output file (default: %(default)s)",
        dest="output_path",
    )
    output.add_argument("--output-folder", help="Folder the output file is placed in", dest="output_folder")
    output.add_argument(
        "--split-contracts",
        action="store_true",
        help="Write contracts to a separate file",
        dest="split_contracts",
    )
    output.add_argument(
        "--contracts-output",
        help="Path to the contracts file in split mode (default: <output>.Contracts.cs)",
        dest="contracts_output",
    )

    generation = parser.add_argument_group("generation")
    generation.add_argument(
        "--interface-only",
        action="store_true",
        help="Do not generate contract types",
        dest="interface_only",
    )
    generation.add_argument(
        "--use-api-response",
        action="store_true",
        help="Return Task<IApiResponse<T>> instead of Task<T>",
        dest="use_api_response",
    )
    generation.add_argument(
        "--use-observable-response",
        action="store_true",
        help="Return IObservable<T> instead of Task<T>",
        dest="use_observable_response",
    )
    generation.add_argument(
        "--cancellation-tokens",
        action="store_true",
        help="Add a CancellationToken parameter to every method",
        dest="cancellation_tokens",
    )
    generation.add_argument(
        "--internal",
        action="store_true",
        help="Generate internal types instead of public",
    )
    generation.add_argument(
        "--interface-name",
        help="Interface name to use instead of the document title",
        dest="interface_name",
    )
    generation.add_argument(
        "--multiple-interfaces",
        help="Generate one interface per endpoint or per tag (ByEndpoint, ByTag)",
        dest="multiple_interfaces",
    )
    generation.add_argument(
        "--operation-name-template",
        help="Template for method names, must contain {operationName}",
        dest="operation_name_template",
    )
    generation.add_argument(
        "--operation-name-generator",
        help=(
            "Method naming strategy (Default, SingleClientFromOperationId, "
            "SingleClientFromPathSegments, MultipleClientsFromFirstTagAndOperationId)"
        ),
        dest="operation_name_generator",
    )
    generation.add_argument(
        "--optional-nullable-parameters",
        action="store_true",
        help="Give optional parameters a default value and move them last",
        dest="optional_parameters",
    )
    generation.add_argument(
        "--use-iso-date-format",
        action="store_true",
        help="Format date query parameters as yyyy-MM-dd",
        dest="use_iso_date_format",
    )
    generation.add_argument(
        "--additional-namespace",
        action="append",
        default=[],
        help="Additional using directive (repeatable)",
        dest="additional_namespaces",
    )
    generation.add_argument(
        "--exclude-namespace",
        action="append",
        default=[],
        help="Regular expression of using directives to remove (repeatable)",
        dest="exclude_namespaces",
    )
    generation.add_argument(
        "--skip-default-additional-properties",
        action="store_true",
        help="Do not add an AdditionalProperties dictionary to contracts",
        dest="skip_default_additional_properties",
    )
    generation.add_argument(
        "--dependency-injection",
        action="store_true",
        help="Generate an IServiceCollection registration for the interfaces",
        dest="di_registration",
    )
    generation.add_argument(
        "--di-base-url",
        help="Base address used by the dependency injection registration",
        dest="di_base_url",
    )

    filtering = parser.add_argument_group("filtering")
    filtering.add_argument(
        "--match-path",
        action="append",
        default=[],
        help="Only generate operations whose path matches this regular expression (repeatable)",
        dest="match_paths",
    )
    filtering.add_argument(
        "--tag",
        action="append",
        default=[],
        help="Only generate operations with this tag (repeatable)",
        dest="tags",
    )
    filtering.add_argument(
        "--trim-unused-schema",
        action="store_true",
        help="Remove schemas not used by the generated operations",
        dest="trim_unused_schema",
    )
    filtering.add_argument(
        "--keep-schema",
        action="append",
        default=[],
        help="Regular expression of schemas kept when trimming (repeatable)",
        dest="keep_schemas",
    )
    filtering.add_argument(
        "--no-deprecated-operations",
        action="store_true",
        help="Do not generate deprecated operations",
        dest="no_deprecated_operations",
    )

    documentation = parser.add_argument_group("documentation")
    documentation.add_argument(
        "--no-auto-generated-header",
        action="store_true",
        help="Do not add the <auto-generated> header",
        dest="no_auto_generated_header",
    )
    documentation.add_argument(
        "--no-accept-headers",
        action="store_true",
        help="Do not add Accept headers to operations",
        dest="no_accept_headers",
    )
    documentation.add_argument(
        "--no-xml-doc-comments",
        action="store_true",
        help="Do not generate XML documentation comments",
        dest="no_xml_doc_comments",
    )
    documentation.add_argument(
        "--no-operation-headers",
        action="store_true",
        help="Do not generate header parameters",
        dest="no_operation_headers",
    )

    run = parser.add_argument_group("run")
    run.add_argument(
        "--skip-validation",
        action="store_true",
        help="Skip validation of the OpenAPI specification",
        dest="skip_validation",
    )
    run.add_argument(
        "--no-logging",
        action="store_true",
        help="Disable telemetry and the support key",
        dest="no_logging",
    )
    run.add_argument(
        "--no-banner",
        action="store_true",
        help="Do not print the closing banner",
        dest="no_banner",
    )
    run.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    return parser.parse_args(args)


def create_reporter(parsed_args: argparse.Namespace) -> ConsoleReporter:
    """Build the console reporter for the parsed arguments."""
    telemetry = None if parsed_args.no_logging else TelemetryChannel()
    return ConsoleReporter(telemetry, show_banner=not parsed_args.no_banner)


def read_settings_file(path: str) -> bytes:
    """Read a settings document.

    Raises:
        ConfigurationError: If the file cannot be read.
    """
    try:
        return Path(path).read_bytes()
    except OSError as e:
        msg = f"Unable to read settings file {path}: {e.strerror or e}"
        raise ConfigurationError(msg) from e


def main(args: list[str] | None = None, reporter: ReportingSink | None = None) -> int:
    """Generate a Refit client from an OpenAPI specification."""
    parsed_args = parse_command_line_args(args)
    configure_logging(verbose=parsed_args.verbose)
    reporter = reporter or create_reporter(parsed_args)

    persisted = None
    if parsed_args.settings_file:
        try:
            persisted = read_settings_file(parsed_args.settings_file)
        except ConfigurationError as e:
            reporter.run_started()
            reporter.run_failed(e, validation_skipped=parsed_args.skip_validation)
            return e.exit_code

    outcome = run_generation(parsed_args, reporter, persisted)
    return outcome.exit_code


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
