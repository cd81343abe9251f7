"""
C# Template Engine for Refit Client Generation

This module uses Jinja2 templates to render a Refit interface, its data
contracts and an optional dependency injection registration from a parsed
OpenAPI specification.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final

from jinja2 import Environment, FileSystemLoader, select_autoescape

from refit_oas_generator.config.resolver import is_url
from refit_oas_generator.config.settings import GenerationConfig
from refit_oas_generator.errors import GenerationError, RefitGeneratorError
from refit_oas_generator.generator.code_model import (
    ContractBuilder,
    InterfaceBuilder,
    RegistrationModel,
    file_usings,
)
from refit_oas_generator.generator.filters import FILTERS
from refit_oas_generator.parser.loader import OpenApiDocument
from refit_oas_generator.parser.oas_parser import OASParser, ParsedSpec
from refit_oas_generator.parser.selection import OperationSelection
from refit_oas_generator.utils.file_utils import normalize_line_endings

TOOL_NAME: Final = "refit-oas-generator"
GENERATOR_VERSION: Final = "1.0.0"


class CSharpTemplateEngine:
    """Template engine for generating C# code."""

    def __init__(self, template_dir: Path | None = None) -> None:
        """Initialize the template engine."""
        if template_dir is None:
            current_dir = Path(__file__).parent
            template_dir = current_dir.parent / "templates"

        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

        self._register_filters()
        self._register_globals()

    def _register_filters(self) -> None:
        """Register custom Jinja2 filters for C# code generation."""
        self.env.filters.update(FILTERS)

    def _register_globals(self) -> None:
        """Register global values available in templates."""
        self.env.globals.update(
            {
                "tool_name": TOOL_NAME,
                "version": GENERATOR_VERSION,
            }
        )

    def render_template(self, template_name: str, context: dict[str, Any]) -> str:
        """Render a template with the given context."""
        template = self.env.get_template(template_name)
        return template.render(**context)


class RefitGenerator:
    """Generates the C# source of one pass for a bound document and configuration.

    ``generate`` has no side effects and returns byte-identical text for
    identical inputs.
    """

    def __init__(
        self,
        config: GenerationConfig,
        spec: ParsedSpec,
        template_engine: CSharpTemplateEngine | None = None,
    ) -> None:
        self.config = config
        self.spec = spec
        self.template_engine = template_engine or CSharpTemplateEngine()

    def generate(self) -> str:
        """Render the source file.

        Returns:
            C# source text with LF line endings and a trailing newline.
        """
        config = self.config
        accessibility = config.type_accessibility.keyword

        interfaces = InterfaceBuilder(config, self.spec).build() if config.generate_interface else []
        contracts = ContractBuilder(config, self.spec).build() if config.generate_contracts else []
        registration = None
        if config.generate_dependency_injection and interfaces:
            registration = RegistrationModel(
                interface_names=[interface.name for interface in interfaces],
                base_url=config.dependency_injection_base_url or self._absolute_server_url(),
            )

        blocks = [
            self.template_engine.render_template(
                "interface.cs.j2", {"interface": interface, "accessibility": accessibility}
            )
            for interface in interfaces
        ]
        blocks.extend(
            self.template_engine.render_template(
                "contract.cs.j2", {"contract": contract, "accessibility": accessibility}
            )
            for contract in contracts
        )
        if registration is not None:
            blocks.append(
                self.template_engine.render_template(
                    "registration.cs.j2", {"registration": registration, "accessibility": accessibility}
                )
            )

        content = self.template_engine.render_template(
            "file.cs.j2",
            {
                "add_auto_generated_header": config.documentation.add_auto_generated_header,
                "usings": file_usings(config, interfaces, contracts, registration),
                "namespace": config.namespace,
                "body": "\n\n".join(block.rstrip("\n") for block in blocks),
            },
        )
        return normalize_line_endings(content.rstrip("\n") + "\n")

    def _absolute_server_url(self) -> str | None:
        # Relative server URLs cannot be used as an HttpClient base address
        base_url = self.spec.base_url
        return base_url if base_url and is_url(base_url) else None


def create_generator(
    config: GenerationConfig,
    document: OpenApiDocument,
    template_engine: CSharpTemplateEngine | None = None,
) -> RefitGenerator:
    """Bind a loaded document to a configuration.

    Args:
        config: Settings of the generation pass.
        document: The document loaded once for the whole run.
        template_engine: Engine to reuse across passes.

    Returns:
        A generator ready to render the pass.

    Raises:
        GenerationError: If the document cannot be bound, e.g. when a
            referenced schema component is missing.
    """
    try:
        spec = OASParser(OperationSelection.from_config(config)).parse_document(document)
    except RefitGeneratorError:
        raise
    except Exception as e:
        msg = f"Unable to read the operations and schemas of {document.source}: {e}"
        raise GenerationError(msg) from e

    if spec.unresolved_refs:
        msg = f"Referenced schema component(s) not found: {', '.join(spec.unresolved_refs)}"
        raise GenerationError(msg)

    return RefitGenerator(config, spec, template_engine)
