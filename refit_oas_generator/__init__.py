"""
Refit OpenAPI Client Generator

A Jinja2-based generator that produces C# Refit interfaces and data
contracts from Swagger 2.0 and OpenAPI 3.x specifications.
"""

from .config import GenerationConfig, resolve_config
from .errors import FailureKind, RefitGeneratorError
from .generator import GENERATOR_VERSION, CSharpTemplateEngine, RefitGenerator, create_generator
from .orchestrator import GenerationRun, RunOutcome, RunState, run_generation
from .parser import OASParser, OpenApiDocument, ParsedSpec, load_document
from .validation import ValidationResult, validate_document

__version__ = GENERATOR_VERSION
__author__ = "Refit OpenAPI Generator"

__all__ = [
    "CSharpTemplateEngine",
    "FailureKind",
    "GenerationConfig",
    "GenerationRun",
    "OASParser",
    "OpenApiDocument",
    "ParsedSpec",
    "RefitGenerator",
    "RefitGeneratorError",
    "RunOutcome",
    "RunState",
    "ValidationResult",
    "create_generator",
    "load_document",
    "resolve_config",
    "run_generation",
    "validate_document",
]
