"""
C# Code Generator Module

This module provides Jinja2-based generation of Refit interfaces and data
contracts from OpenAPI specifications.
"""

from .template_engine import (
    GENERATOR_VERSION,
    TOOL_NAME,
    CSharpTemplateEngine,
    RefitGenerator,
    create_generator,
)

__all__ = [
    "GENERATOR_VERSION",
    "TOOL_NAME",
    "CSharpTemplateEngine",
    "RefitGenerator",
    "create_generator",
]
