"""
OpenAPI Parser Module for C# Client Generation

This module loads Swagger 2.0 and OpenAPI 3.x documents and extracts the
information needed for Refit client generation.
"""

from .loader import OpenApiDocument, document_from_text, load_document, parse_specification, read_specification
from .oas_parser import (
    EnumMember,
    OASParser,
    Operation,
    Parameter,
    ParsedSpec,
    Property,
    RequestBody,
    Response,
    Schema,
)
from .selection import OperationSelection

__all__ = [
    "EnumMember",
    "OASParser",
    "OpenApiDocument",
    "Operation",
    "OperationSelection",
    "Parameter",
    "ParsedSpec",
    "Property",
    "RequestBody",
    "Response",
    "Schema",
    "document_from_text",
    "load_document",
    "parse_specification",
    "read_specification",
]
