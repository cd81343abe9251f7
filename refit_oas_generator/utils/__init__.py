"""
Utilities Module for C# Client Generation

This module provides utility functions for file operations, string case
conversions, and other common tasks in the client generation process.
"""

from .file_utils import ensure_directory, normalize_line_endings, write_text_atomic
from .string_case import (
    camelcase,
    capitalize_words,
    csharp_parameter_name,
    csharp_type_name,
    escape_csharp_keyword,
    normalize_csharp_identifier,
    pascalcase,
    snakecase,
)

__all__ = [
    "camelcase",
    "capitalize_words",
    "csharp_parameter_name",
    "csharp_type_name",
    "ensure_directory",
    "escape_csharp_keyword",
    "normalize_csharp_identifier",
    "normalize_line_endings",
    "pascalcase",
    "snakecase",
    "write_text_atomic",
]
