"""
String case conversion utilities for C# client generation.

This module provides the string case conversions used to turn OpenAPI
names (operation ids, schema names, parameter names, path segments) into
C# identifiers, together with C# keyword handling.

Based on https://github.com/okunishinishi/python-stringcase
with additional C#-specific naming conventions.
"""

import re
from collections.abc import Callable
from typing import Final

# Regex patterns for case conversion
_SNAKE_CASE_DELIMITER_PATTERN: Final = re.compile(r"[\-\.\s/]")
_ACRONYM_PATTERN: Final = re.compile(r"([A-Z])([A-Z][a-z])")
_LOWER_UPPER_PATTERN: Final = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUMERIC_PATTERN: Final = re.compile(r"[^a-zA-Z0-9_]")
_WORD_SPLIT_PATTERN: Final = re.compile(r"[^a-zA-Z0-9]+")

# Reserved C# keywords that need to be escaped with @
CSHARP_KEYWORDS: Final = frozenset(
    {
        "abstract",
        "as",
        "base",
        "bool",
        "break",
        "byte",
        "case",
        "catch",
        "char",
        "checked",
        "class",
        "const",
        "continue",
        "decimal",
        "default",
        "delegate",
        "do",
        "double",
        "else",
        "enum",
        "event",
        "explicit",
        "extern",
        "false",
        "finally",
        "fixed",
        "float",
        "for",
        "foreach",
        "goto",
        "if",
        "implicit",
        "in",
        "int",
        "interface",
        "internal",
        "is",
        "lock",
        "long",
        "namespace",
        "new",
        "null",
        "object",
        "operator",
        "out",
        "override",
        "params",
        "private",
        "protected",
        "public",
        "readonly",
        "ref",
        "return",
        "sbyte",
        "sealed",
        "short",
        "sizeof",
        "stackalloc",
        "static",
        "string",
        "struct",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "uint",
        "ulong",
        "unchecked",
        "unsafe",
        "ushort",
        "using",
        "virtual",
        "void",
        "volatile",
        "while",
    }
)


def _convert_if_not_empty(string: str | None, conversion_func: Callable[[str], str]) -> str:
    """Safely convert a string, returning empty string if input is None or empty."""
    return conversion_func(string) if string else ""


def snakecase(string: str | None) -> str:
    """Convert string into snake_case.

    Handles various formats including camelCase with acronyms.

    Args:
        string: String to convert.

    Returns:
        Snake case string.

    Examples:
        >>> snakecase("HelloWorld")
        'hello_world'
        >>> snakecase("hello-world")
        'hello_world'
        >>> snakecase("getHTTPResponse")
        'get_http_response'
    """

    def _snakecase(s: str) -> str:
        s = _SNAKE_CASE_DELIMITER_PATTERN.sub("_", s)
        s = _ACRONYM_PATTERN.sub(r"\1_\2", s)
        s = _LOWER_UPPER_PATTERN.sub(r"\1_\2", s)
        return s.lower()

    return _convert_if_not_empty(string, _snakecase)


def camelcase(string: str | None) -> str:
    """Convert string into camel case.

    Args:
        string: String to convert.

    Returns:
        Camel case string.

    Examples:
        >>> camelcase("hello_world")
        'helloWorld'
        >>> camelcase("api_key")
        'apiKey'
    """

    def _camelcase(s: str) -> str:
        words = [word for word in snakecase(s).split("_") if word]
        if not words:
            return ""
        return words[0] + "".join(word.capitalize() for word in words[1:])

    return _convert_if_not_empty(string, _camelcase)


def pascalcase(string: str | None) -> str:
    """Convert string into PascalCase.

    Args:
        string: String to convert.

    Returns:
        PascalCase string.

    Examples:
        >>> pascalcase("hello_world")
        'HelloWorld'
        >>> pascalcase("findPetsByStatus")
        'FindPetsByStatus'
    """

    def _pascalcase(s: str) -> str:
        return "".join(word.capitalize() for word in snakecase(s).split("_"))

    return _convert_if_not_empty(string, _pascalcase)


def capitalize_words(string: str | None) -> str:
    """Join the alphanumeric words of a string, upper-casing each first letter.

    Unlike :func:`pascalcase` the remaining letters keep their case, which
    preserves acronyms in document titles.

    Examples:
        >>> capitalize_words("Swagger Petstore - OpenAPI 3.0")
        'SwaggerPetstoreOpenAPI30'
    """

    def _capitalize_words(s: str) -> str:
        return "".join(word[0].upper() + word[1:] for word in _WORD_SPLIT_PATTERN.split(s) if word)

    return _convert_if_not_empty(string, _capitalize_words)


def normalize_csharp_identifier(name: str | None) -> str:
    """Normalize name to be a valid C# identifier.

    Args:
        name: The string to normalize.

    Returns:
        A valid C# identifier.

    Examples:
        >>> normalize_csharp_identifier("123invalid")
        '_123invalid'
        >>> normalize_csharp_identifier("valid@name")
        'valid_name'
    """

    def _normalize(s: str) -> str:
        normalized = _NON_ALPHANUMERIC_PATTERN.sub("_", s)

        if normalized and normalized[0].isdigit():
            normalized = f"_{normalized}"

        return normalized

    return _convert_if_not_empty(name, _normalize)


def escape_csharp_keyword(name: str) -> str:
    """Escape C# keywords with the @ prefix if necessary.

    Examples:
        >>> escape_csharp_keyword("class")
        '@class'
        >>> escape_csharp_keyword("name")
        'name'
    """
    return f"@{name}" if name in CSHARP_KEYWORDS else name


def csharp_type_name(name: str | None) -> str:
    """PascalCase type name that is always a valid C# identifier."""
    return normalize_csharp_identifier(pascalcase(normalize_csharp_identifier(name)))


def csharp_parameter_name(name: str | None) -> str:
    """camelCase parameter name, escaped when it collides with a keyword."""
    return escape_csharp_keyword(normalize_csharp_identifier(camelcase(normalize_csharp_identifier(name))))
