"""
Jinja2 filters for C# code generation.

This module provides the text helpers used by the templates and by the
code model builders: XML documentation comments, string literals and Refit
attribute names.
"""

from __future__ import annotations

from typing import Final

_DOC_PREFIX: Final = "/// "

_XML_ESCAPES: Final = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
}

_REFIT_METHOD_ATTRIBUTES: Final = {
    "GET": "Get",
    "POST": "Post",
    "PUT": "Put",
    "DELETE": "Delete",
    "PATCH": "Patch",
    "HEAD": "Head",
    "OPTIONS": "Options",
}


def xml_escape(text: str) -> str:
    """Escape text for use inside an XML documentation element.

    Examples:
        >>> xml_escape("a < b & c")
        'a &lt; b &amp; c'
    """
    result = text
    for char, escaped in _XML_ESCAPES.items():
        result = result.replace(char, escaped)
    return result


def xml_doc_lines(text: str | None, tag: str = "summary", attributes: str = "") -> list[str]:
    """Format text as a C# XML documentation element.

    Single-line text stays on the tag line, except for summaries and
    remarks which always open and close on their own lines.

    Args:
        text: Documentation text. Empty text produces no lines.
        tag: XML element name, e.g. ``summary`` or ``param``.
        attributes: Raw attribute text for the opening tag.

    Returns:
        Lines starting with ``///``, without indentation.

    Examples:
        >>> xml_doc_lines("Find pet by ID")
        ['/// <summary>', '/// Find pet by ID', '/// </summary>']
        >>> xml_doc_lines("The pet id", "param", 'name="petId"')
        ['/// <param name="petId">The pet id</param>']
    """
    if not text or not text.strip():
        return []

    opening = f"<{tag} {attributes}>" if attributes else f"<{tag}>"
    closing = f"</{tag}>"
    lines = [xml_escape(line.rstrip()) for line in text.strip().splitlines()]

    body = [f"{_DOC_PREFIX}{line}".rstrip() for line in lines]
    if tag not in {"summary", "remarks"} and len(lines) == 1:
        return [f"{_DOC_PREFIX}{opening}{lines[0]}{closing}"]
    return [f"{_DOC_PREFIX}{opening}", *body, f"{_DOC_PREFIX}{closing}"]


def csharp_string_literal(text: str) -> str:
    """Format text as a regular C# string literal.

    Examples:
        >>> csharp_string_literal('say "hi"')
        '"say \\\\"hi\\\\""'
    """
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\r", "\\r")
    return f'"{escaped}"'


def verbatim_string_literal(text: str) -> str:
    """Format text as a C# verbatim string literal.

    Examples:
        >>> verbatim_string_literal('a"b')
        '@"a""b"'
    """
    return '@"' + text.replace('"', '""') + '"'


def refit_method_attribute(method: str) -> str:
    """Convert an HTTP method to the name of its Refit attribute.

    Examples:
        >>> refit_method_attribute("get")
        'Get'
    """
    return _REFIT_METHOD_ATTRIBUTES.get(method.upper(), method.title())


# Register filters that will be available in Jinja templates
FILTERS = {
    "xml_doc_lines": xml_doc_lines,
    "csharp_string_literal": csharp_string_literal,
    "verbatim_string_literal": verbatim_string_literal,
}
