"""
Validation Module

Structural validation of OpenAPI documents with structured diagnostics and
document statistics.
"""

from .validator import (
    DocumentStatistics,
    DocumentValidator,
    ValidationDiagnostics,
    ValidationIssue,
    ValidationResult,
    validate_content,
    validate_document,
    validate_text,
)

__all__ = [
    "DocumentStatistics",
    "DocumentValidator",
    "ValidationDiagnostics",
    "ValidationIssue",
    "ValidationResult",
    "validate_content",
    "validate_document",
    "validate_text",
]
