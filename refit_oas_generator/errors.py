"""
Failure taxonomy for a generation run.

Every failure a run can end with belongs to exactly one ``FailureKind``.
Collaborators raise the matching ``RefitGeneratorError`` subclass; the
orchestrator converts it into a ``RunOutcome`` so callers branch on the
kind instead of on exception types.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from refit_oas_generator.validation.validator import ValidationResult


class FailureKind(Enum):
    """The five failure domains of a generation run."""

    CONFIGURATION = "ConfigurationError"
    DOCUMENT_LOAD = "DocumentLoadError"
    DOCUMENT_VALIDATION = "DocumentValidationError"
    GENERATION = "GenerationError"
    WRITE = "WriteError"


# Exit codes used when the failure carries no native numeric signal
EXIT_SUCCESS: Final = 0
EXIT_CONFIGURATION_ERROR: Final = 2
EXIT_DOCUMENT_LOAD_ERROR: Final = 3
EXIT_DOCUMENT_VALIDATION_ERROR: Final = 4
EXIT_GENERATION_ERROR: Final = 5
EXIT_WRITE_ERROR: Final = 6

_EXIT_CODES: Final = {
    FailureKind.CONFIGURATION: EXIT_CONFIGURATION_ERROR,
    FailureKind.DOCUMENT_LOAD: EXIT_DOCUMENT_LOAD_ERROR,
    FailureKind.DOCUMENT_VALIDATION: EXIT_DOCUMENT_VALIDATION_ERROR,
    FailureKind.GENERATION: EXIT_GENERATION_ERROR,
    FailureKind.WRITE: EXIT_WRITE_ERROR,
}


def exit_code_for(kind: FailureKind, native_code: int | None = None) -> int:
    """Map a failure to a process exit code.

    Args:
        kind: The failure kind.
        native_code: Numeric signal of the underlying failure, if any.

    Returns:
        ``native_code`` when it is a usable non-zero exit status, otherwise
        the fixed sentinel for ``kind``.
    """
    if native_code and 0 < native_code < 256:  # noqa: PLR2004
        return native_code
    return _EXIT_CODES[kind]


class RefitGeneratorError(Exception):
    """Base class of all failures surfaced by a generation run."""

    kind: FailureKind = FailureKind.GENERATION

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.native_exit_code = exit_code

    @property
    def exit_code(self) -> int:
        return exit_code_for(self.kind, self.native_exit_code)


class ConfigurationError(RefitGeneratorError):
    """Bad or missing settings. Raised before any document I/O."""

    kind = FailureKind.CONFIGURATION


class DocumentLoadError(RefitGeneratorError):
    """The document could not be read, decoded, or has an unsupported version."""

    kind = FailureKind.DOCUMENT_LOAD

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        version: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        super().__init__(message, exit_code=exit_code)
        self.source = source
        self.version = version

    @property
    def is_unsupported_version(self) -> bool:
        return self.version is not None


class DocumentValidationError(RefitGeneratorError):
    """The document is readable but semantically invalid."""

    kind = FailureKind.DOCUMENT_VALIDATION

    def __init__(self, message: str, result: ValidationResult) -> None:
        super().__init__(message)
        self.result = result


class GenerationError(RefitGeneratorError):
    """The generation engine could not bind the document to the configuration."""

    kind = FailureKind.GENERATION


class WriteError(RefitGeneratorError):
    """Writing generated output to the file system failed."""

    kind = FailureKind.WRITE

    def __init__(self, message: str, *, path: str, exit_code: int | None = None) -> None:
        super().__init__(message, exit_code=exit_code)
        self.path = path
