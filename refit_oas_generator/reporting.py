"""
Reporting of a generation run.

The orchestrator informs a ``ReportingSink`` at every milestone of a run.
``ConsoleReporter`` prints progress to stdout and failures to stderr, and
forwards usage data to an optional ``TelemetryChannel`` built on the
``refit_oas_generator.telemetry`` logger.
"""

from __future__ import annotations

import getpass
import hashlib
import logging
import socket
import sys
import traceback
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Final, Protocol, TextIO

from refit_oas_generator.config.resolver import is_url
from refit_oas_generator.config.settings import DEFAULT_NAMESPACE
from refit_oas_generator.errors import FailureKind, RefitGeneratorError
from refit_oas_generator.generator.template_engine import GENERATOR_VERSION, TOOL_NAME

if TYPE_CHECKING:
    from refit_oas_generator.config.settings import GenerationConfig
    from refit_oas_generator.parser.loader import OpenApiDocument
    from refit_oas_generator.validation.validator import ValidationResult

LOGGER_NAME: Final = "refit_oas_generator"
TELEMETRY_LOGGER_NAME: Final = f"{LOGGER_NAME}.telemetry"
SUPPORT_KEY_UNAVAILABLE: Final = "Unavailable when logging is disabled"
SUPPORT_KEY_LENGTH: Final = 7

_SEPARATOR: Final = "#" * 76


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger in the ``refit_oas_generator`` hierarchy.

    Args:
        name: Module ``__name__``, or None for the package logger.
    """
    if name is None or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{LOGGER_NAME}.{short}")


def configure_logging(verbose: bool = False) -> None:
    """Configure the package logger hierarchy.

    Levels:
        --verbose -> DEBUG (telemetry records are shown)
        (default) -> WARNING
    """
    level = logging.DEBUG if verbose else logging.WARNING

    root_logger = logging.getLogger(LOGGER_NAME)
    root_logger.setLevel(level)

    # Avoid duplicate handlers when called multiple times
    if root_logger.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(handler)
    root_logger.propagate = False


def support_key() -> str:
    """A short, stable and anonymous identifier of the current user and machine."""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "unknown"
    digest = hashlib.sha256(f"{user}@{socket.gethostname()}".encode()).hexdigest()
    return digest[:SUPPORT_KEY_LENGTH]


class TelemetryChannel:
    """Records feature usage and failures on the telemetry logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(TELEMETRY_LOGGER_NAME)
        self.support_key = support_key()

    def track_success(self, config: GenerationConfig, duration: float) -> None:
        features = {
            "custom_namespace": config.namespace != DEFAULT_NAMESPACE,
            "contracts": config.generate_contracts,
            "split": config.split_contracts,
            "dependency_injection": config.generate_dependency_injection,
            "return_style": config.return_style.value,
            "multiple_interfaces": config.multiple_interfaces.value,
            "operation_name_generator": config.naming.operation_name_generator.value,
            "trim_unused_schemas": config.filters.trim_unused_schemas,
            "remote_document": is_url(config.specification_path),
        }
        self.logger.info(
            "generation succeeded in %.3fs",
            duration,
            extra={"support_key": self.support_key, "features": features},
        )

    def track_failure(self, error: RefitGeneratorError) -> None:
        self.logger.info(
            "generation failed with %s",
            error.kind.value,
            extra={"support_key": self.support_key, "failure_kind": error.kind.value},
        )


class ReportingSink(Protocol):
    """Receives the milestones of a generation run."""

    def run_started(self) -> None: ...

    def settings_saved(self, path: Path) -> None: ...

    def document_loaded(self, document: OpenApiDocument) -> None: ...

    def validation_completed(self, result: ValidationResult) -> None: ...

    def output_generated(self, length: int) -> None: ...

    def output_written(self, path: Path, *, contracts: bool = False) -> None: ...

    def run_succeeded(self, config: GenerationConfig, duration: float) -> None: ...

    def run_failed(self, error: RefitGeneratorError, *, validation_skipped: bool) -> None: ...


class ConsoleReporter:
    """Prints run progress to stdout and failures to stderr.

    Args:
        telemetry: Channel receiving usage data, or None when logging is
            disabled.
        show_banner: Print the closing banner after a successful run.
        out: Stream for progress lines, ``sys.stdout`` when omitted.
        err: Stream for failures, ``sys.stderr`` when omitted.
    """

    def __init__(
        self,
        telemetry: TelemetryChannel | None = None,
        *,
        show_banner: bool = True,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.telemetry = telemetry
        self.show_banner = show_banner
        self._out = out
        self._err = err

    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    def _print(self, *values: object) -> None:
        print(*values, file=self.out)

    def _print_error(self, *values: object) -> None:
        print(*values, file=self.err)

    def run_started(self) -> None:
        key = self.telemetry.support_key if self.telemetry else SUPPORT_KEY_UNAVAILABLE
        self._print(f"{TOOL_NAME} v{GENERATOR_VERSION}")
        self._print(f"Support key: {key}")
        self._print()

    def settings_saved(self, path: Path) -> None:
        self._print(f"Settings: {path}")

    def document_loaded(self, document: OpenApiDocument) -> None:
        kind = "Swagger" if document.is_swagger_v2 else "OpenAPI"
        self._print(f"Loaded {kind} {document.version} document: {document.source}")

    def validation_completed(self, result: ValidationResult) -> None:
        for warning in result.diagnostics.warnings:
            self._print(f"Warning: {warning}")

        if not result.is_valid:
            self._print_error("OpenAPI validation failed:")
            for error in result.diagnostics.errors:
                self._print_error(f"Error: {error}")
            return

        self._print("OpenAPI statistics:")
        self._print(result.statistics)
        self._print()

    def output_generated(self, length: int) -> None:
        self._print(f"Length: {length} bytes")

    def output_written(self, path: Path, *, contracts: bool = False) -> None:
        label = "Contract Output" if contracts else "Output"
        self._print(f"{label}: {path}")

    def run_succeeded(self, config: GenerationConfig, duration: float) -> None:
        self._print(f"Duration: {duration:.3f}s")
        self._send_telemetry(lambda channel: channel.track_success(config, duration))

        if self.show_banner:
            self._print()
            self._print(_SEPARATOR)
            self._print(f"#  {TOOL_NAME} generated the client above. Report problems with your support")
            self._print("#  key so they can be traced back to this run.")
            self._print(_SEPARATOR)

    def run_failed(self, error: RefitGeneratorError, *, validation_skipped: bool) -> None:
        self._send_telemetry(lambda channel: channel.track_failure(error))

        if error.kind is FailureKind.DOCUMENT_VALIDATION:
            # Diagnostics were already printed by validation_completed
            self._print_error(error.message)
        else:
            self._print_error(f"Error: {error.message}")
            self._print_error(f"Type: {error.kind.value}")
            self._print_error("Stack Trace:")
            self._print_error("".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip())

        if not validation_skipped and error.kind is not FailureKind.CONFIGURATION:
            self._print_error()
            self._print_error("Try using the --skip-validation argument.")

    def _send_telemetry(self, send: Callable[[TelemetryChannel], None]) -> None:
        if self.telemetry is None:
            return
        try:
            send(self.telemetry)
        except Exception as e:  # noqa: BLE001
            self._print_error(f"Warning: telemetry could not be sent: {e}")
