"""Tests for console reporting and telemetry."""

import io
import logging
from pathlib import Path

import pytest

from refit_oas_generator.config.settings import GenerationConfig
from refit_oas_generator.errors import ConfigurationError, DocumentLoadError, GenerationError
from refit_oas_generator.parser.loader import OpenApiDocument
from refit_oas_generator.reporting import (
    SUPPORT_KEY_UNAVAILABLE,
    ConsoleReporter,
    TelemetryChannel,
    get_logger,
    support_key,
)
from refit_oas_generator.validation.validator import validate_document


class BrokenTelemetry(TelemetryChannel):
    def track_success(self, config: GenerationConfig, duration: float) -> None:
        raise ConnectionError("offline")

    def track_failure(self, error: Exception) -> None:  # type: ignore[override]
        raise ConnectionError("offline")


@pytest.fixture
def out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def err() -> io.StringIO:
    return io.StringIO()


def _raised(error: Exception) -> Exception:
    """Give an error a traceback."""
    try:
        raise error
    except Exception as e:  # noqa: BLE001
        return e


class TestConsoleReporter:
    def test_run_started_without_telemetry(self, out: io.StringIO, err: io.StringIO) -> None:
        ConsoleReporter(out=out, err=err).run_started()

        lines = out.getvalue().splitlines()
        assert lines[0] == "refit-oas-generator v1.0.0"
        assert lines[1] == f"Support key: {SUPPORT_KEY_UNAVAILABLE}"

    def test_run_started_with_telemetry(self, out: io.StringIO, err: io.StringIO) -> None:
        ConsoleReporter(TelemetryChannel(), out=out, err=err).run_started()

        assert f"Support key: {support_key()}" in out.getvalue()

    def test_progress(self, out: io.StringIO, err: io.StringIO, minimal_document: OpenApiDocument) -> None:
        reporter = ConsoleReporter(out=out, err=err)

        reporter.document_loaded(minimal_document)
        reporter.output_generated(1234)
        reporter.output_written(Path("Output.cs"))
        reporter.output_written(Path("Output.Contracts.cs"), contracts=True)

        assert out.getvalue().splitlines() == [
            f"Loaded OpenAPI 3.0.3 document: {minimal_document.source}",
            "Length: 1234 bytes",
            "Output: Output.cs",
            "Contract Output: Output.Contracts.cs",
        ]
        assert err.getvalue() == ""

    def test_valid_document_statistics(self, out: io.StringIO, err: io.StringIO, petstore_spec_path: Path) -> None:
        ConsoleReporter(out=out, err=err).validation_completed(validate_document(str(petstore_spec_path)))

        assert "OpenAPI statistics:" in out.getvalue()
        assert " - Operations     : 8" in out.getvalue()

    def test_invalid_document(self, out: io.StringIO, err: io.StringIO, specs_dir: Path) -> None:
        result = validate_document(str(specs_dir / "invalid.json"))

        ConsoleReporter(out=out, err=err).validation_completed(result)

        assert "OpenAPI statistics:" not in out.getvalue()
        assert err.getvalue().startswith("OpenAPI validation failed:\n")
        assert "Error: The field 'title' in 'info' object is REQUIRED. [#/info]" in err.getvalue()

    def test_banner(self, out: io.StringIO, err: io.StringIO) -> None:
        ConsoleReporter(out=out, err=err).run_succeeded(GenerationConfig(), 0.25)

        assert "Duration: 0.250s" in out.getvalue()
        assert "#" * 76 in out.getvalue()

    def test_no_banner(self, out: io.StringIO, err: io.StringIO) -> None:
        ConsoleReporter(show_banner=False, out=out, err=err).run_succeeded(GenerationConfig(), 0.25)

        assert out.getvalue() == "Duration: 0.250s\n"

    def test_failure_block(self, out: io.StringIO, err: io.StringIO) -> None:
        error = _raised(DocumentLoadError("Unsupported OpenAPI version: 4.0.0"))

        ConsoleReporter(out=out, err=err).run_failed(error, validation_skipped=False)

        output = err.getvalue()
        assert "Error: Unsupported OpenAPI version: 4.0.0" in output
        assert "Type: DocumentLoadError" in output
        assert "Stack Trace:" in output
        assert "Traceback" in output
        assert output.rstrip().endswith("Try using the --skip-validation argument.")
        assert out.getvalue() == ""

    def test_no_hint_when_validation_skipped(self, out: io.StringIO, err: io.StringIO) -> None:
        error = _raised(GenerationError("Referenced schema component(s) not found: Thing"))

        ConsoleReporter(out=out, err=err).run_failed(error, validation_skipped=True)

        assert "--skip-validation" not in err.getvalue()

    def test_no_hint_for_configuration_errors(self, out: io.StringIO, err: io.StringIO) -> None:
        error = _raised(ConfigurationError("File not found - ./missing.json"))

        ConsoleReporter(out=out, err=err).run_failed(error, validation_skipped=False)

        assert "Type: ConfigurationError" in err.getvalue()
        assert "--skip-validation" not in err.getvalue()

    def test_validation_failure_prints_message_and_hint(
        self, out: io.StringIO, err: io.StringIO, specs_dir: Path
    ) -> None:
        result = validate_document(str(specs_dir / "invalid.json"))
        with pytest.raises(Exception) as exc_info:  # noqa: PT011
            result.raise_if_invalid()

        ConsoleReporter(out=out, err=err).run_failed(exc_info.value, validation_skipped=False)

        assert err.getvalue().splitlines() == [
            exc_info.value.message,
            "",
            "Try using the --skip-validation argument.",
        ]

    def test_telemetry_failure_is_a_warning(self, out: io.StringIO, err: io.StringIO) -> None:
        reporter = ConsoleReporter(BrokenTelemetry(), out=out, err=err)

        reporter.run_succeeded(GenerationConfig(), 0.1)

        assert "Warning: telemetry could not be sent: offline" in err.getvalue()
        assert "#" * 76 in out.getvalue()


class TestTelemetry:
    def test_support_key_is_stable(self) -> None:
        assert support_key() == support_key()
        assert len(support_key()) == 7

    def test_track_success(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("tests.telemetry")
        channel = TelemetryChannel(logger)

        with caplog.at_level(logging.INFO, logger="tests.telemetry"):
            channel.track_success(GenerationConfig(namespace="Pets", split_contracts=True), 0.5)

        record = caplog.records[-1]
        assert record.getMessage() == "generation succeeded in 0.500s"
        assert record.support_key == channel.support_key
        assert record.features["custom_namespace"] is True
        assert record.features["split"] is True
        assert record.features["return_style"] == "PlainResult"

    def test_track_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("tests.telemetry")

        with caplog.at_level(logging.INFO, logger="tests.telemetry"):
            TelemetryChannel(logger).track_failure(GenerationError("boom"))

        assert caplog.records[-1].failure_kind == "GenerationError"


class TestLoggers:
    def test_package_logger(self) -> None:
        assert get_logger().name == "refit_oas_generator"

    def test_module_logger(self) -> None:
        assert get_logger("refit_oas_generator.orchestrator").name == "refit_oas_generator.orchestrator"
