"""
Generation run orchestration.

A run resolves the configuration, optionally validates the document, loads
it once, generates the main source file and, in split mode, a second file
holding only the data contracts. Every failure ends the run in the
``FAILED`` state with a ``RunOutcome`` carrying its kind and exit code.
"""

from __future__ import annotations

import time
from argparse import Namespace
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Final

from refit_oas_generator.config import persistence
from refit_oas_generator.config.resolver import check_specification_path, resolve_config
from refit_oas_generator.config.settings import DEFAULT_OUTPUT_FILENAME, DEFAULT_OUTPUT_FOLDER, GenerationConfig
from refit_oas_generator.errors import (
    EXIT_SUCCESS,
    DocumentLoadError,
    FailureKind,
    GenerationError,
    RefitGeneratorError,
    WriteError,
)
from refit_oas_generator.generator.template_engine import CSharpTemplateEngine, create_generator
from refit_oas_generator.parser.loader import OpenApiDocument, document_from_text, read_specification
from refit_oas_generator.reporting import ReportingSink, get_logger
from refit_oas_generator.utils.file_utils import write_text_atomic
from refit_oas_generator.validation.validator import validate_text

CONTRACTS_SUFFIX: Final = ".Contracts"

logger = get_logger(__name__)


class RunState(Enum):
    """States of a generation run."""

    IDLE = "Idle"
    CONFIG_RESOLVED = "ConfigResolved"
    VALIDATED = "Validated"
    GENERATED = "Generated"
    WRITTEN = "Written"
    SPLIT_GENERATED = "SplitGenerated"
    SPLIT_WRITTEN = "SplitWritten"
    DONE = "Done"
    FAILED = "Failed"


@dataclass(frozen=True)
class RunOutcome:
    """Result of a generation run.

    Attributes:
        state: ``DONE`` on success, ``FAILED`` otherwise.
        exit_code: Process exit code for the run.
        error: The failure that ended the run, if any.
        written: Files written before the run ended, in write order.
    """

    state: RunState
    exit_code: int = EXIT_SUCCESS
    error: RefitGeneratorError | None = None
    written: tuple[Path, ...] = ()

    @property
    def kind(self) -> FailureKind | None:
        return self.error.kind if self.error else None

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.DONE


def _in_output_folder(config: GenerationConfig, filename: str) -> Path:
    folder = config.output_folder
    if folder and folder.strip() and folder != DEFAULT_OUTPUT_FOLDER:
        return Path(folder) / filename
    return Path(filename)


def output_path(config: GenerationConfig, cli_output: str | None = None) -> Path:
    """Path of the main output file.

    An explicit output path given on the command line wins over the
    configured output filename. The configured output folder, when set and
    not the default, is prefixed onto whichever filename won.

    Args:
        config: The resolved configuration.
        cli_output: The output path argument, if any.

    Returns:
        The path to write the generated source to.
    """
    if cli_output and cli_output.strip() and cli_output != DEFAULT_OUTPUT_FILENAME:
        filename = cli_output
    else:
        filename = config.output_filename or DEFAULT_OUTPUT_FILENAME
    return _in_output_folder(config, filename)


def contract_output_path(config: GenerationConfig, main_path: Path) -> Path:
    """Path of the contracts file of split mode.

    Uses the configured contract filename under the same folder rule as the
    main file, or ``<main stem>.Contracts<suffix>`` next to the main file.
    A contract path equal to the main path is replaced by the derived name
    so the first file is never overwritten.
    """
    derived = main_path.with_name(f"{main_path.stem}{CONTRACTS_SUFFIX}{main_path.suffix or '.cs'}")
    if not config.contract_output_filename:
        return derived
    path = _in_output_folder(config, config.contract_output_filename)
    if path.resolve() == main_path.resolve():
        return derived
    return path


class GenerationRun:
    """Drives one generation run through its states.

    Args:
        reporter: Sink informed at every milestone.
        template_engine: Engine shared by both generation passes.
    """

    def __init__(self, reporter: ReportingSink, template_engine: CSharpTemplateEngine | None = None) -> None:
        self.reporter = reporter
        self.template_engine = template_engine
        self.state = RunState.IDLE
        self.written: list[Path] = []

    def execute(self, args: Namespace | Any, persisted: str | bytes | None = None) -> RunOutcome:  # noqa: ANN401
        """Run generation for parsed command-line arguments.

        Args:
            args: Parsed command-line arguments.
            persisted: Contents of a settings document, if one was supplied.

        Returns:
            The outcome of the run; failures are never raised.
        """
        started = time.perf_counter()
        skip_validation = bool(getattr(args, "skip_validation", False))
        self.reporter.run_started()

        try:
            config = self._resolve(args, persisted)
            text = read_specification(config.specification_path)
            if not skip_validation:
                self._validate(text, config.specification_path)
            document = document_from_text(text, config.specification_path)
            logger.debug("Loaded %s (version %s)", document.source, document.version)
            self.reporter.document_loaded(document)

            main_path = output_path(config, getattr(args, "output_path", None))
            self._generate_and_write(config.interface_pass(), document, main_path)
            self.state = RunState.WRITTEN

            if config.split_contracts:
                self._generate_and_write(
                    config.contracts_pass(),
                    document,
                    contract_output_path(config, main_path),
                    contracts=True,
                )
                self.state = RunState.SPLIT_WRITTEN
        except RefitGeneratorError as e:
            self.state = RunState.FAILED
            logger.debug("Run failed with %s: %s", e.kind.value, e.message)
            self.reporter.run_failed(e, validation_skipped=skip_validation)
            return RunOutcome(RunState.FAILED, e.exit_code, e, tuple(self.written))

        self.state = RunState.DONE
        self.reporter.run_succeeded(config, time.perf_counter() - started)
        return RunOutcome(RunState.DONE, EXIT_SUCCESS, None, tuple(self.written))

    def _resolve(self, args: Namespace | Any, persisted: str | bytes | None) -> GenerationConfig:  # noqa: ANN401
        config = resolve_config(args, persisted)
        check_specification_path(config)
        self.state = RunState.CONFIG_RESOLVED

        settings_path = getattr(args, "save_settings", None)
        if settings_path:
            path = Path(settings_path)
            self._write(path, persistence.dumps(config))
            self.reporter.settings_saved(path)
        return config

    def _validate(self, text: str, source: str) -> None:
        try:
            result = validate_text(text, source)
        except RefitGeneratorError:
            raise
        except Exception as e:
            msg = f"Validation of {source} failed: {e}"
            raise DocumentLoadError(msg, source=source) from e
        logger.debug(
            "Validation found %d error(s) and %d warning(s)",
            len(result.diagnostics.errors),
            len(result.diagnostics.warnings),
        )
        self.reporter.validation_completed(result)
        result.raise_if_invalid()
        self.state = RunState.VALIDATED

    def _generate_and_write(
        self,
        config: GenerationConfig,
        document: OpenApiDocument,
        path: Path,
        *,
        contracts: bool = False,
    ) -> None:
        source = self._generate(config, document)
        self.state = RunState.SPLIT_GENERATED if contracts else RunState.GENERATED
        self.reporter.output_generated(len(source.encode("utf-8")))

        logger.debug("Writing %d characters to %s", len(source), path)
        self._write(path, source)
        self.written.append(path)
        self.reporter.output_written(path, contracts=contracts)

    def _generate(self, config: GenerationConfig, document: OpenApiDocument) -> str:
        try:
            return create_generator(config, document, self.template_engine).generate()
        except RefitGeneratorError:
            raise
        except Exception as e:
            msg = f"Generation failed: {e}"
            raise GenerationError(msg) from e

    @staticmethod
    def _write(path: Path, content: str) -> int:
        try:
            return write_text_atomic(path, content)
        except OSError as e:
            msg = f"Unable to write {path}: {e.strerror or e}"
            raise WriteError(msg, path=str(path), exit_code=e.errno) from e


def run_generation(
    args: Namespace | Any,  # noqa: ANN401
    reporter: ReportingSink,
    persisted: str | bytes | None = None,
) -> RunOutcome:
    """Run generation once. See :class:`GenerationRun`."""
    return GenerationRun(reporter, CSharpTemplateEngine()).execute(args, persisted)
