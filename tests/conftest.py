"""Shared fixtures for the Refit OAS generator tests."""

from pathlib import Path
from typing import Any

import pytest

from refit_oas_generator.config.settings import GenerationConfig
from refit_oas_generator.errors import RefitGeneratorError
from refit_oas_generator.generator.template_engine import create_generator
from refit_oas_generator.parser.loader import OpenApiDocument, load_document

SPECS_DIR = Path(__file__).parent / "specs"


class RecordingReporter:
    """Reporting sink that records every milestone it receives."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def run_started(self) -> None:
        self.events.append(("run_started", None))

    def settings_saved(self, path: Path) -> None:
        self.events.append(("settings_saved", path))

    def document_loaded(self, document: OpenApiDocument) -> None:
        self.events.append(("document_loaded", document))

    def validation_completed(self, result: Any) -> None:  # noqa: ANN401
        self.events.append(("validation_completed", result))

    def output_generated(self, length: int) -> None:
        self.events.append(("output_generated", length))

    def output_written(self, path: Path, *, contracts: bool = False) -> None:
        self.events.append(("output_written", (path, contracts)))

    def run_succeeded(self, config: GenerationConfig, duration: float) -> None:
        self.events.append(("run_succeeded", (config, duration)))

    def run_failed(self, error: RefitGeneratorError, *, validation_skipped: bool) -> None:
        self.events.append(("run_failed", (error, validation_skipped)))


def generate(config: GenerationConfig, document: OpenApiDocument) -> str:
    """Generate the source of one pass."""
    return create_generator(config, document).generate()


@pytest.fixture
def specs_dir() -> Path:
    """Directory holding the sample specifications."""
    return SPECS_DIR


@pytest.fixture
def minimal_spec_path() -> Path:
    """Two operations and one schema."""
    return SPECS_DIR / "minimal.json"


@pytest.fixture
def petstore_spec_path() -> Path:
    return SPECS_DIR / "petstore.yaml"


@pytest.fixture
def minimal_document(minimal_spec_path: Path) -> OpenApiDocument:
    return load_document(str(minimal_spec_path))


@pytest.fixture
def petstore_document(petstore_spec_path: Path) -> OpenApiDocument:
    return load_document(str(petstore_spec_path))


@pytest.fixture
def swagger_document() -> OpenApiDocument:
    return load_document(str(SPECS_DIR / "swagger_v2.json"))


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()
