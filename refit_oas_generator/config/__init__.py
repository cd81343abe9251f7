"""
Configuration Module

Settings dataclasses, resolution of command-line arguments and persisted
settings documents into a single ``GenerationConfig``.
"""

from .persistence import dumps, loads
from .resolver import check_specification_path, config_from_arguments, is_url, resolve_config
from .settings import (
    DEFAULT_NAMESPACE,
    DEFAULT_OUTPUT_FILENAME,
    DEFAULT_OUTPUT_FOLDER,
    DocumentationFlags,
    GenerationConfig,
    MultipleInterfaces,
    NamingPolicy,
    OperationNameGenerator,
    ReturnStyle,
    SchemaFilters,
    TypeAccessibility,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "DEFAULT_OUTPUT_FILENAME",
    "DEFAULT_OUTPUT_FOLDER",
    "DocumentationFlags",
    "GenerationConfig",
    "MultipleInterfaces",
    "NamingPolicy",
    "OperationNameGenerator",
    "ReturnStyle",
    "SchemaFilters",
    "TypeAccessibility",
    "check_specification_path",
    "config_from_arguments",
    "dumps",
    "is_url",
    "loads",
    "resolve_config",
]
