"""
Operation selection and schema trimming.

Decides which operations of a document take part in generation (path
patterns, tags, deprecation) and which schemas survive trimming.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from refit_oas_generator.config.settings import GenerationConfig

RawOperation = TypeVar("RawOperation", bound=tuple[Any, ...])


@dataclass(frozen=True)
class OperationSelection:
    """Filters applied to the operations and schemas of a document.

    Attributes:
        include_path_patterns: Regular expressions; an operation is kept when
            any of them matches its path. Empty keeps every path.
        include_tags: An operation is kept when it has any of these tags.
            Empty keeps every operation.
        include_deprecated: Keep operations marked ``deprecated``.
        trim_unused_schemas: Drop schemas not reachable from kept operations.
        keep_schema_patterns: Regular expressions of schema names that
            survive trimming, together with their dependencies.
    """

    include_path_patterns: tuple[str, ...] = ()
    include_tags: tuple[str, ...] = ()
    include_deprecated: bool = True
    trim_unused_schemas: bool = False
    keep_schema_patterns: tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config: GenerationConfig) -> OperationSelection:
        return cls(
            include_path_patterns=config.filters.include_path_patterns,
            include_tags=config.filters.include_tags,
            include_deprecated=config.documentation.generate_deprecated_operations,
            trim_unused_schemas=config.filters.trim_unused_schemas,
            keep_schema_patterns=config.filters.keep_schema_patterns,
        )

    def matches_path(self, path: str) -> bool:
        if not self.include_path_patterns:
            return True
        return any(re.search(pattern, path) for pattern in self.include_path_patterns)

    def matches_tags(self, tags: Iterable[str]) -> bool:
        if not self.include_tags:
            return True
        return any(tag in self.include_tags for tag in tags)

    def select_operations(self, raw_operations: Iterable[RawOperation]) -> list[RawOperation]:
        """Keep the (path, method, path item, operation) tuples that pass every filter."""
        selected = []
        for raw in raw_operations:
            path, operation_data = raw[0], raw[3]
            if not self.matches_path(path):
                continue
            if not self.matches_tags(str(tag) for tag in operation_data.get("tags") or []):
                continue
            if not self.include_deprecated and operation_data.get("deprecated", False):
                continue
            selected.append(raw)
        return selected

    def schemas_to_keep(self, used: set[str], dependency_graph: dict[str, set[str]]) -> set[str]:
        """Close the used schema names over their dependencies.

        Args:
            used: Schema names referenced directly by kept operations.
            dependency_graph: Schema name to the schema names it references.

        Returns:
            Every schema name that must be generated.
        """
        roots = set(used)
        for name in dependency_graph:
            if any(re.search(pattern, name) for pattern in self.keep_schema_patterns):
                roots.add(name)

        keep: set[str] = set()
        queue = sorted(roots)
        while queue:
            schema_name = queue.pop(0)
            if schema_name in keep:
                continue
            keep.add(schema_name)
            queue.extend(dep for dep in sorted(dependency_graph.get(schema_name, ())) if dep not in keep)
        return keep
