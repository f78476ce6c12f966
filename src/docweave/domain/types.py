"""File kinds and annotation names recognized by the evaluator."""

from __future__ import annotations

from enum import StrEnum


class FileType(StrEnum):
    """Content kind of a source file, inferred from its extension."""

    YAML = "yaml"
    TEXT = "text"
    SCRIPT = "script"
    UNKNOWN = "unknown"


class AnnotationName(StrEnum):
    """Annotations consulted by the orchestrator.

    Everything else attached to a node is the evaluation engine's business.
    """

    SCHEMA_MATCH = "schema/match"
    SCHEMA_TYPE = "schema/type"
    SCHEMA_NULLABLE = "schema/nullable"
    DATA_VALUES = "data/values"
    LIBRARY_REF = "library/ref"
    OVERLAY_MATCH = "overlay/match"


# Extension → kind. Anything not listed is UNKNOWN.
EXTENSION_TYPES: dict[str, FileType] = {
    ".yml": FileType.YAML,
    ".yaml": FileType.YAML,
    ".txt": FileType.TEXT,
    ".star": FileType.SCRIPT,
}

# Directory name of a private (non-accessible) nested library.
PRIVATE_LIBRARY_DIR = "_lib"
