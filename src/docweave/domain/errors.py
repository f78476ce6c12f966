"""Error taxonomy for schema, values, and library evaluation.

Every error the orchestrator raises derives from :class:`DocweaveError`
and carries a stable ``code`` that the service layer copies into
:class:`~docweave.services.result.ServiceError`. Nothing here is retried
or downgraded: errors propagate to the caller as-is.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from docweave.domain.documents import Position


class Diagnostic(BaseModel):
    """Position-anchored, user-facing description of a syntax problem."""

    model_config = {"frozen": True}

    position: Position | None = None
    description: str
    expected: str = ""
    found: str = ""
    hints: list[str] = Field(default_factory=list)

    def __str__(self) -> str:
        lines = [self.description]
        if self.position is not None:
            lines[0] = f"{self.position}: {self.description}"
        if self.found:
            lines.append(f"  found: {self.found}")
        if self.expected:
            lines.append(f"  expected: {self.expected}")
        lines.extend(f"  hint: {hint}" for hint in self.hints)
        return "\n".join(lines)


class DocweaveError(Exception):
    """Base class for all orchestrator errors."""

    code = "DOCWEAVE_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.detail: dict[str, Any] = detail or {}


class ConfigError(DocweaveError):
    """Configuration file could not be read or validated."""

    code = "INVALID_CONFIG"


class AnnotationSyntaxError(DocweaveError):
    """Malformed keyword arguments on a schema annotation."""

    code = "ANNOTATION_SYNTAX"

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(str(diagnostic), detail=diagnostic.model_dump(mode="json"))
        self.diagnostic = diagnostic


class SchemaMergeError(DocweaveError):
    """Overlaying one root-scoped schema document onto another failed."""

    code = "SCHEMA_MERGE_FAILED"


class ValuesResolutionError(DocweaveError):
    """The data values pipeline failed to merge or validate."""

    code = "VALUES_RESOLUTION_FAILED"


class EvaluationError(DocweaveError):
    """A single file failed to evaluate."""

    code = "EVALUATION_FAILED"

    def __init__(self, path: str, cause: str) -> None:
        super().__init__(f"Evaluating {path}: {cause}", detail={"path": path})
        self.path = path


class UnknownFileTypeError(DocweaveError):
    """An output file has a content kind the evaluator cannot render."""

    code = "UNKNOWN_FILE_TYPE"

    def __init__(self, path: str, file_type: str) -> None:
        super().__init__(
            f"Unknown file type {file_type!r} for output file {path}",
            detail={"path": path, "type": file_type},
        )
        self.path = path


class UnusedValuesError(DocweaveError):
    """Library-scoped data values were supplied but never consumed."""

    code = "UNUSED_LIBRARY_VALUES"

    def __init__(self, descriptions: list[str]) -> None:
        super().__init__(
            "Expected all provided library data values documents "
            f"to be used but found unused: {', '.join(descriptions)}",
            detail={"unused": list(descriptions)},
        )
        self.descriptions = list(descriptions)


class PostProcessingError(DocweaveError):
    """Cross-document overlay post-processing failed."""

    code = "POST_PROCESSING_FAILED"
