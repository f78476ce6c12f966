"""Contracts of the components the orchestrator drives but does not implement.

Parsing document syntax, evaluating templates, merging overlays, and the
data values pipeline all live behind these protocols. A
:class:`~docweave.infrastructure.workspace.Collaborators` bundle wires
concrete implementations in.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from docweave.domain.documents import Document, DocumentSet
    from docweave.domain.files import File, FileInLibrary, LibraryExecutionContext
    from docweave.domain.schema import DocumentSchema, Schema
    from docweave.domain.values import DataValues, ValuesUsageLedger

# Names a file makes available to its siblings and parents, in definition order.
Symbols = Mapping[str, Any]


@dataclass(frozen=True)
class EngineSeed:
    """Everything an evaluation engine is constructed with."""

    values: DataValues
    library_values: ValuesUsageLedger
    library_schemas: tuple[DocumentSchema, ...] = ()


@dataclass(frozen=True)
class ValuesPolicy:
    """Flags forwarded to the data values pipeline."""

    ignore_unknown_comments: bool = False
    implicit_map_key_overrides: bool = False
    extra: dict[str, Any] = field(default_factory=dict)


class DocumentParser(Protocol):
    def parse_yaml(self, file: File) -> DocumentSet:
        """Parse syntax and annotations only; never evaluates expressions."""
        ...


class EvaluationEngine(Protocol):
    def eval_yaml(self, ctx: LibraryExecutionContext, file: File) -> tuple[Symbols, DocumentSet]: ...

    def eval_text(self, ctx: LibraryExecutionContext, file: File) -> tuple[Symbols, str]: ...

    def eval_script(self, ctx: LibraryExecutionContext, file: File) -> Symbols: ...


class EngineFactory(Protocol):
    def __call__(self, seed: EngineSeed) -> EvaluationEngine: ...


class OverlayMerger(Protocol):
    def merge(self, base: Document, patch: Document) -> Document:
        """Return *base* patched by *patch*."""
        ...


class ValuesPreProcessor(Protocol):
    def apply(
        self,
        values_files: list[FileInLibrary],
        overlays: list[DataValues],
        schema: Schema,
        policy: ValuesPolicy,
    ) -> tuple[DataValues, list[DataValues]]:
        """Merge values files then overlays (later wins) and validate against *schema*.

        Returns the merged root values and the library-scoped value sets.
        """
        ...


class OverlayPostProcessor(Protocol):
    def apply(self, doc_sets: dict[FileInLibrary, DocumentSet]) -> dict[FileInLibrary, DocumentSet]:
        """Apply overlay documents across the evaluated document sets."""
        ...
