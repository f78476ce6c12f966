"""LibraryEvaluator — evaluate every accessible file of a library.

Pipeline: EVALUATE (fail-fast, per file) → CHECK UNUSED VALUES →
POST-PROCESS OVERLAYS → ASSEMBLE

Each accessible file is exactly one of:

- output: YAML renders to a document set, text to a fragment; any other
  kind is an :class:`UnknownFileTypeError`.
- library: YAML, text, or script evaluates to exported symbols; other
  kinds are skipped so new file kinds do not break existing libraries.
- neither (including files claimed by schema/values discovery): skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from docweave.domain.collaborators import EngineSeed, EvaluationEngine, Symbols
from docweave.domain.documents import DocumentSet
from docweave.domain.errors import (
    EvaluationError,
    PostProcessingError,
    UnknownFileTypeError,
    UnusedValuesError,
)
from docweave.domain.files import FileInLibrary, LibraryExecutionContext, OutputFile
from docweave.domain.schema import DocumentSchema
from docweave.domain.types import FileType
from docweave.domain.values import DataValues, UsageReport, ValuesUsageLedger
from docweave.services._helpers import reraise_as
from docweave.services.assembly import ResultAssembler
from docweave.services.base import BaseService
from docweave.services.contracts import EvalExport, EvalResult
from docweave.services.telemetry import trace_span

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class LibraryEvaluator(BaseService):
    """Evaluates the current library into an :class:`EvalResult`."""

    def evaluate(
        self,
        values: DataValues,
        library_values: list[DataValues] | None = None,
        library_schemas: list[DocumentSchema] | None = None,
    ) -> EvalResult:
        ledger = ValuesUsageLedger(library_values or [])
        engine = self._new_engine(
            EngineSeed(
                values=values,
                library_values=ledger,
                library_schemas=tuple(library_schemas or ()),
            )
        )

        with trace_span("evaluate") as span:
            exports, doc_sets, fragments = self._evaluate_files(engine)
            if span:
                span.annotate("files", len(doc_sets) + len(fragments))
                span.annotate("exports", len(exports))

        self._check_unused(ledger.report())

        with trace_span("post-process"):
            with reraise_as(lambda exc: PostProcessingError(f"Applying overlays: {exc}")):
                doc_sets = self._collaborators.post_processor.apply(doc_sets)

        with trace_span("assemble"):
            return ResultAssembler().assemble(doc_sets, fragments, exports)

    # ------------------------------------------------------------------
    # Per-file pass
    # ------------------------------------------------------------------

    def _evaluate_files(
        self,
        engine: EvaluationEngine,
    ) -> tuple[list[EvalExport], dict[FileInLibrary, DocumentSet], dict[FileInLibrary, OutputFile]]:
        exports: list[EvalExport] = []
        doc_sets: dict[FileInLibrary, DocumentSet] = {}
        fragments: dict[FileInLibrary, OutputFile] = {}

        for file_in_lib in self._context.current.list_accessible_files():
            f = file_in_lib.file
            ctx = self._context.with_current(file_in_lib.library)

            if f.is_for_output():
                # globals produced by templates are not exported
                if f.type == FileType.YAML:
                    _, doc_set = self._run(file_in_lib, lambda: engine.eval_yaml(ctx, f))
                    doc_sets[file_in_lib] = doc_set
                elif f.type == FileType.TEXT:
                    _, text = self._run(file_in_lib, lambda: engine.eval_text(ctx, f))
                    logger.debug("### %s result\n%s", file_in_lib.relative_path, text)
                    path = file_in_lib.relative_path
                    with reraise_as(lambda exc, path=path: EvaluationError(path, f"encoding text result: {exc}")):
                        data = text.encode("utf-8")
                    fragments[file_in_lib] = OutputFile(relative_path=path, data=data, type=f.type)
                else:
                    raise UnknownFileTypeError(file_in_lib.relative_path, str(f.type))

            elif f.is_library():
                symbols = self._eval_library_file(engine, ctx, file_in_lib)
                if symbols is not None:
                    exports.append(EvalExport(path=file_in_lib.relative_path, symbols=dict(symbols)))

        return exports, doc_sets, fragments

    def _eval_library_file(
        self,
        engine: EvaluationEngine,
        ctx: LibraryExecutionContext,
        file_in_lib: FileInLibrary,
    ) -> Symbols | None:
        f = file_in_lib.file
        if f.type == FileType.YAML:
            return self._run(file_in_lib, lambda: engine.eval_yaml(ctx, f))[0]
        if f.type == FileType.TEXT:
            return self._run(file_in_lib, lambda: engine.eval_text(ctx, f))[0]
        if f.type == FileType.SCRIPT:
            return self._run(file_in_lib, lambda: engine.eval_script(ctx, f))
        logger.debug("Skipping library file %s of unknown type", file_in_lib.relative_path)
        return None

    @staticmethod
    def _run(file_in_lib: FileInLibrary, fn: Callable[[], _T]) -> _T:
        with reraise_as(lambda exc: EvaluationError(file_in_lib.relative_path, str(exc))):
            return fn()

    @staticmethod
    def _check_unused(report: UsageReport) -> None:
        if not report.all_used:
            raise UnusedValuesError(list(report.unused))
