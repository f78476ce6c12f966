"""ResultAssembler — deterministic ordering and serialization of outputs."""

from __future__ import annotations

import logging

from docweave.domain.documents import DocumentSet
from docweave.domain.errors import EvaluationError
from docweave.domain.files import FileInLibrary, OutputFile, sort_files_in_library
from docweave.infrastructure.serialization import doc_set_as_bytes
from docweave.services._helpers import reraise_as
from docweave.services.contracts import EvalExport, EvalResult

logger = logging.getLogger(__name__)


class ResultAssembler:
    """Builds an :class:`EvalResult` from per-file evaluation results.

    Every output file, whether a YAML document set or an already rendered
    text fragment, is emitted in (library path, relative path) order, so
    the result never depends on enumeration order.
    """

    def assemble(
        self,
        doc_sets: dict[FileInLibrary, DocumentSet],
        fragments: dict[FileInLibrary, OutputFile],
        exports: list[EvalExport],
    ) -> EvalResult:
        files: list[OutputFile] = []
        merged = DocumentSet()

        for file_in_lib in sort_files_in_library([*doc_sets, *fragments]):
            doc_set = doc_sets.get(file_in_lib)
            if doc_set is None:
                files.append(fragments[file_in_lib])
                continue

            merged.items.extend(doc_set.items)
            path = file_in_lib.relative_path
            with reraise_as(lambda exc, path=path: EvaluationError(path, f"marshaling template result: {exc}")):
                data = doc_set_as_bytes(doc_set)

            logger.debug("### %s result\n%s", path, data.decode("utf-8"))
            files.append(OutputFile(relative_path=path, data=data, type=file_in_lib.file.type))

        return EvalResult(files=tuple(files), doc_set=merged, exports=tuple(exports))
