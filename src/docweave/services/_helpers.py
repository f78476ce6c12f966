"""Shared service-layer helpers: discovery and error wrapping."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from docweave.domain.collaborators import DocumentParser
from docweave.domain.documents import extract_documents
from docweave.domain.errors import DocweaveError, EvaluationError
from docweave.domain.files import FileInLibrary, Library
from docweave.domain.types import FileType

logger = logging.getLogger(__name__)


@contextmanager
def reraise_as(factory: Callable[[Exception], DocweaveError]) -> Iterator[None]:
    """Wrap collaborator failures into a taxonomy error.

    A :class:`DocweaveError` raised inside the block (for example by a
    nested library evaluation) propagates unchanged.
    """
    try:
        yield
    except DocweaveError:
        raise
    except Exception as exc:
        raise factory(exc) from exc


def files_by_annotation(
    library: Library,
    parser: DocumentParser,
    annotation: str,
) -> list[FileInLibrary]:
    """Find template YAML files with a document carrying *annotation*.

    Matching files are excluded from output. Only syntax is parsed; no
    expression is evaluated.
    """
    matched: list[FileInLibrary] = []
    for file_in_lib in library.list_accessible_files():
        f = file_in_lib.file
        if f.type != FileType.YAML or not f.is_template():
            continue

        path = file_in_lib.relative_path
        with reraise_as(lambda exc, path=path: EvaluationError(path, f"parsing: {exc}")):
            doc_set = parser.parse_yaml(f)

        docs, _ = extract_documents(doc_set, annotation)
        if docs:
            logger.debug("File %s declares @%s (%d document(s))", path, annotation, len(docs))
            matched.append(file_in_lib)
            f.mark_for_output(False)
    return matched
