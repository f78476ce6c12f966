"""Payload types returned by library evaluation.

An :class:`EvalResult` is only ever built complete: the evaluator either
returns one with every field populated or raises.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from docweave.domain.documents import DocumentSet
from docweave.domain.files import OutputFile


@dataclass(frozen=True)
class EvalExport:
    """Symbols defined by one library file, keyed by its relative path."""

    path: str
    symbols: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EvalResult:
    """Rendered files, their combined documents, and library exports.

    ``files`` and ``doc_set`` follow (library path, relative path) order;
    ``exports`` follow file discovery order.
    """

    files: tuple[OutputFile, ...] = ()
    doc_set: DocumentSet = field(default_factory=DocumentSet)
    exports: tuple[EvalExport, ...] = ()

    def file(self, relative_path: str) -> OutputFile | None:
        for f in self.files:
            if f.relative_path == relative_path:
                return f
        return None

    def export(self, path: str) -> EvalExport | None:
        for e in self.exports:
            if e.path == path:
                return e
        return None
