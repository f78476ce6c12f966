"""Workspace — the single dependency injected into every service.

A workspace pairs the library execution context with settings and the
collaborators (parser, evaluation engine factory, overlay merger, values
pipeline, overlay post-processor) that do the actual document work.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from docweave.domain.files import Library, LibraryExecutionContext

if TYPE_CHECKING:
    from docweave.config.settings import DocweaveSettings
    from docweave.domain.collaborators import (
        DocumentParser,
        EngineFactory,
        OverlayMerger,
        OverlayPostProcessor,
        ValuesPreProcessor,
    )


@dataclass(frozen=True)
class Collaborators:
    """Concrete implementations of the collaborator protocols."""

    parser: DocumentParser
    engine_factory: EngineFactory
    merger: OverlayMerger
    values_pipeline: ValuesPreProcessor
    post_processor: OverlayPostProcessor


@dataclass(frozen=True)
class Workspace:
    """Library context, settings, and collaborators for one evaluation."""

    context: LibraryExecutionContext
    settings: DocweaveSettings
    collaborators: Collaborators

    @classmethod
    def for_library(
        cls,
        library: Library,
        settings: DocweaveSettings,
        collaborators: Collaborators,
    ) -> Workspace:
        return cls(LibraryExecutionContext.for_root(library), settings, collaborators)

    @property
    def library(self) -> Library:
        return self.context.current

    def nested(self, library: Library) -> Workspace:
        """A workspace for *library*, sharing this workspace's root."""
        return Workspace(self.context.with_current(library), self.settings, self.collaborators)
