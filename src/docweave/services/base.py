"""BaseService — common foundation of collectors, evaluator, and facade.

Every service receives a :class:`Workspace` at construction time. The
workspace provides the library context, settings, and collaborators.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docweave.config.models import LoaderConfig
    from docweave.domain.collaborators import EngineSeed, EvaluationEngine
    from docweave.domain.files import LibraryExecutionContext
    from docweave.infrastructure.workspace import Collaborators, Workspace


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class SchemaCollector(BaseService):
            def collect(self, overlays) -> tuple[Schema, list[DocumentSchema]]:
                for file_in_lib in self._context.current.list_accessible_files():
                    ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    @property
    def _context(self) -> LibraryExecutionContext:
        return self._workspace.context

    @property
    def _collaborators(self) -> Collaborators:
        return self._workspace.collaborators

    @property
    def _loader_config(self) -> LoaderConfig:
        return self._workspace.settings.loader

    def _new_engine(self, seed: EngineSeed) -> EvaluationEngine:
        return self._collaborators.engine_factory(seed)
