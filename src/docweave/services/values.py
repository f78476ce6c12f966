"""ValuesCollector — discover data values files and run the values pipeline."""

from __future__ import annotations

import logging

from docweave.domain.errors import ValuesResolutionError
from docweave.domain.schema import Schema
from docweave.domain.types import AnnotationName
from docweave.domain.values import DataValues
from docweave.services._helpers import files_by_annotation, reraise_as
from docweave.services.base import BaseService
from docweave.services.telemetry import trace_span

logger = logging.getLogger(__name__)


class ValuesCollector(BaseService):
    """Collects the data values of the current library."""

    def collect(
        self,
        overlays: list[DataValues] | None,
        schema: Schema,
    ) -> tuple[DataValues, list[DataValues]]:
        """Return the merged root values and the library-scoped value sets.

        Overlays apply after discovered files, in the order given.
        """
        with trace_span("discover") as span:
            values_files = files_by_annotation(
                self._context.current,
                self._collaborators.parser,
                AnnotationName.DATA_VALUES,
            )
            if span:
                span.annotate("files", len(values_files))

        logger.debug(
            "Resolving data values from %d file(s) and %d overlay(s)",
            len(values_files),
            len(overlays or []),
        )
        with trace_span("merge"):
            with reraise_as(lambda exc: ValuesResolutionError(f"Resolving data values: {exc}")):
                values, library_values = self._collaborators.values_pipeline.apply(
                    values_files,
                    list(overlays or []),
                    schema,
                    self._loader_config.values_policy(),
                )
        return values, list(library_values)
