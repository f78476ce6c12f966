"""LibraryLoader — the public entry point for evaluating a library.

Callers run the three phases in order, each result feeding the next::

    loader = LibraryLoader(workspace)
    schemas = loader.schemas()
    values = loader.values(schema=schemas.data["schema"])
    result = loader.eval(
        values.data["values"],
        values.data["library_values"],
        schemas.data["library_schemas"],
    )

or call :meth:`LibraryLoader.evaluate` to do all three. Every operation
returns a :class:`ServiceResult`; errors never escape as exceptions.
"""

from __future__ import annotations

import logging

from docweave.domain.errors import DocweaveError
from docweave.domain.files import Library
from docweave.domain.schema import DocumentSchema, NullSchema, Schema
from docweave.domain.values import DataValues
from docweave.services.base import BaseService
from docweave.services.evaluation import LibraryEvaluator
from docweave.services.result import ServiceError, ServiceResult
from docweave.services.schemas import SchemaCollector
from docweave.services.telemetry import traced
from docweave.services.values import ValuesCollector

logger = logging.getLogger(__name__)


class LibraryLoader(BaseService):
    """Schemas → Values → Eval for the workspace's current library."""

    def for_library(self, library: Library) -> LibraryLoader:
        """Loader for a nested (possibly private) library sharing this root."""
        return LibraryLoader(self._workspace.nested(library))

    @traced
    def schemas(self, overlays: list[DocumentSchema] | None = None) -> ServiceResult:
        """Collect the root schema and library-scoped schema documents."""
        op = "schemas"
        warnings: list[str] = []
        try:
            schema, library_schemas = SchemaCollector(self._workspace).collect(overlays, warnings=warnings)
        except DocweaveError as exc:
            return self._failure(op, exc, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={"schema": schema, "library_schemas": library_schemas},
            warnings=warnings,
        )

    @traced
    def values(
        self,
        overlays: list[DataValues] | None = None,
        schema: Schema | None = None,
    ) -> ServiceResult:
        """Collect the root data values and library-scoped value sets."""
        op = "values"
        try:
            values, library_values = ValuesCollector(self._workspace).collect(
                overlays,
                schema if schema is not None else NullSchema(),
            )
        except DocweaveError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"values": values, "library_values": library_values},
        )

    @traced
    def eval(
        self,
        values: DataValues,
        library_values: list[DataValues] | None = None,
        library_schemas: list[DocumentSchema] | None = None,
    ) -> ServiceResult:
        """Evaluate every accessible file into an EvalResult."""
        op = "eval"
        try:
            result = LibraryEvaluator(self._workspace).evaluate(values, library_values, library_schemas)
        except DocweaveError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"result": result},
        )

    @traced
    def evaluate(
        self,
        schema_overlays: list[DocumentSchema] | None = None,
        values_overlays: list[DataValues] | None = None,
    ) -> ServiceResult:
        """Run schemas, values, and eval in sequence; stop at the first failure."""
        op = "evaluate"
        schemas = self.schemas(schema_overlays)
        if not schemas.ok:
            return schemas.model_copy(update={"op": op})

        values = self.values(values_overlays, schemas.data["schema"])
        if not values.ok:
            return values.model_copy(update={"op": op, "warnings": schemas.warnings})

        evaluated = self.eval(
            values.data["values"],
            values.data["library_values"],
            schemas.data["library_schemas"],
        )
        if not evaluated.ok:
            return evaluated.model_copy(update={"op": op, "warnings": schemas.warnings})

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "schema": schemas.data["schema"],
                "values": values.data["values"],
                "result": evaluated.data["result"],
            },
            warnings=schemas.warnings,
        )

    @staticmethod
    def _failure(op: str, exc: DocweaveError, warnings: list[str] | None = None) -> ServiceResult:
        logger.debug("%s failed: %s", op, exc, exc_info=True)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError.from_exception(exc),
            warnings=warnings or [],
        )
