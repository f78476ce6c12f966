"""SchemaCollector — discover, evaluate, and merge schema documents.

Pipeline: DISCOVER → (disabled? warn + permissive) → EVALUATE → PARTITION → MERGE
"""

from __future__ import annotations

import logging

from docweave.domain.collaborators import EngineSeed
from docweave.domain.documents import Document, extract_documents
from docweave.domain.errors import EvaluationError, SchemaMergeError
from docweave.domain.files import FileInLibrary, Library, LibraryExecutionContext
from docweave.domain.schema import DocumentSchema, NullSchema, PermissiveSchema, Schema
from docweave.domain.types import AnnotationName
from docweave.domain.values import DataValues, ValuesUsageLedger
from docweave.services._helpers import files_by_annotation, reraise_as
from docweave.services.base import BaseService
from docweave.services.telemetry import trace_span

logger = logging.getLogger(__name__)


class SchemaCollector(BaseService):
    """Collects the schema of the current library."""

    def collect(
        self,
        overlays: list[DocumentSchema] | None = None,
        *,
        warnings: list[str] | None = None,
    ) -> tuple[Schema, list[DocumentSchema]]:
        """Return the merged root schema and the library-scoped schema documents.

        Matching files are excluded from output even when schema
        processing is disabled.
        """
        with trace_span("discover") as span:
            schema_files = files_by_annotation(
                self._context.current,
                self._collaborators.parser,
                AnnotationName.SCHEMA_MATCH,
            )
            if span:
                span.annotate("files", len(schema_files))

        if not self._loader_config.schema_enabled:
            if schema_files:
                msg = (
                    f"Schema document was detected ({schema_files[0].relative_path}), "
                    "but schema processing is disabled"
                )
                logger.warning(msg)
                if warnings is not None:
                    warnings.append(msg)
            return PermissiveSchema(), []

        with trace_span("evaluate"):
            document_schemas = self._collect_schema_docs(schema_files)
        document_schemas.extend(overlays or [])

        root_docs: list[Document] = []
        library_schemas: list[DocumentSchema] = []
        for doc_schema in document_schemas:
            if doc_schema.has_library_ref:
                library_schemas.append(doc_schema)
            else:
                root_docs.append(doc_schema.source)

        if not root_docs:
            return NullSchema(), library_schemas

        with trace_span("merge") as span:
            merged = root_docs[0]
            for patch in root_docs[1:]:
                with reraise_as(lambda exc: SchemaMergeError(f"Merging schema documents: {exc}")):
                    merged = self._collaborators.merger.merge(merged, patch)
            if span:
                span.annotate("documents", len(root_docs))

        return DocumentSchema(merged), library_schemas

    def _collect_schema_docs(self, schema_files: list[FileInLibrary]) -> list[DocumentSchema]:
        # Schema files are evaluated without data values, detached from the root.
        engine = self._new_engine(EngineSeed(values=DataValues.empty(), library_values=ValuesUsageLedger()))
        detached_root = Library()

        document_schemas: list[DocumentSchema] = []
        for file_in_lib in schema_files:
            ctx = LibraryExecutionContext(current=file_in_lib.library, root=detached_root)
            path = file_in_lib.relative_path
            with reraise_as(lambda exc, path=path: EvaluationError(path, str(exc))):
                _, doc_set = engine.eval_yaml(ctx, file_in_lib.file)

            docs, _ = extract_documents(doc_set, AnnotationName.SCHEMA_MATCH)
            document_schemas.extend(DocumentSchema.from_document(doc) for doc in docs)
        return document_schemas
