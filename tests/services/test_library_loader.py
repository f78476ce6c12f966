"""Tests for LibraryLoader — the ServiceResult facade over the three phases."""

from __future__ import annotations

from docweave.domain.documents import NodeAnnotation, to_python
from docweave.domain.files import Library
from docweave.domain.schema import DocumentSchema, NullSchema, PermissiveSchema
from docweave.domain.types import AnnotationName
from docweave.domain.values import DataValues
from docweave.services.contracts import EvalResult
from docweave.services.library import LibraryLoader
from tests.conftest import Harness, Sources, doc

SCHEMA = AnnotationName.SCHEMA_MATCH
VALUES = AnnotationName.DATA_VALUES


def _app(sources: Sources) -> Library:
    return Library(
        files=(
            sources.add_yaml("schema.yml", doc({"replicas": 1, "name": ""}, SCHEMA)),
            sources.add_yaml("values.yml", doc({"name": "web"}, VALUES)),
            sources.add_yaml("deploy.yml", doc({"kind": "Deployment"})),
            sources.add_text("NOTES.txt", "deployed\n"),
        )
    )


class TestSchemas:
    def test_success(self, harness: Harness, sources: Sources) -> None:
        result = LibraryLoader(harness.workspace(_app(sources))).schemas()

        assert result.ok
        assert result.op == "schemas"
        assert isinstance(result.data["schema"], DocumentSchema)
        assert result.data["library_schemas"] == []

    def test_disabled_reports_warning(self, harness: Harness, sources: Sources) -> None:
        result = LibraryLoader(harness.workspace(_app(sources), schema_enabled=False)).schemas()

        assert result.ok
        assert isinstance(result.data["schema"], PermissiveSchema)
        assert result.warnings == [
            "Schema document was detected (schema.yml), but schema processing is disabled"
        ]

    def test_merge_failure(self, harness: Harness, sources: Sources) -> None:
        harness.merger.error = ValueError("conflicting types for 'replicas'")
        lib = Library(
            files=(
                sources.add_yaml("a.yml", doc({"replicas": 1}, SCHEMA)),
                sources.add_yaml("b.yml", doc({"replicas": ""}, SCHEMA)),
            )
        )

        result = LibraryLoader(harness.workspace(lib)).schemas()

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "SCHEMA_MERGE_FAILED"
        assert "conflicting types" in result.error.message

    def test_annotation_syntax_error(self, harness: Harness, sources: Sources) -> None:
        bad = doc({"x": ""}, SCHEMA)
        bad.value.items[0].annotations[AnnotationName.SCHEMA_TYPE] = NodeAnnotation()
        lib = Library(files=(sources.add_yaml("schema.yml", bad),))

        result = LibraryLoader(harness.workspace(lib)).schemas()

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "ANNOTATION_SYNTAX"
        assert result.error.detail["found"] == "missing keyword argument and value"


class TestValues:
    def test_defaults_to_null_schema(self, harness: Harness, sources: Sources) -> None:
        result = LibraryLoader(harness.workspace(_app(sources))).values()

        assert result.ok
        assert isinstance(harness.values_pipeline.calls[0]["schema"], NullSchema)
        assert result.data["values"].desc == "merged data values"
        assert result.data["library_values"] == []

    def test_failure(self, harness: Harness, sources: Sources) -> None:
        harness.values_pipeline.error = RuntimeError("bad overlay")

        result = LibraryLoader(harness.workspace(_app(sources))).values()

        assert not result.ok
        assert result.op == "values"
        assert result.error is not None
        assert result.error.code == "VALUES_RESOLUTION_FAILED"


class TestEval:
    def test_success(self, harness: Harness, sources: Sources) -> None:
        lib = Library(files=(sources.add_yaml("deploy.yml", doc({"kind": "Deployment"})),))

        result = LibraryLoader(harness.workspace(lib)).eval(DataValues.empty())

        assert result.ok
        assert isinstance(result.data["result"], EvalResult)
        assert result.data["result"].file("deploy.yml") is not None

    def test_evaluation_failure(self, harness: Harness, sources: Sources) -> None:
        bad = sources.fail(sources.add_yaml("deploy.yml", doc({})), NameError("undefined: replicas"))

        result = LibraryLoader(harness.workspace(Library(files=(bad,)))).eval(DataValues.empty())

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "EVALUATION_FAILED"
        assert result.error.detail == {"path": "deploy.yml"}

    def test_unencodable_text_returns_failure(self, harness: Harness, sources: Sources) -> None:
        lib = Library(files=(sources.add_text("out.txt", "bad \udcff byte"),))

        result = LibraryLoader(harness.workspace(lib)).eval(DataValues.empty())

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "EVALUATION_FAILED"
        assert result.error.detail == {"path": "out.txt"}

    def test_unused_library_values(self, harness: Harness, sources: Sources) -> None:
        lib = Library(files=(sources.add_yaml("deploy.yml", doc({})),))
        scoped = DataValues(doc=doc({"a": 1}), desc="library '@mon' values", library_ref="@mon")

        result = LibraryLoader(harness.workspace(lib)).eval(DataValues.empty(), [scoped])

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "UNUSED_LIBRARY_VALUES"
        assert result.error.detail == {"unused": ["library '@mon' values"]}


class TestEvaluate:
    def test_runs_all_phases(self, harness: Harness, sources: Sources) -> None:
        result = LibraryLoader(harness.workspace(_app(sources))).evaluate()

        assert result.ok
        assert result.op == "evaluate"
        evaluated: EvalResult = result.data["result"]
        assert [f.relative_path for f in evaluated.files] == ["NOTES.txt", "deploy.yml"]
        assert result.data["values"].doc is not None
        seed = harness.engine_factory.seeds[-1]
        assert seed.values is result.data["values"]

    def test_schema_defaults_reach_values(self, harness: Harness, sources: Sources) -> None:
        result = LibraryLoader(harness.workspace(_app(sources))).evaluate()

        assert to_python(result.data["values"].doc) == {"replicas": 1, "name": "web"}

    def test_overlays_forwarded(self, harness: Harness, sources: Sources) -> None:
        overlay = DataValues(doc=doc({"name": "api"}), desc="command line overlay")

        result = LibraryLoader(harness.workspace(_app(sources))).evaluate(values_overlays=[overlay])

        assert result.ok
        assert harness.values_pipeline.calls[0]["overlays"] == [overlay]

    def test_stops_at_first_failure(self, harness: Harness, sources: Sources) -> None:
        harness.values_pipeline.error = RuntimeError("bad overlay")

        result = LibraryLoader(harness.workspace(_app(sources), schema_enabled=False)).evaluate()

        assert not result.ok
        assert result.op == "evaluate"
        assert result.error is not None
        assert result.error.code == "VALUES_RESOLUTION_FAILED"
        assert len(result.warnings) == 1
        assert harness.engine_factory.calls == []

    def test_eval_failure_keeps_schema_warnings(self, harness: Harness, sources: Sources) -> None:
        lib = _app(sources)
        sources.fail(lib.files[2], RuntimeError("boom"))

        result = LibraryLoader(harness.workspace(lib, schema_enabled=False)).evaluate()

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "EVALUATION_FAILED"
        assert result.warnings


class TestForLibrary:
    def test_private_library_shares_root(self, harness: Harness, sources: Sources) -> None:
        private = Library(name="_lib", path="_lib", files=(sources.add_yaml("helpers.yml", doc({"h": 1})),))
        root = Library(files=(sources.add_yaml("a.yml", doc({"a": 1})),), children=(private,))
        loader = LibraryLoader(harness.workspace(root))

        result = loader.for_library(private).eval(DataValues.empty())

        assert result.ok
        assert [f.relative_path for f in result.data["result"].files] == ["_lib/helpers.yml"]
        (ctx,) = harness.engine_factory.contexts
        assert ctx.current is private
        assert ctx.root is root
