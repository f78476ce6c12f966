"""Shared pytest fixtures and collaborator fakes for docweave tests.

The fakes stand in for the parser, evaluation engine, overlay merger,
values pipeline, and overlay post-processor. Tests register what each
file parses/evaluates to in a :class:`Sources` registry keyed by
:class:`File` identity.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

from docweave.config.models import LoaderConfig
from docweave.config.settings import DocweaveSettings
from docweave.domain.collaborators import EngineSeed, Symbols, ValuesPolicy
from docweave.domain.documents import (
    Document,
    DocumentSet,
    Map,
    MapItem,
    NodeAnnotation,
    Position,
    from_python,
    to_python,
)
from docweave.domain.files import File, FileInLibrary, Library, LibraryExecutionContext
from docweave.domain.schema import Schema
from docweave.domain.types import AnnotationName
from docweave.domain.values import DataValues
from docweave.infrastructure.workspace import Collaborators, Workspace

# ---------------------------------------------------------------------------
# Document helpers
# ---------------------------------------------------------------------------


def doc(value: Any, *annotations: str, file: str = "", **annotation_args: Any) -> Document:
    """Build a document from plain Python data, annotated with *annotations*.

    ``annotation_args`` maps an annotation name to its positional args,
    e.g. ``doc({...}, **{"library/ref": ("@lib",)})``.
    """
    anns = {name: NodeAnnotation() for name in annotations}
    for name, args in annotation_args.items():
        anns[name] = NodeAnnotation(args=tuple(args))
    pos = Position(file=file, line=1) if file else Position.unknown()
    return Document(value=from_python(value, pos), annotations=anns, position=pos)


def doc_set(*docs: Document) -> DocumentSet:
    return DocumentSet(items=list(docs))


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


@dataclass
class Sources:
    """What each file parses and evaluates to."""

    yaml: dict[File, DocumentSet] = field(default_factory=dict)
    symbols: dict[File, dict[str, Any]] = field(default_factory=dict)
    text: dict[File, str] = field(default_factory=dict)
    failures: dict[File, Exception] = field(default_factory=dict)
    consumes: dict[File, list[DataValues]] = field(default_factory=dict)
    library_refs: dict[File, list[str]] = field(default_factory=dict)

    def add_yaml(self, path: str, *docs: Document, symbols: dict[str, Any] | None = None) -> File:
        f = File.from_path(path)
        self.yaml[f] = doc_set(*docs)
        self.symbols[f] = symbols or {}
        return f

    def add_text(self, path: str, text: str, symbols: dict[str, Any] | None = None) -> File:
        f = File.from_path(path)
        self.text[f] = text
        self.symbols[f] = symbols or {}
        return f

    def add_script(self, path: str, symbols: dict[str, Any]) -> File:
        f = File.from_path(path)
        self.symbols[f] = symbols
        return f

    def fail(self, f: File, exc: Exception) -> File:
        self.failures[f] = exc
        return f


class FakeParser:
    def __init__(self, sources: Sources) -> None:
        self._sources = sources
        self.parsed: list[File] = []

    def parse_yaml(self, file: File) -> DocumentSet:
        self.parsed.append(file)
        return copy.deepcopy(self._sources.yaml.get(file, DocumentSet()))


class FakeEngine:
    def __init__(self, seed: EngineSeed, sources: Sources, factory: FakeEngineFactory) -> None:
        self.seed = seed
        self._sources = sources
        self._factory = factory

    def _enter(self, kind: str, ctx: LibraryExecutionContext, file: File) -> None:
        self._factory.calls.append((kind, file.relative_path))
        self._factory.contexts.append(ctx)
        exc = self._sources.failures.get(file)
        if exc is not None:
            raise exc
        for values in self._sources.consumes.get(file, []):
            self.seed.library_values.mark_used(values)
        for ref in self._sources.library_refs.get(file, []):
            for values in self.seed.library_values.for_library(ref):
                self.seed.library_values.mark_used(values)

    def eval_yaml(self, ctx: LibraryExecutionContext, file: File) -> tuple[Symbols, DocumentSet]:
        self._enter("yaml", ctx, file)
        return self._sources.symbols.get(file, {}), copy.deepcopy(self._sources.yaml.get(file, DocumentSet()))

    def eval_text(self, ctx: LibraryExecutionContext, file: File) -> tuple[Symbols, str]:
        self._enter("text", ctx, file)
        return self._sources.symbols.get(file, {}), self._sources.text.get(file, "")

    def eval_script(self, ctx: LibraryExecutionContext, file: File) -> Symbols:
        self._enter("script", ctx, file)
        return self._sources.symbols.get(file, {})


class FakeEngineFactory:
    def __init__(self, sources: Sources) -> None:
        self._sources = sources
        self.seeds: list[EngineSeed] = []
        self.calls: list[tuple[str, str]] = []
        self.contexts: list[LibraryExecutionContext] = []

    def __call__(self, seed: EngineSeed) -> FakeEngine:
        self.seeds.append(seed)
        return FakeEngine(seed, self._sources, self)


def _merge_maps(base: Map, patch: Map) -> Map:
    items = [copy.copy(item) for item in base.items]
    for patch_item in patch.items:
        for i, item in enumerate(items):
            if item.key == patch_item.key:
                if isinstance(item.value, Map) and isinstance(patch_item.value, Map):
                    items[i] = MapItem(
                        key=item.key,
                        value=_merge_maps(item.value, patch_item.value),
                        annotations=dict(item.annotations),
                        position=item.position,
                    )
                else:
                    items[i] = copy.deepcopy(patch_item)
                break
        else:
            items.append(copy.deepcopy(patch_item))
    return Map(items=items, annotations=dict(base.annotations), position=base.position)


class FakeMerger:
    """Deep-merges maps, keeping node annotations; patch wins on conflicts."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[Any, Any]] = []

    def merge(self, base: Document, patch: Document) -> Document:
        self.calls.append((to_python(base), to_python(patch)))
        if self.error is not None:
            raise self.error
        if isinstance(base.value, Map) and isinstance(patch.value, Map):
            value: Any = _merge_maps(base.value, patch.value)
        else:
            value = copy.deepcopy(patch.value)
        return Document(value=value, annotations=dict(base.annotations), position=base.position)


class FakeValuesPipeline:
    """Merges discovered values documents, then overlays; validates against the schema.

    Overlays carrying a ``library_ref`` are passed through as library values.
    """

    def __init__(self, sources: Sources, merger: FakeMerger, error: Exception | None = None) -> None:
        self._sources = sources
        self._merger = merger
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def apply(
        self,
        values_files: list[FileInLibrary],
        overlays: list[DataValues],
        schema: Schema,
        policy: ValuesPolicy,
    ) -> tuple[DataValues, list[DataValues]]:
        self.calls.append({"files": values_files, "overlays": overlays, "schema": schema, "policy": policy})
        if self.error is not None:
            raise self.error

        result = schema.default_values() or Document(value=from_python({}))
        docs: list[Document] = []
        for file_in_lib in values_files:
            docs.extend(d for d in self._sources.yaml[file_in_lib.file].items if d.has_annotation(AnnotationName.DATA_VALUES))
        docs.extend(ov.doc for ov in overlays if not ov.has_library_ref and ov.doc is not None)
        for d in docs:
            result = self._merger.merge(result, d)

        violations = schema.validate(result)
        if violations:
            raise ValueError("; ".join(violations))
        library_values = [ov for ov in overlays if ov.has_library_ref]
        return DataValues(doc=result, desc="merged data values"), library_values


class FakePostProcessor:
    """Folds documents annotated ``@overlay/match`` into the preceding document."""

    def __init__(self, merger: FakeMerger, error: Exception | None = None) -> None:
        self._merger = merger
        self.error = error

    def apply(self, doc_sets: dict[FileInLibrary, DocumentSet]) -> dict[FileInLibrary, DocumentSet]:
        if self.error is not None:
            raise self.error
        result: dict[FileInLibrary, DocumentSet] = {}
        for file_in_lib, ds in doc_sets.items():
            items: list[Document] = []
            for d in ds.items:
                if d.has_annotation(AnnotationName.OVERLAY_MATCH) and items:
                    items[-1] = self._merger.merge(items[-1], d)
                else:
                    items.append(d)
            result[file_in_lib] = DocumentSet(items=items)
        return result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@dataclass
class Harness:
    """Sources, fakes, and a workspace factory wired together."""

    sources: Sources
    parser: FakeParser
    engine_factory: FakeEngineFactory
    merger: FakeMerger
    values_pipeline: FakeValuesPipeline
    post_processor: FakePostProcessor

    def collaborators(self) -> Collaborators:
        return Collaborators(
            parser=self.parser,
            engine_factory=self.engine_factory,
            merger=self.merger,
            values_pipeline=self.values_pipeline,
            post_processor=self.post_processor,
        )

    def workspace(self, library: Library, **loader: Any) -> Workspace:
        settings = DocweaveSettings(loader=LoaderConfig(**loader))
        return Workspace.for_library(library, settings, self.collaborators())


@pytest.fixture
def sources() -> Sources:
    return Sources()


@pytest.fixture
def harness(sources: Sources) -> Harness:
    merger = FakeMerger()
    return Harness(
        sources=sources,
        parser=FakeParser(sources),
        engine_factory=FakeEngineFactory(sources),
        merger=merger,
        values_pipeline=FakeValuesPipeline(sources, merger),
        post_processor=FakePostProcessor(merger),
    )


@pytest.fixture
def make_workspace(harness: Harness) -> Callable[..., Workspace]:
    return harness.workspace
