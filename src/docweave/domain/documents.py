"""Document node model shared with the parser and evaluation engine.

A parsed YAML stream is a :class:`DocumentSet` of :class:`Document` nodes.
Collection values are :class:`Map` / :class:`Array` nodes whose entries
(:class:`MapItem`, :class:`ArrayItem`) each hold a single value. Any node
may carry annotations keyed by name; the orchestrator only inspects them,
it never evaluates them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Position:
    """Source location of a node."""

    file: str = ""
    line: int | None = None

    @classmethod
    def unknown(cls) -> Position:
        return cls()

    def __str__(self) -> str:
        if not self.file:
            return "?"
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class NodeAnnotation:
    """An annotation as extracted by the parser.

    ``kwargs`` keeps declaration order; values are already-evaluated
    Python objects (``True``, ``"x"``, ...).
    """

    args: tuple[Any, ...] = ()
    kwargs: tuple[tuple[str, Any], ...] = ()


@dataclass(kw_only=True)
class Node:
    """Base for every node in a document tree."""

    position: Position = field(default_factory=Position.unknown)
    annotations: dict[str, NodeAnnotation] = field(default_factory=dict)

    def child_values(self) -> list[Any]:
        """Values declared directly under this node, in order."""
        return []

    def has_annotation(self, name: str) -> bool:
        return name in self.annotations

    def annotation(self, name: str) -> NodeAnnotation | None:
        return self.annotations.get(name)


@dataclass(kw_only=True)
class Document(Node):
    value: Any = None

    def child_values(self) -> list[Any]:
        return [self.value]


@dataclass(kw_only=True)
class MapItem(Node):
    key: Any
    value: Any = None

    def child_values(self) -> list[Any]:
        return [self.value]


@dataclass(kw_only=True)
class Map(Node):
    items: list[MapItem] = field(default_factory=list)

    def child_values(self) -> list[Any]:
        return list(self.items)

    def get(self, key: Any, default: Any = None) -> Any:
        for item in self.items:
            if item.key == key:
                return item.value
        return default


@dataclass(kw_only=True)
class ArrayItem(Node):
    value: Any = None

    def child_values(self) -> list[Any]:
        return [self.value]


@dataclass(kw_only=True)
class Array(Node):
    items: list[ArrayItem] = field(default_factory=list)

    def child_values(self) -> list[Any]:
        return list(self.items)


@dataclass
class DocumentSet:
    """Ordered documents from one YAML stream."""

    items: list[Document] = field(default_factory=list)

    def to_python(self) -> list[Any]:
        return [to_python(doc) for doc in self.items]


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------


def to_python(value: Any) -> Any:
    """Strip node wrappers, returning plain dicts/lists/scalars."""
    if isinstance(value, Document):
        return to_python(value.value)
    if isinstance(value, Map):
        return {item.key: to_python(item.value) for item in value.items}
    if isinstance(value, Array):
        return [to_python(item.value) for item in value.items]
    if isinstance(value, (MapItem, ArrayItem)):
        return to_python(value.value)
    return value


def from_python(value: Any, position: Position | None = None) -> Any:
    """Wrap plain dicts/lists into :class:`Map` / :class:`Array` nodes."""
    pos = position or Position.unknown()
    if isinstance(value, dict):
        return Map(
            position=pos,
            items=[MapItem(key=k, value=from_python(v, pos), position=pos) for k, v in value.items()],
        )
    if isinstance(value, list):
        return Array(
            position=pos,
            items=[ArrayItem(value=from_python(v, pos), position=pos) for v in value],
        )
    return value


def iter_nodes(value: Any) -> Iterator[Node]:
    """Depth-first walk over every node reachable from *value*."""
    if not isinstance(value, Node):
        return
    yield value
    for child in value.child_values():
        yield from iter_nodes(child)


def extract_documents(doc_set: DocumentSet, annotation: str) -> tuple[list[Document], list[Document]]:
    """Split *doc_set* into documents carrying *annotation* and the rest.

    The annotation is only meaningful on documents; finding it on a
    nested node is a syntax error.
    """
    from docweave.domain.errors import AnnotationSyntaxError, Diagnostic

    matched: list[Document] = []
    rest: list[Document] = []
    for doc in doc_set.items:
        for child in doc.child_values():
            for node in iter_nodes(child):
                if node.has_annotation(annotation):
                    raise AnnotationSyntaxError(
                        Diagnostic(
                            position=node.position,
                            description=f"expected @{annotation} annotation to be attached to a document",
                            expected="document",
                            found=type(node).__name__.lower(),
                        )
                    )
        if doc.has_annotation(annotation):
            matched.append(doc)
        else:
            rest.append(doc)
    return matched, rest
