"""Schema values produced by schema collection.

Three flavours, all answering :meth:`Schema.validate` and
:meth:`Schema.default_values`:

- :class:`DocumentSchema` — built from a ``@schema/match`` document.
- :class:`NullSchema` — schema processing ran but nothing was declared.
- :class:`PermissiveSchema` — schema processing is disabled; anything goes.
"""

from __future__ import annotations

from typing import Any

from docweave.domain.annotations import AnnotationResolver
from docweave.domain.documents import (
    Array,
    ArrayItem,
    Document,
    Map,
    MapItem,
    Node,
    Position,
    from_python,
    to_python,
)
from docweave.domain.schema_types import AnyType, ArrayType, MapType, ScalarType, Type, scalar_kind
from docweave.domain.types import AnnotationName


def build_type(value: Any, position: Position | None = None) -> Type:
    """Infer the schema type of a declared value, honoring annotations."""
    pos = value.position if isinstance(value, Node) else (position or Position.unknown())

    if isinstance(value, Node):
        override = _resolver.resolve(value)
        if override is not None:
            if isinstance(override, AnyType) and override.default is None:
                override.default = _declared_default(value)
            return override

    if isinstance(value, (Document, MapItem, ArrayItem)):
        return build_type(value.value, pos)
    if isinstance(value, Map):
        return MapType(position=pos, items={item.key: build_type(item) for item in value.items})
    if isinstance(value, Array):
        # the first item describes every element; an empty array accepts anything
        item_type = build_type(value.items[0]) if value.items else AnyType(position=pos)
        return ArrayType(position=pos, item_type=item_type)

    kind = scalar_kind(value)
    if kind is None:
        return AnyType(position=pos, default=value)
    return ScalarType(position=pos, kind=kind, default=value)


def _declared_default(node: Node) -> Any:
    # collections are their own value; entries and documents wrap one
    if isinstance(node, (Map, Array)):
        return to_python(node)
    children = node.child_values()
    return to_python(children[0]) if children else None


_resolver = AnnotationResolver(build_type)


class Schema:
    """Common interface of every schema flavour."""

    is_null = False
    is_permissive = False

    def validate(self, document: Document | None) -> list[str]:
        """Return violations of *document* against this schema (empty if valid)."""
        return []

    def default_values(self) -> Document | None:
        """Defaults declared by the schema, or None when it declares none."""
        return None


class DocumentSchema(Schema):
    """A schema declared by a single document.

    Documents annotated with ``@library/ref`` target a nested library
    instead of the current one.
    """

    def __init__(self, source: Document) -> None:
        self.source = source
        self.type = build_type(source)

    @classmethod
    def from_document(cls, doc: Document) -> DocumentSchema:
        """Build the type tree of *doc*, resolving annotations at every node."""
        return cls(doc)

    @property
    def has_library_ref(self) -> bool:
        return self.source.has_annotation(AnnotationName.LIBRARY_REF)

    @property
    def library_ref(self) -> str | None:
        ann = self.source.annotation(AnnotationName.LIBRARY_REF)
        if ann is None or not ann.args:
            return None
        return str(ann.args[0])

    def validate(self, document: Document | None) -> list[str]:
        value = to_python(document) if document is not None else None
        return self.type.check(value)

    def default_values(self) -> Document | None:
        return Document(position=self.source.position, value=from_python(self.type.default_value()))

    def __repr__(self) -> str:
        return f"DocumentSchema(source={self.source.position}, library_ref={self.library_ref!r})"


class NullSchema(Schema):
    """No schema document was declared."""

    is_null = True

    def __repr__(self) -> str:
        return "NullSchema()"


class PermissiveSchema(Schema):
    """Schema processing is disabled; every document is accepted."""

    is_permissive = True

    def __repr__(self) -> str:
        return "PermissiveSchema()"
