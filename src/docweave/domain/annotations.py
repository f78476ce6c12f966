"""Schema annotation parsing and per-node type override resolution.

Two annotations can override the type a schema node would otherwise get
from its value:

- ``@schema/type any=True`` — the node accepts any value.
- ``@schema/nullable`` — the node accepts null or its declared value's type,
  and defaults to null.

A node resolves to at most one override. Annotations are probed in the
fixed order of :data:`PROBE_ORDER`, then :func:`select_annotation` picks
one via :data:`PRECEDENCE`. The selected annotation decides the result
even when it yields no type: a node with both ``@schema/type any=False``
and ``@schema/nullable`` resolves to ``None``, so the nullable
annotation has no effect on it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from docweave.domain.documents import Node, NodeAnnotation, Position
from docweave.domain.errors import AnnotationSyntaxError, Diagnostic
from docweave.domain.schema_types import AnyType, NullType, Type
from docweave.domain.types import AnnotationName

TYPE_KWARG_ANY = "any"

PROBE_ORDER: tuple[AnnotationName, ...] = (
    AnnotationName.SCHEMA_TYPE,
    AnnotationName.SCHEMA_NULLABLE,
)

# Infers the schema type of a declared value (recursing into collections).
ValueTypeFn = Callable[[Any, Position], Type]


# ---------------------------------------------------------------------------
# Annotation variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TypeAnnotation:
    """Parsed ``@schema/type``."""

    any: bool
    position: Position

    @classmethod
    def parse(cls, ann: NodeAnnotation, position: Position) -> TypeAnnotation:
        name = AnnotationName.SCHEMA_TYPE
        if not ann.kwargs:
            raise AnnotationSyntaxError(
                Diagnostic(
                    position=position,
                    description=f"expected @{name} annotation to have keyword argument and value",
                    expected="valid keyword argument and value",
                    found="missing keyword argument and value",
                    hints=[
                        f"Supported key-value pairs are '{TYPE_KWARG_ANY}=True', "
                        f"'{TYPE_KWARG_ANY}=False'"
                    ],
                )
            )

        is_any = False
        for kwarg_name, kwarg_value in ann.kwargs:
            if kwarg_name != TYPE_KWARG_ANY:
                raise AnnotationSyntaxError(
                    Diagnostic(
                        position=position,
                        description=f"unknown @{name} annotation keyword argument",
                        expected="A valid kwarg",
                        found=str(kwarg_name),
                        hints=[f"Supported kwargs are '{TYPE_KWARG_ANY}'"],
                    )
                )
            if not isinstance(kwarg_value, bool):
                raise AnnotationSyntaxError(
                    Diagnostic(
                        position=position,
                        description=f"unknown @{name} annotation keyword argument",
                        expected="bool",
                        found=type(kwarg_value).__name__,
                        hints=[f"Supported kwargs are '{TYPE_KWARG_ANY}'"],
                    )
                )
            is_any = kwarg_value
        return cls(any=is_any, position=position)

    def new_type(self) -> Type | None:
        if self.any:
            return AnyType(position=self.position)
        return None


@dataclass(frozen=True)
class NullableAnnotation:
    """Parsed ``@schema/nullable``."""

    wrapped_type: Type
    position: Position

    @classmethod
    def parse(
        cls,
        ann: NodeAnnotation,
        node: Node,
        value_type_of: ValueTypeFn,
    ) -> NullableAnnotation:
        name = AnnotationName.SCHEMA_NULLABLE
        if ann.kwargs:
            raise AnnotationSyntaxError(
                Diagnostic(
                    position=node.position,
                    description=f"expected @{name} annotation to not contain any keyword arguments",
                    expected="no keyword arguments",
                    found=", ".join(str(k) for k, _ in ann.kwargs),
                )
            )
        values = node.child_values()
        if not values:
            raise AnnotationSyntaxError(
                Diagnostic(
                    position=node.position,
                    description=f"expected @{name} annotation to be attached to a node with a value",
                    expected="a declared value",
                    found="no value",
                )
            )
        return cls(wrapped_type=value_type_of(values[0], node.position), position=node.position)

    def new_type(self) -> Type | None:
        return NullType(wrapped=self.wrapped_type, position=self.position)


Annotation = TypeAnnotation | NullableAnnotation


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


def _is_any_type(ann: Annotation) -> bool:
    return isinstance(ann, TypeAnnotation) and ann.any


# (predicate, rank): lowest rank wins; unmatched annotations rank last.
# Ties keep probe order.
PRECEDENCE: tuple[tuple[Callable[[Annotation], bool], int], ...] = ((_is_any_type, 0),)
_DEFAULT_RANK = 1


def _rank(ann: Annotation) -> int:
    for predicate, rank in PRECEDENCE:
        if predicate(ann):
            return rank
    return _DEFAULT_RANK


def select_annotation(anns: list[Annotation]) -> Annotation | None:
    """Pick the annotation that decides a node's type, or None if there are none."""
    if not anns:
        return None
    # min() returns the first of equally ranked items, keeping probe order.
    return min(anns, key=_rank)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class AnnotationResolver:
    """Resolves the type override (if any) for a schema node.

    *value_type_of* infers the type of a declared value; it is only
    consulted for ``@schema/nullable``.
    """

    def __init__(self, value_type_of: ValueTypeFn) -> None:
        self._value_type_of = value_type_of

    def collect(self, node: Node) -> list[Annotation]:
        """Parse every recognized annotation on *node*, in probe order."""
        anns: list[Annotation] = []
        for name in PROBE_ORDER:
            raw = node.annotation(name)
            if raw is None:
                continue
            if name == AnnotationName.SCHEMA_TYPE:
                anns.append(TypeAnnotation.parse(raw, node.position))
            else:
                anns.append(NullableAnnotation.parse(raw, node, self._value_type_of))
        return anns

    def resolve(self, node: Node) -> Type | None:
        selected = select_annotation(self.collect(node))
        if selected is None:
            return None
        return selected.new_type()
