"""Document set serialization (round-trip ruamel.yaml emitter)."""

from __future__ import annotations

from io import StringIO

from ruamel.yaml import YAML

from docweave.domain.documents import DocumentSet


def _new_yaml() -> YAML:
    """Create a fresh YAML emitter.

    ruamel.yaml's YAML object is stateful and a failed dump can leave it
    broken, so each call gets its own instance.
    """
    y = YAML()
    y.default_flow_style = False
    y.explicit_start = True
    return y


def doc_set_as_bytes(doc_set: DocumentSet) -> bytes:
    """Serialize every document of *doc_set* as one multi-document YAML stream."""
    if not doc_set.items:
        return b""
    buf = StringIO()
    _new_yaml().dump_all(doc_set.to_python(), buf)
    return buf.getvalue().encode("utf-8")
