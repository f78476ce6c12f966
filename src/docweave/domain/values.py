"""Data values and library-scoped consumption tracking.

:class:`DataValues` is immutable. Whether a library-scoped value set was
consumed is tracked by a :class:`ValuesUsageLedger`, created by the
evaluator, handed to the evaluation engine, and read back as a frozen
:class:`UsageReport` once every file has been evaluated.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from docweave.domain.documents import Document


@dataclass(frozen=True, eq=False)
class DataValues:
    """One data values document.

    *desc* names the values for diagnostics (for example
    ``"library 'monitoring' on file 'values.yml'"``). *library_ref* is set
    for values targeted at a nested library.
    """

    doc: Document | None
    desc: str
    library_ref: str | None = None

    @classmethod
    def empty(cls) -> DataValues:
        return cls(doc=None, desc="empty data values")

    @property
    def has_library_ref(self) -> bool:
        return self.library_ref is not None


@dataclass(frozen=True)
class UsageReport:
    """Read-only snapshot of which library values were consumed."""

    used: tuple[str, ...] = ()
    unused: tuple[str, ...] = ()

    @property
    def all_used(self) -> bool:
        return not self.unused


class ValuesUsageLedger:
    """Records which library-scoped value sets the engine consumed."""

    def __init__(self, values: Iterable[DataValues] = ()) -> None:
        self._values: list[DataValues] = list(values)
        self._used: set[DataValues] = set()

    def __iter__(self) -> Iterator[DataValues]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def for_library(self, library_ref: str) -> list[DataValues]:
        """Value sets addressed to *library_ref*, in supplied order."""
        return [dv for dv in self._values if dv.library_ref == library_ref]

    def mark_used(self, values: DataValues) -> None:
        """Record consumption of *values*. Repeated calls are no-ops."""
        if values not in self._values:
            msg = f"Data values {values.desc!r} are not tracked by this ledger"
            raise KeyError(msg)
        self._used.add(values)

    def is_used(self, values: DataValues) -> bool:
        return values in self._used

    def report(self) -> UsageReport:
        return UsageReport(
            used=tuple(dv.desc for dv in self._values if dv in self._used),
            unused=tuple(dv.desc for dv in self._values if dv not in self._used),
        )
