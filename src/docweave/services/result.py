"""ServiceResult and ServiceError — the contract of the LibraryLoader facade.

Collectors and the evaluator raise :class:`~docweave.domain.errors.DocweaveError`
subclasses; the facade converts them into a failed ServiceResult so
embedding applications never have to catch.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from docweave.domain.errors import DocweaveError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: DocweaveError) -> ServiceError:
        return cls(code=exc.code, message=str(exc), detail=exc.detail)


class ServiceResult(BaseModel):
    """Return type of every facade operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"schemas"``, ``"values"``, ``"eval"``, ...).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry spans).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
