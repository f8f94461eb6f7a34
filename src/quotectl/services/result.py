"""ServiceResult and ServiceError — the universal service contract.

All service-layer methods return ServiceResult. The CLI, the output
renderers and plugins consume this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from quotectl.domain.errors import QuoteError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"add_item"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None


def error_result(op: str, exc: QuoteError, **detail: Any) -> ServiceResult:
    """Failed result carrying a domain error's code, message and detail."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=exc.code, message=exc.message, detail={**exc.detail, **detail}),
    )
