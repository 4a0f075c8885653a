"""Service results shared by the CLI and the HTTP adapter.

RouteService methods return a ServiceResult instead of raising, so both
front ends branch on ``ok`` and turn ``error_code`` into an exit status or
an HTTP status code.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ServiceError(BaseModel):
    """Why an operation failed.

    ``code`` is the failing RouteMapError's code; ``detail`` carries the
    offending location ``name`` where there is one.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one RouteService operation.

    ``data`` holds the operation's payload on success: names, counts of
    applied routes, shortest routes. ``meta`` holds the span tree when
    tracing is on.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error is not None else None
