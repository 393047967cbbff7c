"""
Base exception types for marketbook.

Every scheduling failure is a ProjectError: it carries a machine-readable
code, a suggested HTTP status and optional details so the same object can be
logged, shown inline next to the offending user action, or rendered by the
API layer.
"""
from __future__ import annotations

import traceback
from typing import Any, Optional, Type


class ProjectError(Exception):
    """
    Base exception for all marketbook errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable slug (defaults to the class default_code).
        http_status: Suggested HTTP status for API responses (default 500).
        details: Extra context, e.g. {"date": "2026-10-19", "start": "11:30"}.
        cause: Optional chained exception.
    """

    default_code: str = "ERROR"
    default_http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or getattr(self.__class__, "default_code", self.__class__.__name__)
        self.http_status = http_status or getattr(self.__class__, "default_http_status", 500)
        self.details: dict[str, Any] = dict(details or {})
        self.cause = cause

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging (includes the cause traceback)."""
        out: dict[str, Any] = {
            "message": self.message,
            "code": self.code,
            "http_status": self.http_status,
        }
        if self.details:
            out["details"] = self.details
        if self.cause is not None:
            out["cause"] = str(self.cause)
            out["cause_traceback"] = traceback.format_exception(
                type(self.cause), self.cause, self.cause.__traceback__
            )
        return out

    def to_response(self) -> dict[str, Any]:
        """Body for API error responses; never leaks the cause traceback."""
        body: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


def exception_factory(
    name: str,
    *,
    code: Optional[str] = None,
    http_status: int = 500,
    base: Type[ProjectError] = ProjectError,
) -> Type[ProjectError]:
    """
    Create a new exception class on demand.

    Example:
        PaymentPending = exception_factory("PaymentPending", http_status=402)
        raise PaymentPending("Order awaits payment", details={"order_id": 7})
    """
    code = code or name.upper().replace(" ", "_")
    return type(
        name,
        (base,),
        {
            "default_code": code,
            "default_http_status": http_status,
        },
    )
