from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class ApiError(Exception):
    code: str
    message: str
    status: int = 400
    details: Any | None = None


def validation_error(issues: list[dict[str, Any]], message: str = "Validation failed") -> ApiError:
    return ApiError("VALIDATION_ERROR", message, status=400, details=issues)


def not_found(message: str) -> ApiError:
    return ApiError("NOT_FOUND", message, status=404)
