from __future__ import annotations

import re
from typing import Any, Iterable

from jobgenie.utils.errors import validation_error

_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


def issue(code: str, message: str, path: list[Any]) -> dict[str, Any]:
    return {"code": code, "message": message, "path": list(path)}


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(_UUID_RE.match(value.strip()))


def check_uuid(value: Any, path: list[Any], *, label: str) -> list[dict[str, Any]]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return [issue("required", f"{label} is required", path)]
    if not isinstance(value, str):
        return [issue("invalid_type", f"{label} must be a string", path)]
    if not is_uuid(value):
        return [issue("invalid_uuid", f"Invalid {label} format", path)]
    return []


def check_uuid_list(value: Any, field: str, *, label: str) -> list[dict[str, Any]]:
    if value is None:
        return [issue("required", f"{field} is required", [field])]
    if not isinstance(value, list):
        return [issue("invalid_type", f"{field} must be an array", [field])]
    if not value:
        return [issue("too_small", f"At least one {label} is required", [field])]

    issues: list[dict[str, Any]] = []
    for idx, item in enumerate(value):
        issues.extend(check_uuid(item, [field, idx], label=label))
    return issues


def check_optional_text(value: Any, path: list[Any], *, max_length: int) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, str):
        return [issue("invalid_type", f"{path[-1]} must be a string", path)]
    if len(value) > max_length:
        return [issue("too_big", f"{path[-1]} must be at most {max_length} characters", path)]
    return []


def parse_positive_int(
    args, name: str, default: int, *, maximum: int | None = None, issues: list[dict[str, Any]]
) -> int:
    raw = str(args.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        issues.append(issue("invalid_type", f"{name} must be an integer", [name]))
        return default
    if value < 1:
        issues.append(issue("too_small", f"{name} must be at least 1", [name]))
        return default
    if maximum is not None and value > maximum:
        issues.append(issue("too_big", f"{name} must be at most {maximum}", [name]))
        return default
    return value


def parse_choice(
    args, name: str, choices: Iterable[str], default: str | None, *, issues: list[dict[str, Any]]
) -> str | None:
    raw = str(args.get(name) or "").strip()
    if not raw:
        return default
    allowed = list(choices)
    if raw not in allowed:
        issues.append(issue("invalid_enum_value", f"{name} must be one of: {', '.join(allowed)}", [name]))
        return default
    return raw


def raise_if_issues(issues: list[dict[str, Any]], message: str = "Validation failed") -> None:
    if issues:
        raise validation_error(issues, message)
