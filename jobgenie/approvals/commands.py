"""
Typed commands for the approval endpoints.

Handlers never look at raw payloads past this module: a request body and its
``action`` query parameter are turned into a ``TransitionCommand`` here, or a
``VALIDATION_ERROR`` is raised listing every offending field.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from jobgenie.utils.validators import (
    check_optional_text,
    check_uuid,
    check_uuid_list,
    issue,
    raise_if_issues,
)

logger = logging.getLogger("jobgenie.approvals")

ACTION_APPROVE = "approve"
ACTION_REJECT = "reject"
ACTION_BULK_APPROVE = "bulk-approve"
ACTION_BULK_REJECT = "bulk-reject"

SINGLE_ACTIONS = {ACTION_APPROVE, ACTION_REJECT}
BULK_ACTIONS = {ACTION_BULK_APPROVE, ACTION_BULK_REJECT}

# Omitted (or unknown) action means "approve a single entity".
DEFAULT_ACTION = ACTION_APPROVE

REASON_MAX_LENGTH = 1000


class EntityKind(str, enum.Enum):
    CANDIDATE = "candidate"
    COMPANY = "company"

    @property
    def id_field(self) -> str:
        return f"{self.value}Id"

    @property
    def ids_field(self) -> str:
        return f"{self.value}Ids"

    @property
    def label(self) -> str:
        return f"{self.value} ID"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def plural(self) -> str:
        return "companies" if self is EntityKind.COMPANY else "candidates"


class CommandKind(str, enum.Enum):
    SINGLE = "single"
    BULK = "bulk"
    QUERY = "query"


@dataclass(frozen=True)
class TransitionCommand:
    kind: CommandKind
    entity_kind: EntityKind
    action: str | None
    ids: tuple[str, ...]
    reason: str | None = None

    @property
    def is_approval(self) -> bool:
        return self.action in {ACTION_APPROVE, ACTION_BULK_APPROVE}


def normalize_action(raw: Any) -> str:
    action = str(raw or "").strip().lower()
    if not action:
        return DEFAULT_ACTION
    if action in SINGLE_ACTIONS or action in BULK_ACTIONS:
        return action
    logger.warning("unknown approval action=%r, falling back to %s", action, DEFAULT_ACTION)
    return DEFAULT_ACTION


def _reason(body: Mapping[str, Any], issues: list[dict[str, Any]]) -> str | None:
    raw = body.get("reason")
    issues.extend(check_optional_text(raw, ["reason"], max_length=REASON_MAX_LENGTH))
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None


def build_transition_command(entity_kind: EntityKind, action_raw: Any, body: Any) -> TransitionCommand:
    action = normalize_action(action_raw)
    if not isinstance(body, Mapping):
        raise_if_issues([issue("invalid_type", "Request body must be a JSON object", [])])

    issues: list[dict[str, Any]] = []

    if action in BULK_ACTIONS:
        raw_ids = body.get(entity_kind.ids_field)
        issues.extend(check_uuid_list(raw_ids, entity_kind.ids_field, label=entity_kind.label))
        reason = _reason(body, issues) if action == ACTION_BULK_REJECT else None
        raise_if_issues(issues)
        return TransitionCommand(
            kind=CommandKind.BULK,
            entity_kind=entity_kind,
            action=action,
            ids=tuple(str(x).strip().lower() for x in raw_ids),
            reason=reason,
        )

    raw_id = body.get(entity_kind.id_field)
    issues.extend(check_uuid(raw_id, [entity_kind.id_field], label=entity_kind.label))
    reason = _reason(body, issues) if action == ACTION_REJECT else None
    raise_if_issues(issues)
    return TransitionCommand(
        kind=CommandKind.SINGLE,
        entity_kind=entity_kind,
        action=action,
        ids=(str(raw_id).strip().lower(),),
        reason=reason,
    )


def build_status_query(entity_kind: EntityKind, args: Mapping[str, Any]) -> TransitionCommand:
    raw_id = args.get(entity_kind.id_field)
    raise_if_issues(check_uuid(raw_id, [entity_kind.id_field], label=entity_kind.label), "Invalid query parameters")
    return TransitionCommand(
        kind=CommandKind.QUERY,
        entity_kind=entity_kind,
        action=None,
        ids=(str(raw_id).strip().lower(),),
    )
