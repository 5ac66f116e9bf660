from __future__ import annotations

import logging
from concurrent.futures import Future
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from jobgenie.approvals.commands import (
    ACTION_APPROVE,
    ACTION_BULK_APPROVE,
    ACTION_BULK_REJECT,
    ACTION_REJECT,
    CommandKind,
    EntityKind,
    TransitionCommand,
)
from jobgenie.approvals.notifications import NotificationDispatcher
from jobgenie.approvals.store import ApprovalStore
from jobgenie.db import session_scope
from jobgenie.models import (
    ACCOUNT_ACTIVE,
    ACCOUNT_PENDING_VERIFICATION,
    APPROVAL_APPROVED,
    APPROVAL_REJECTED,
    ROLE_CANDIDATE,
    Candidate,
    Company,
)
from jobgenie.utils.datetime import to_iso_utc, utc_now
from jobgenie.utils.errors import ApiError

logger = logging.getLogger("jobgenie.approvals")

LINKED_ACCOUNT_STATUS = {
    APPROVAL_APPROVED: ACCOUNT_ACTIVE,
    APPROVAL_REJECTED: ACCOUNT_PENDING_VERIFICATION,
}

_NOTIFY_ACTION = {
    APPROVAL_APPROVED: ACTION_APPROVE,
    APPROVAL_REJECTED: ACTION_REJECT,
}


@dataclass(frozen=True)
class Summary:
    entity_kind: EntityKind
    id: str
    display_name: str
    approval_status: str
    updated_at: datetime | None
    first_name: str | None = None
    last_name: str | None = None
    name: str | None = None
    verified_at: datetime | None = None
    notification_dismissed: bool | None = None
    linked_account_status: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id}
        if self.entity_kind is EntityKind.CANDIDATE:
            out["first_name"] = self.first_name
            out["last_name"] = self.last_name
            out["status"] = self.linked_account_status
        else:
            out["name"] = self.name
            out["verified_at"] = to_iso_utc(self.verified_at)
        out["approval_status"] = self.approval_status
        out["updated_at"] = to_iso_utc(self.updated_at)
        return out


@dataclass(frozen=True)
class BulkOutcome:
    entity_kind: EntityKind
    approval_status: str
    summaries: list[Summary]
    notifications: list[Future] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.summaries)

    @property
    def first(self) -> Summary:
        return self.summaries[0]


def summarize(entity_kind: EntityKind, entity: Candidate | Company, account_status: str | None = None) -> Summary:
    if entity_kind is EntityKind.CANDIDATE:
        display = " ".join(x for x in (entity.first_name, entity.last_name) if x) or entity.user_id
        return Summary(
            entity_kind=entity_kind,
            id=entity.user_id,
            display_name=display,
            approval_status=entity.approval_status,
            updated_at=entity.updated_at,
            first_name=entity.first_name,
            last_name=entity.last_name,
            linked_account_status=account_status,
        )
    return Summary(
        entity_kind=entity_kind,
        id=entity.id,
        display_name=entity.name,
        approval_status=entity.approval_status,
        updated_at=entity.updated_at,
        name=entity.name,
        verified_at=entity.verified_at,
        notification_dismissed=entity.approval_notification_dismissed,
    )


class ApprovalWorkflow:
    """
    Approve/reject state machine for candidates and companies.

    Any state may move to ``approved`` or ``rejected``; repeating a transition is
    allowed and only refreshes ``updated_at``. Each call runs in one transaction;
    emails go out afterwards on the dispatcher's pool and cannot fail the call.
    """

    def __init__(self, session_factory: sessionmaker, dispatcher: NotificationDispatcher | None = None):
        self._session_factory = session_factory
        self._dispatcher = dispatcher

    def approve_single(self, entity_kind: EntityKind, entity_id: str) -> Summary:
        return self._transition_single(entity_kind, entity_id, APPROVAL_APPROVED)

    def reject_single(self, entity_kind: EntityKind, entity_id: str, reason: str | None = None) -> Summary:
        return self._transition_single(entity_kind, entity_id, APPROVAL_REJECTED, reason=reason)

    def bulk_approve(self, entity_kind: EntityKind, entity_ids: Sequence[str]) -> BulkOutcome:
        return self._transition_bulk(entity_kind, entity_ids, APPROVAL_APPROVED)

    def bulk_reject(
        self, entity_kind: EntityKind, entity_ids: Sequence[str], reason: str | None = None
    ) -> BulkOutcome:
        return self._transition_bulk(entity_kind, entity_ids, APPROVAL_REJECTED, reason=reason)

    def get_status(self, entity_kind: EntityKind, entity_id: str) -> Summary:
        with self._transaction("get_status", entity_kind) as store:
            entity = store.get_entity(entity_kind, entity_id)
            account = store.find_linked_account(entity_kind, entity)
            return summarize(entity_kind, entity, account.status if account is not None else None)

    def execute(self, command: TransitionCommand) -> Summary | BulkOutcome:
        if command.kind is CommandKind.QUERY:
            return self.get_status(command.entity_kind, command.ids[0])
        if command.kind is CommandKind.BULK:
            if command.action == ACTION_BULK_APPROVE:
                return self.bulk_approve(command.entity_kind, command.ids)
            if command.action == ACTION_BULK_REJECT:
                return self.bulk_reject(command.entity_kind, command.ids, reason=command.reason)
        elif command.action == ACTION_REJECT:
            return self.reject_single(command.entity_kind, command.ids[0], reason=command.reason)
        elif command.action == ACTION_APPROVE:
            return self.approve_single(command.entity_kind, command.ids[0])
        raise ValueError(f"unsupported command: {command.kind.value}/{command.action}")

    def _transition_single(
        self, entity_kind: EntityKind, entity_id: str, status: str, *, reason: str | None = None
    ) -> Summary:
        with self._transaction(status, entity_kind) as store:
            summary = self._apply(store, entity_kind, entity_id, status, now=utc_now())

        logger.info("transition kind=%s id=%s status=%s", entity_kind.value, entity_id, status)
        self._notify(entity_kind, entity_id, status, reason)
        return summary

    def _transition_bulk(
        self, entity_kind: EntityKind, entity_ids: Sequence[str], status: str, *, reason: str | None = None
    ) -> BulkOutcome:
        if not entity_ids:
            raise ApiError("VALIDATION_ERROR", f"At least one {entity_kind.label} is required", status=400)

        now = utc_now()
        with self._transaction(f"bulk_{status}", entity_kind) as store:
            summaries = [self._apply(store, entity_kind, entity_id, status, now=now) for entity_id in entity_ids]

        logger.info("bulk transition kind=%s status=%s count=%s", entity_kind.value, status, len(summaries))
        futures = [f for f in (self._notify(entity_kind, s.id, status, reason) for s in summaries) if f is not None]
        return BulkOutcome(entity_kind=entity_kind, approval_status=status, summaries=summaries, notifications=futures)

    def _apply(
        self, store: ApprovalStore, entity_kind: EntityKind, entity_id: str, status: str, *, now: datetime
    ) -> Summary:
        entity = store.get_entity(entity_kind, entity_id)

        account_status = None
        if entity_kind is EntityKind.CANDIDATE:
            account = store.find_linked_account(entity_kind, entity)
            if account is None or str(account.role or "").lower() != ROLE_CANDIDATE:
                raise ApiError(
                    "INVALID_STATE",
                    "Linked account is not a candidate account",
                    status=409,
                    details={"candidateId": entity_id},
                )
            account_status = LINKED_ACCOUNT_STATUS[status]

        entity = store.set_approval_status(entity_kind, entity_id, status, now=now)
        if account_status is not None:
            store.set_linked_account_status(entity_kind, entity.user_id, account_status, now=now)

        return summarize(entity_kind, entity, account_status)

    def _notify(self, entity_kind: EntityKind, entity_id: str, status: str, reason: str | None) -> Future | None:
        if self._dispatcher is None:
            return None
        try:
            return self._dispatcher.dispatch_async(entity_kind, entity_id, _NOTIFY_ACTION[status], reason)
        except Exception:
            # Executor shut down or saturated: the status write already committed.
            logger.exception("could not schedule approval email kind=%s id=%s", entity_kind.value, entity_id)
            return None

    @contextmanager
    def _transaction(self, op: str, entity_kind: EntityKind) -> Iterator[ApprovalStore]:
        try:
            with session_scope(self._session_factory) as db:
                yield ApprovalStore(db)
        except SQLAlchemyError as e:
            logger.exception("approval %s failed kind=%s", op, entity_kind.value)
            raise ApiError("INTERNAL_ERROR", "Internal server error", status=500) from e
