from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from jobgenie.approvals.commands import EntityKind
from jobgenie.models import APPROVAL_APPROVED, APPROVAL_REJECTED, APPROVAL_STATUSES, Candidate, Company, User
from jobgenie.utils.errors import not_found


class ApprovalStore:
    """Reads and writes approval state inside the caller's session/transaction."""

    def __init__(self, db: Session):
        self.db = db

    def get_entity(self, entity_kind: EntityKind, entity_id: str) -> Candidate | Company:
        if entity_kind is EntityKind.CANDIDATE:
            entity = self.db.get(Candidate, entity_id)
        else:
            entity = self.db.get(Company, entity_id)
        if entity is None:
            raise not_found(f"{entity_kind.display_name} not found")
        return entity

    def find_linked_account(self, entity_kind: EntityKind, entity: Candidate | Company) -> User | None:
        if entity_kind is not EntityKind.CANDIDATE:
            return None
        return self.db.get(User, entity.user_id)

    def set_approval_status(
        self, entity_kind: EntityKind, entity_id: str, status: str, *, now: datetime
    ) -> Candidate | Company:
        if status not in APPROVAL_STATUSES:
            raise ValueError(f"unknown approval status: {status}")

        entity = self.get_entity(entity_kind, entity_id)
        entity.approval_status = status
        entity.updated_at = now

        if entity_kind is EntityKind.COMPANY:
            if status == APPROVAL_APPROVED:
                entity.verified_at = now
                entity.approval_notification_dismissed = False
            elif status == APPROVAL_REJECTED:
                entity.verified_at = None
                entity.approval_notification_dismissed = True

        self.db.flush()
        return entity

    def set_linked_account_status(
        self, entity_kind: EntityKind, account_id: str, status: str, *, now: datetime
    ) -> None:
        # Companies have no single linked account whose status follows approval.
        if entity_kind is not EntityKind.CANDIDATE:
            return

        account = self.db.get(User, account_id)
        if account is None:
            raise not_found("Candidate account not found")
        account.status = status
        account.updated_at = now
        self.db.flush()
