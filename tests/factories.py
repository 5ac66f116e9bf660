from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt

from jobgenie.db import session_scope
from jobgenie.models import Candidate, Company, Employer, User


def new_id() -> str:
    return str(uuid.uuid4())


def seed_candidate(
    session_factory,
    *,
    email: str = "nimal@example.com",
    first_name: str = "Nimal",
    last_name: str = "Perera",
    role: str = "candidate",
    approval_status: str = "pending",
    gender: str | None = "male",
    nic: str | None = None,
    completed_profile: bool = False,
    created_at: datetime | None = None,
) -> str:
    user_id = new_id()
    created = created_at or datetime(2026, 1, 1, tzinfo=timezone.utc)
    with session_scope(session_factory) as db:
        db.add(
            User(
                id=user_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                role=role,
                status="pending_verification",
                created_at=created,
                updated_at=created,
            )
        )
        db.add(
            Candidate(
                user_id=user_id,
                first_name=first_name,
                last_name=last_name,
                gender=gender,
                nic=nic,
                completed_profile=completed_profile,
                approval_status=approval_status,
                created_at=created,
                updated_at=created,
            )
        )
    return user_id


def seed_company(
    session_factory,
    *,
    name: str = "Acme Holdings",
    email: str | None = "info@acme.example",
    approval_status: str = "pending",
    industry: str | None = "IT",
    created_at: datetime | None = None,
    **fields,
) -> str:
    company_id = new_id()
    created = created_at or datetime(2026, 1, 1, tzinfo=timezone.utc)
    with session_scope(session_factory) as db:
        db.add(
            Company(
                id=company_id,
                name=name,
                email=email,
                industry=industry,
                approval_status=approval_status,
                created_at=created,
                updated_at=created,
                **fields,
            )
        )
    return company_id


def seed_employer(
    session_factory,
    company_id: str,
    *,
    email: str,
    first_name: str = "Kamal",
    is_primary_contact: bool = False,
    offset_minutes: int = 0,
) -> str:
    user_id = new_id()
    created = datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=offset_minutes)
    with session_scope(session_factory) as db:
        db.add(
            User(
                id=user_id,
                email=email,
                first_name=first_name,
                role="employer",
                status="active",
                created_at=created,
                updated_at=created,
            )
        )
        db.add(
            Employer(
                user_id=user_id,
                company_id=company_id,
                is_primary_contact=is_primary_contact,
                created_at=created,
            )
        )
    return user_id


class FakeMailer:
    """Stands in for the mail capability; records what would have been sent."""

    def __init__(self, *, fail: bool = False, fail_for: tuple[str, ...] = ()):
        self.fail = fail
        self.fail_for = set(fail_for)
        self.sent = []

    def __call__(self, message) -> bool:
        if self.fail or message.to in self.fail_for:
            raise ConnectionError("smtp unavailable")
        self.sent.append(message)
        return True


def issue_token(app, *, user_id: str, role: str) -> str:
    """Signs a bearer token the way the identity service does for a logged-in user."""
    cfg = app.config["CFG"]
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": f"{role}@example.com",
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=cfg.JWT_EXP_MINUTES)).timestamp()),
    }
    return jwt.encode(payload, cfg.JWT_SECRET, algorithm="HS256")
