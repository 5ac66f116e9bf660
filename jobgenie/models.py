from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from jobgenie.db import Base


APPROVAL_PENDING = "pending"
APPROVAL_APPROVED = "approved"
APPROVAL_REJECTED = "rejected"
APPROVAL_STATUSES = (APPROVAL_PENDING, APPROVAL_APPROVED, APPROVAL_REJECTED)

ACCOUNT_ACTIVE = "active"
ACCOUNT_PENDING_VERIFICATION = "pending_verification"

ROLE_CANDIDATE = "candidate"
ROLE_EMPLOYER = "employer"
ROLE_MIS = "mis"


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String, nullable=False, unique=True, index=True)
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    role = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default=ACCOUNT_PENDING_VERIFICATION, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    candidate = relationship("Candidate", back_populates="user", uselist=False)
    employer = relationship("Employer", back_populates="user", uselist=False)


class Candidate(Base):
    __tablename__ = "candidates"

    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    gender = Column(String, nullable=True)
    nic = Column(String, nullable=True)
    phone1 = Column(String, nullable=True)
    completed_profile = Column(Boolean, nullable=False, default=False)
    profile_completion_percentage = Column(Integer, nullable=False, default=0)
    approval_status = Column(String, nullable=False, default=APPROVAL_PENDING, index=True)
    approval_notification_dismissed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    user = relationship("User", back_populates="candidate")


class Company(Base):
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    email = Column(String, nullable=True)
    contact = Column(String, nullable=True)
    industry = Column(String, nullable=True)
    company_size = Column(String, nullable=True)
    company_type = Column(String, nullable=True)
    business_registration_no = Column(String, nullable=True)
    approval_status = Column(String, nullable=False, default=APPROVAL_PENDING, index=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    approval_notification_dismissed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    employers = relationship("Employer", back_populates="company", order_by="Employer.created_at")


class Employer(Base):
    __tablename__ = "employers"

    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    is_primary_contact = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    user = relationship("User", back_populates="employer")
    company = relationship("Company", back_populates="employers")
