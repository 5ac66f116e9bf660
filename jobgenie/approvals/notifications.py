from __future__ import annotations

import html
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

from flask import Flask
from flask_mail import Mail, Message
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from jobgenie.approvals.commands import ACTION_APPROVE, ACTION_REJECT, EntityKind
from jobgenie.models import Candidate, Company, Employer, User

logger = logging.getLogger("jobgenie.notifications")


@dataclass(frozen=True)
class Recipient:
    email: str
    first_name: str | None
    entity_name: str | None = None


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class Branding:
    brand_name: str = "Job Genie"
    site_url: str = "http://localhost:3000"


SendEmail = Callable[[EmailMessage], bool]


def _layout(branding: Branding, *, colour: str, icon: str, heading: str, paragraphs: list[str], button: tuple[str, str], to: str) -> str:
    body = "".join(
        f'<p style="color: #666; line-height: 1.6; margin: 20px 0; text-align: center;">{p}</p>' for p in paragraphs
    )
    label, href = button
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: {colour}; padding: 30px; border-radius: 10px; text-align: center;">
    <h1 style="color: white; margin: 0; font-size: 28px;">{html.escape(branding.brand_name)}</h1>
  </div>
  <div style="background: #f8f9fa; padding: 30px; border-radius: 0 0 10px 10px;">
    <div style="text-align: center; font-size: 24px;">{icon}</div>
    <h2 style="color: #333; margin: 0 0 20px 0; text-align: center;">{html.escape(heading)}</h2>
    {body}
    <div style="text-align: center; margin: 30px 0;">
      <a href="{html.escape(href)}" style="background: #667eea; color: white; padding: 15px 30px; text-decoration: none; border-radius: 25px; font-weight: bold;">{html.escape(label)}</a>
    </div>
    <hr style="border: none; border-top: 1px solid #e9ecef; margin: 30px 0;">
    <p style="color: #999; font-size: 12px; text-align: center; margin: 0;">This email was sent to {html.escape(to)}</p>
  </div>
</div>
"""


def build_candidate_approval_email(recipient: Recipient, branding: Branding, reason: str | None = None) -> EmailMessage:
    name = recipient.first_name or "candidate"
    link = f"{branding.site_url}/candidate/login"
    lines = [
        f"Congratulations {name}! Your profile has been approved by our team.",
        f"You can now find jobs and grow your career on {branding.brand_name}.",
    ]
    return EmailMessage(
        to=recipient.email,
        subject=f"Profile Approved - Welcome to {branding.brand_name}!",
        html=_layout(
            branding,
            colour="#28a745",
            icon="&#10003;",
            heading="Profile Approved!",
            paragraphs=[html.escape(x) for x in lines],
            button=("Browse Jobs", link),
            to=recipient.email,
        ),
        text="\n\n".join([f"{branding.brand_name} - Profile Approved!", *lines, f"Browse Jobs: {link}"]),
    )


def build_candidate_rejection_email(recipient: Recipient, branding: Branding, reason: str | None = None) -> EmailMessage:
    name = recipient.first_name or "candidate"
    link = f"{branding.site_url}/candidate/login"
    lines = [
        f"Dear {name}, we regret to inform you that your profile has been rejected.",
        "This may be due to incomplete information or other requirements that need to be met. "
        "Please review your profile and make necessary updates.",
    ]
    if reason:
        lines.append(f"Reason: {reason}")
    return EmailMessage(
        to=recipient.email,
        subject=f"Profile Status Update - {branding.brand_name}",
        html=_layout(
            branding,
            colour="#dc3545",
            icon="!",
            heading="Profile Status Update",
            paragraphs=[html.escape(x) for x in lines],
            button=("Update Profile", link),
            to=recipient.email,
        ),
        text="\n\n".join([f"{branding.brand_name} - Profile Status Update", *lines, f"Update Profile: {link}"]),
    )


def build_company_approval_email(recipient: Recipient, branding: Branding, reason: str | None = None) -> EmailMessage:
    name = recipient.first_name or "there"
    company = recipient.entity_name or "your company"
    link = f"{branding.site_url}/employer/login"
    lines = [
        f"Hi {name}, {company} has been verified by our team.",
        "You can now post jobs and search for candidates.",
    ]
    return EmailMessage(
        to=recipient.email,
        subject=f"Company Verified - {branding.brand_name}",
        html=_layout(
            branding,
            colour="#28a745",
            icon="&#10003;",
            heading="Company Verified!",
            paragraphs=[html.escape(x) for x in lines],
            button=("Go to Dashboard", link),
            to=recipient.email,
        ),
        text="\n\n".join([f"{branding.brand_name} - Company Verified!", *lines, f"Go to Dashboard: {link}"]),
    )


def build_company_rejection_email(recipient: Recipient, branding: Branding, reason: str | None = None) -> EmailMessage:
    name = recipient.first_name or "there"
    company = recipient.entity_name or "your company"
    link = f"{branding.site_url}/employer/login"
    lines = [f"Hi {name}, we could not verify {company} at this time."]
    if reason:
        lines.append(f"Reason: {reason}")
    lines.append("Please review your company profile and registration documents, then contact our support team.")
    return EmailMessage(
        to=recipient.email,
        subject=f"Company Verification Update - {branding.brand_name}",
        html=_layout(
            branding,
            colour="#dc3545",
            icon="!",
            heading="Company Verification Update",
            paragraphs=[html.escape(x) for x in lines],
            button=("Review Company Profile", link),
            to=recipient.email,
        ),
        text="\n\n".join([f"{branding.brand_name} - Company Verification Update", *lines, f"Review: {link}"]),
    )


MESSAGE_BUILDERS: dict[tuple[EntityKind, str], Callable[..., EmailMessage]] = {
    (EntityKind.CANDIDATE, ACTION_APPROVE): build_candidate_approval_email,
    (EntityKind.CANDIDATE, ACTION_REJECT): build_candidate_rejection_email,
    (EntityKind.COMPANY, ACTION_APPROVE): build_company_approval_email,
    (EntityKind.COMPANY, ACTION_REJECT): build_company_rejection_email,
}


def resolve_recipient(db, entity_kind: EntityKind, entity_id: str) -> Recipient | None:
    if entity_kind is EntityKind.CANDIDATE:
        candidate = db.get(Candidate, entity_id)
        user = db.get(User, entity_id) if candidate is not None else None
        if user is None or not user.email:
            return None
        return Recipient(email=user.email, first_name=candidate.first_name or user.first_name)

    company = db.get(Company, entity_id)
    if company is None:
        return None

    rows = db.execute(
        select(Employer, User)
        .join(User, User.id == Employer.user_id)
        .where(Employer.company_id == company.id)
        .order_by(Employer.created_at.asc())
    ).all()
    contact = next((row for row in rows if row[0].is_primary_contact), rows[0] if rows else None)
    if contact is not None and contact[1].email:
        return Recipient(email=contact[1].email, first_name=contact[1].first_name, entity_name=company.name)
    if company.email:
        return Recipient(email=company.email, first_name=None, entity_name=company.name)
    return None


class NotificationDispatcher:
    """Best-effort approval emails. ``dispatch`` never raises."""

    def __init__(
        self,
        session_factory: sessionmaker,
        send_email: SendEmail,
        *,
        branding: Branding | None = None,
        executor: ThreadPoolExecutor | None = None,
        max_workers: int = 4,
    ):
        self._session_factory = session_factory
        self._send_email = send_email
        self._branding = branding or Branding()
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")

    def dispatch(self, entity_kind: EntityKind, entity_id: str, action: str, reason: str | None = None) -> bool:
        try:
            builder = MESSAGE_BUILDERS.get((entity_kind, action))
            if builder is None:
                logger.warning("no email template kind=%s action=%s", entity_kind.value, action)
                return False

            with self._session_factory() as db:
                recipient = resolve_recipient(db, entity_kind, entity_id)
            if recipient is None:
                logger.warning("no recipient kind=%s id=%s action=%s", entity_kind.value, entity_id, action)
                return False

            message = builder(recipient, self._branding, reason=reason)
            sent = bool(self._send_email(message))
            logger.info("approval email kind=%s id=%s action=%s sent=%s", entity_kind.value, entity_id, action, sent)
            return sent
        except Exception:
            logger.exception("approval email failed kind=%s id=%s action=%s", entity_kind.value, entity_id, action)
            return False

    def dispatch_async(
        self, entity_kind: EntityKind, entity_id: str, action: str, reason: str | None = None
    ) -> Future:
        future = self._executor.submit(self.dispatch, entity_kind, entity_id, action, reason)
        future.add_done_callback(_log_escaped_error)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def _log_escaped_error(future: Future) -> None:
    if future.cancelled():
        logger.warning("approval email task cancelled")
        return
    exc = future.exception()
    if exc is not None:
        logger.error("approval email task crashed", exc_info=exc)


class FlaskMailSender:
    """Adapts Flask-Mail to the ``send_email`` capability; usable from worker threads."""

    def __init__(self, app: Flask, mail: Mail):
        self._app = app
        self._mail = mail

    def __call__(self, message: EmailMessage) -> bool:
        with self._app.app_context():
            self._mail.send(
                Message(
                    subject=message.subject,
                    recipients=[message.to],
                    body=message.text,
                    html=message.html,
                )
            )
        return True
