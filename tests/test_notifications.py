from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from factories import FakeMailer, new_id, seed_candidate, seed_company, seed_employer
from jobgenie.approvals.commands import EntityKind
from jobgenie.approvals.notifications import (
    Branding,
    NotificationDispatcher,
    Recipient,
    build_company_approval_email,
    resolve_recipient,
)


def test_recipient_prefers_primary_contact(session_factory):
    company_id = seed_company(session_factory)
    seed_employer(session_factory, company_id, email="early@acme.example")
    seed_employer(session_factory, company_id, email="primary@acme.example", is_primary_contact=True, offset_minutes=10)

    with session_factory() as db:
        recipient = resolve_recipient(db, EntityKind.COMPANY, company_id)
    assert recipient.email == "primary@acme.example"
    assert recipient.entity_name == "Acme Holdings"


def test_recipient_falls_back_to_earliest_employer(session_factory):
    company_id = seed_company(session_factory)
    seed_employer(session_factory, company_id, email="later@acme.example", offset_minutes=30)
    seed_employer(session_factory, company_id, email="earliest@acme.example", offset_minutes=1)

    with session_factory() as db:
        recipient = resolve_recipient(db, EntityKind.COMPANY, company_id)
    assert recipient.email == "earliest@acme.example"


def test_company_without_any_address_has_no_recipient(session_factory):
    company_id = seed_company(session_factory, email=None)
    with session_factory() as db:
        assert resolve_recipient(db, EntityKind.COMPANY, company_id) is None
        assert resolve_recipient(db, EntityKind.CANDIDATE, new_id()) is None


def test_dispatch_never_raises(session_factory):
    cid = seed_candidate(session_factory)
    dispatcher = NotificationDispatcher(session_factory, FakeMailer(fail=True), executor=ThreadPoolExecutor(1))

    assert dispatcher.dispatch(EntityKind.CANDIDATE, cid, "approve") is False
    assert dispatcher.dispatch(EntityKind.CANDIDATE, new_id(), "approve") is False
    assert dispatcher.dispatch(EntityKind.CANDIDATE, cid, "bulk-approve") is False
    dispatcher.shutdown()


def test_dispatch_async_delivers(session_factory):
    cid = seed_candidate(session_factory, email="kasun@example.com", first_name="Kasun")
    mailer = FakeMailer()
    dispatcher = NotificationDispatcher(
        session_factory,
        mailer,
        branding=Branding(brand_name="Job Genie", site_url="https://jobgenie.example"),
        executor=ThreadPoolExecutor(1),
    )

    future = dispatcher.dispatch_async(EntityKind.CANDIDATE, cid, "approve")
    assert future.result(timeout=5) is True
    dispatcher.shutdown()

    message = mailer.sent[0]
    assert message.to == "kasun@example.com"
    assert "Congratulations Kasun!" in message.text
    assert "https://jobgenie.example/candidate/login" in message.html


def test_templates_escape_names():
    message = build_company_approval_email(
        Recipient(email="x@example.com", first_name="<b>Ann</b>", entity_name="A & B"), Branding()
    )
    assert "&lt;b&gt;Ann&lt;/b&gt;" in message.html
    assert "A &amp; B" in message.html
    assert message.subject == "Company Verified - Job Genie"


def test_flask_mail_sender_delivers_through_flask_mail(app_client):
    from flask_mail import Mail

    from jobgenie.approvals.notifications import FlaskMailSender

    app = app_client.app
    cid = seed_candidate(app_client.session_factory, email="ruwan@example.com", first_name="Ruwan")
    mail = Mail(app)
    dispatcher = NotificationDispatcher(
        app_client.session_factory,
        FlaskMailSender(app, mail),
        branding=Branding(brand_name="Job Genie", site_url="https://jobgenie.example"),
        executor=ThreadPoolExecutor(1),
    )

    with mail.record_messages() as outbox:
        assert dispatcher.dispatch(EntityKind.CANDIDATE, cid, "reject", reason="Photo missing") is True
    dispatcher.shutdown()

    assert len(outbox) == 1
    message = outbox[0]
    assert message.subject == "Profile Status Update - Job Genie"
    assert message.recipients == ["ruwan@example.com"]
    assert "Dear Ruwan" in message.html
    assert "Reason: Photo missing" in message.body
    assert "https://jobgenie.example/candidate/login" in message.html
