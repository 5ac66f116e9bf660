from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify

from jobgenie.db import get_session_factory, session_scope
from jobgenie.models import (
    APPROVAL_APPROVED,
    APPROVAL_PENDING,
    APPROVAL_REJECTED,
    ROLE_CANDIDATE,
    ROLE_EMPLOYER,
    Candidate,
    Company,
    Employer,
)
from jobgenie.utils.auth import get_current_user, require_roles
from jobgenie.utils.datetime import utc_now
from jobgenie.utils.errors import ApiError, not_found

logger = logging.getLogger("jobgenie.profile")

candidate_bp = Blueprint("candidate_profile", __name__)
employer_bp = Blueprint("employer_company", __name__)

COMPANY_REQUIRED_FIELDS = (
    ("name", "Company Name"),
    ("email", "Company Email"),
    ("contact", "Contact Number"),
    ("industry", "Industry"),
    ("company_size", "Company Size"),
    ("business_registration_no", "Business Registration Number"),
)


def _employer_company(db, user_id: str) -> Company:
    employer = db.get(Employer, user_id)
    company = db.get(Company, employer.company_id) if employer is not None else None
    if company is None:
        raise not_found("Company profile not found")
    return company


def _missing_fields(company: Company) -> list[str]:
    missing = []
    for attr, label in COMPANY_REQUIRED_FIELDS:
        value = getattr(company, attr)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(label)
    return missing


@candidate_bp.post("/dismiss-approval-notification")
@require_roles([ROLE_CANDIDATE])
def dismiss_candidate_notification():
    user = get_current_user()
    with session_scope(get_session_factory(current_app)) as db:
        candidate = db.get(Candidate, user["id"])
        if candidate is None:
            raise not_found("Candidate profile not found")
        candidate.approval_notification_dismissed = True
        candidate.updated_at = utc_now()

    return jsonify({"success": True, "message": "Approval notification dismissed"})


@employer_bp.get("/approval-check")
@require_roles([ROLE_EMPLOYER])
def approval_check():
    user = get_current_user()
    with session_scope(get_session_factory(current_app)) as db:
        company = _employer_company(db, user["id"])
        missing = _missing_fields(company)
        approval_status = company.approval_status or APPROVAL_PENDING

        if missing:
            message = f"Company profile incomplete. Missing: {', '.join(missing)}"
        elif approval_status == APPROVAL_PENDING:
            message = "Company profile complete but pending MIS approval"
        elif approval_status == APPROVAL_REJECTED:
            message = "Company profile complete but rejected by MIS"
        else:
            message = "Company profile complete and approved"

        payload = {
            "success": True,
            "isCompanyComplete": not missing,
            "approval_status": approval_status,
            "missingFields": missing,
            "companyData": {
                "name": company.name,
                "email": company.email,
                "contact": company.contact,
                "industry": company.industry,
                "company_size": company.company_size,
                "company_type": company.company_type,
                "business_registration_no": company.business_registration_no,
            },
            "message": message,
            "approval_notification_dismissed": bool(company.approval_notification_dismissed),
        }

    return jsonify(payload)


@employer_bp.post("/dismiss-approval-notification")
@require_roles([ROLE_EMPLOYER])
def dismiss_company_notification():
    user = get_current_user()
    with session_scope(get_session_factory(current_app)) as db:
        company = _employer_company(db, user["id"])
        if company.approval_status != APPROVAL_APPROVED:
            raise ApiError("FORBIDDEN", "Company is not approved", status=403)
        company.approval_notification_dismissed = True
        company.updated_at = utc_now()
        company_id = company.id

    logger.info("approval notification dismissed company=%s user=%s", company_id, user["id"])
    return jsonify({"success": True, "message": "Approval notification dismissed"})
