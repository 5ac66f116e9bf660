from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from jobgenie.approvals.commands import EntityKind, build_status_query, build_transition_command
from jobgenie.approvals.listing import (
    CANDIDATE_SORT_COLUMNS,
    COMPANY_SORT_COLUMNS,
    list_candidates,
    list_companies,
    parse_list_query,
)
from jobgenie.approvals.workflow import BulkOutcome
from jobgenie.db import get_session_factory, session_scope
from jobgenie.models import APPROVAL_APPROVED, ROLE_MIS
from jobgenie.utils.auth import require_roles

mis_bp = Blueprint("mis", __name__)

_SINGLE_MESSAGES = {
    (EntityKind.CANDIDATE, True): "Candidate profile approved successfully",
    (EntityKind.CANDIDATE, False): "Candidate profile rejected successfully",
    (EntityKind.COMPANY, True): "Company approved successfully",
    (EntityKind.COMPANY, False): "Company rejected successfully",
}


def _workflow():
    return current_app.extensions["approvals"]


def _transition(entity_kind: EntityKind):
    body = request.get_json(silent=True)
    command = build_transition_command(entity_kind, request.args.get("action"), body)
    result = _workflow().execute(command)

    if isinstance(result, BulkOutcome):
        verb = "approved" if result.approval_status == APPROVAL_APPROVED else "rejected"
        return jsonify(
            {
                "message": f"Successfully {verb} {result.count} {entity_kind.plural}",
                "count": result.count,
                entity_kind.value: result.first.to_dict(),
            }
        )

    return jsonify(
        {
            "message": _SINGLE_MESSAGES[(entity_kind, command.is_approval)],
            entity_kind.value: result.to_dict(),
        }
    )


def _status(entity_kind: EntityKind):
    command = build_status_query(entity_kind, request.args)
    summary = _workflow().execute(command)
    return jsonify(
        {
            "message": f"{entity_kind.display_name} status retrieved successfully",
            entity_kind.value: summary.to_dict(),
        }
    )


@mis_bp.route("/candidate-approval", methods=["POST", "PUT"])
@require_roles([ROLE_MIS])
def candidate_approval():
    return _transition(EntityKind.CANDIDATE)


@mis_bp.get("/candidate-approval")
@require_roles([ROLE_MIS])
def candidate_approval_status():
    return _status(EntityKind.CANDIDATE)


@mis_bp.post("/company-verification")
@require_roles([ROLE_MIS])
def company_verification():
    return _transition(EntityKind.COMPANY)


@mis_bp.get("/company-verification")
@require_roles([ROLE_MIS])
def company_verification_status():
    return _status(EntityKind.COMPANY)


@mis_bp.get("/pending-candidates")
@require_roles([ROLE_MIS])
def pending_candidates():
    query = parse_list_query(
        request.args, sort_columns=CANDIDATE_SORT_COLUMNS, filter_names=("gender", "profileCompletion")
    )
    with session_scope(get_session_factory(current_app)) as db:
        items, total = list_candidates(db, query)
    return jsonify(
        {
            "success": True,
            "candidates": items,
            "total": total,
            "page": query.page,
            "limit": query.limit,
            "message": f"Found {total} {query.approval_status} candidates",
        }
    )


@mis_bp.get("/pending-companies")
@require_roles([ROLE_MIS])
def pending_companies():
    query = parse_list_query(
        request.args,
        sort_columns=COMPANY_SORT_COLUMNS,
        filter_names=("industry", "companySize", "companyType"),
    )
    with session_scope(get_session_factory(current_app)) as db:
        items, total = list_companies(db, query)
    return jsonify(
        {
            "success": True,
            "companies": items,
            "total": total,
            "page": query.page,
            "limit": query.limit,
            "message": f"Found {total} {query.approval_status} companies",
        }
    )
