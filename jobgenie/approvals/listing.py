from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import func, or_, select

from jobgenie.models import APPROVAL_PENDING, APPROVAL_STATUSES, ROLE_CANDIDATE, Candidate, Company, User
from jobgenie.utils.datetime import to_iso_utc
from jobgenie.utils.validators import parse_choice, parse_positive_int, raise_if_issues

MAX_PAGE_SIZE = 100

CANDIDATE_SORT_COLUMNS = {
    "created_at": Candidate.created_at,
    "updated_at": Candidate.updated_at,
    "first_name": Candidate.first_name,
    "last_name": Candidate.last_name,
    "profile_completion_percentage": Candidate.profile_completion_percentage,
}

COMPANY_SORT_COLUMNS = {
    "created_at": Company.created_at,
    "updated_at": Company.updated_at,
    "name": Company.name,
    "industry": Company.industry,
}


@dataclass(frozen=True)
class ListQuery:
    page: int
    limit: int
    approval_status: str
    search: str | None
    sort_by: str
    sort_order: str
    filters: dict[str, str]

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _filter_value(args: Mapping[str, Any], name: str) -> str | None:
    value = str(args.get(name) or "").strip()
    if not value or value == "all":
        return None
    return value


def parse_list_query(args: Mapping[str, Any], *, sort_columns: Mapping[str, Any], filter_names: tuple[str, ...]) -> ListQuery:
    issues: list[dict[str, Any]] = []
    page = parse_positive_int(args, "page", 1, issues=issues)
    limit = parse_positive_int(args, "limit", 10, maximum=MAX_PAGE_SIZE, issues=issues)
    approval_status = parse_choice(args, "approvalStatus", APPROVAL_STATUSES, APPROVAL_PENDING, issues=issues)
    sort_by = parse_choice(args, "sortBy", sort_columns.keys(), "created_at", issues=issues)
    sort_order = parse_choice(args, "sortOrder", ("asc", "desc"), "desc", issues=issues)
    raise_if_issues(issues, "Invalid query parameters")

    filters = {}
    for name in filter_names:
        value = _filter_value(args, name)
        if value is not None:
            filters[name] = value

    return ListQuery(
        page=page,
        limit=limit,
        approval_status=approval_status or APPROVAL_PENDING,
        search=str(args.get("search") or "").strip() or None,
        sort_by=sort_by or "created_at",
        sort_order=sort_order or "desc",
        filters=filters,
    )


def _ilike(column, term: str):
    return func.lower(column).contains(term.lower(), autoescape=True)


def list_candidates(db, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
    stmt = (
        select(Candidate, User)
        .join(User, User.id == Candidate.user_id)
        .where(Candidate.approval_status == query.approval_status, User.role == ROLE_CANDIDATE)
    )
    if query.search:
        stmt = stmt.where(
            or_(
                _ilike(Candidate.first_name, query.search),
                _ilike(Candidate.last_name, query.search),
                _ilike(User.email, query.search),
                _ilike(Candidate.nic, query.search),
            )
        )
    if "gender" in query.filters:
        stmt = stmt.where(Candidate.gender == query.filters["gender"])
    completion = query.filters.get("profileCompletion")
    if completion == "complete":
        stmt = stmt.where(Candidate.completed_profile.is_(True))
    elif completion == "incomplete":
        stmt = stmt.where(Candidate.completed_profile.is_(False))

    total = int(db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one())

    column = CANDIDATE_SORT_COLUMNS[query.sort_by]
    stmt = stmt.order_by(column.asc() if query.sort_order == "asc" else column.desc())
    rows = db.execute(stmt.offset(query.offset).limit(query.limit)).all()

    items = [
        {
            "user_id": cand.user_id,
            "first_name": cand.first_name,
            "last_name": cand.last_name,
            "email": user.email,
            "nic": cand.nic,
            "phone1": cand.phone1,
            "gender": cand.gender,
            "approval_status": cand.approval_status,
            "account_status": user.status,
            "profile_completion_percentage": cand.profile_completion_percentage,
            "completedProfile": bool(cand.completed_profile),
            "created_at": to_iso_utc(cand.created_at),
            "updated_at": to_iso_utc(cand.updated_at),
        }
        for cand, user in rows
    ]
    return items, total


def list_companies(db, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
    stmt = select(Company).where(Company.approval_status == query.approval_status)
    if query.search:
        stmt = stmt.where(
            or_(
                _ilike(Company.name, query.search),
                _ilike(Company.email, query.search),
                _ilike(Company.business_registration_no, query.search),
                _ilike(Company.contact, query.search),
            )
        )
    if "industry" in query.filters:
        stmt = stmt.where(Company.industry == query.filters["industry"])
    if "companySize" in query.filters:
        stmt = stmt.where(Company.company_size == query.filters["companySize"])
    if "companyType" in query.filters:
        stmt = stmt.where(Company.company_type == query.filters["companyType"])

    total = int(db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one())

    column = COMPANY_SORT_COLUMNS[query.sort_by]
    stmt = stmt.order_by(column.asc() if query.sort_order == "asc" else column.desc())
    companies = db.execute(stmt.offset(query.offset).limit(query.limit)).scalars().all()

    items = [
        {
            "id": c.id,
            "name": c.name,
            "email": c.email,
            "contact": c.contact,
            "industry": c.industry,
            "company_size": c.company_size,
            "company_type": c.company_type,
            "business_registration_no": c.business_registration_no,
            "approval_status": c.approval_status,
            "verified_at": to_iso_utc(c.verified_at),
            "created_at": to_iso_utc(c.created_at),
            "updated_at": to_iso_utc(c.updated_at),
        }
        for c in companies
    ]
    return items, total
