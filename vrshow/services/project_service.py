"""
Project and provider-bid service.

Projects carry the brief, the roles the production needs and the planning
start date. Providers answer a project with a multi-role proposal; every
role line becomes one ProviderBid. Bids accumulate: a second proposal from
the same provider adds rows, it does not replace the earlier ones.

Raises NotFoundError / ValidationError from vrshow.core.exceptions; the
blueprint maps them to HTTP.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from flask import current_app

from vrshow.core.exceptions import NotFoundError, ValidationError
from vrshow.core.quote_types import PROJECT_TYPES
from vrshow.models import db
from vrshow.models.project import Project, ProviderBid
from vrshow.services.bid_aggregator import group_bids
from vrshow.services.planning import DEFAULT_ROLE_ORDER
from vrshow.services.quote_composer import clamp_margin
from vrshow.utils.numbers import to_number

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "Nouveau Projet"
DEFAULT_PROJECT_TYPE = "UnityVR"

# Provider identity fields that must be non-blank on every proposal
REQUIRED_IDENTITY_FIELDS = ("first_name", "last_name", "company_name")

START_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y")


def _clean_str(value) -> str:
    return str(value or "").strip()


def _parse_project_type(value) -> str:
    project_type = _clean_str(value) or DEFAULT_PROJECT_TYPE
    if project_type not in PROJECT_TYPES:
        raise ValidationError(
            f"Invalid project_type '{project_type}'",
            details={"project_type": f"Must be one of: {', '.join(PROJECT_TYPES)}"},
        )
    return project_type


def _parse_start_date(value) -> date:
    """Accept a date, an ISO date string or a French DD/MM/YYYY string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    for fmt in START_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValidationError(
        f"Invalid start_date '{value}'",
        details={"start_date": "Expected YYYY-MM-DD or DD/MM/YYYY"},
    )


def _parse_roles(value) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError("required_roles must be a list", details={"required_roles": "Expected a list"})
    roles = []
    for item in value:
        role = _clean_str(item)
        if role and role not in roles:
            roles.append(role)
    return roles


def _parse_team(value) -> list[dict]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(m, dict) for m in value):
        raise ValidationError(
            "invited_team must be a list of objects",
            details={"invited_team": "Expected [{email, code}]"},
        )
    return [{"email": _clean_str(m.get("email")), "code": _clean_str(m.get("code"))} for m in value]


# ═════════════════════════════════════════════════════════════════════════════
# Projects
# ═════════════════════════════════════════════════════════════════════════════


def create_project(data: dict) -> Project:
    """Create a project from dashboard input; every field is optional."""
    start_raw = data.get("start_date")
    project = Project(
        name=_clean_str(data.get("name")) or DEFAULT_PROJECT_NAME,
        brief=str(data.get("brief") or ""),
        project_type=_parse_project_type(data.get("project_type")),
        required_roles=_parse_roles(data.get("required_roles")),
        invited_team=_parse_team(data.get("invited_team")),
        global_margin=clamp_margin(
            data.get("global_margin", current_app.config.get("DEFAULT_GLOBAL_MARGIN", 40))
        ),
        start_date=_parse_start_date(start_raw) if start_raw else date.today(),
    )
    db.session.add(project)
    db.session.commit()
    logger.info("Project created id=%s name=%r type=%s", project.id, project.name, project.project_type)
    return project


def get_project(project_id: int) -> Project:
    project = db.session.get(Project, project_id)
    if project is None:
        raise NotFoundError(resource="Project", resource_id=project_id)
    return project


def projects_query():
    return Project.query.order_by(Project.created_at.desc(), Project.id.desc())


def list_projects() -> list[Project]:
    return projects_query().all()


def update_project_settings(project: Project, data: dict) -> Project:
    """Edit the planning settings: start date, project type and name.

    Brief, roles and team are fixed at creation; other keys are ignored.
    """
    changed = []
    if "start_date" in data:
        project.start_date = _parse_start_date(data["start_date"])
        changed.append("start_date")
    if "project_type" in data:
        project.project_type = _parse_project_type(data["project_type"])
        changed.append("project_type")
    if "name" in data:
        project.name = _clean_str(data["name"]) or DEFAULT_PROJECT_NAME
        changed.append("name")
    db.session.commit()
    logger.info("Project settings updated id=%s fields=%s", project.id, ",".join(changed) or "-")
    return project


def role_catalog(project: Project) -> list[str]:
    """Roles a provider may bid on: the project's, or the standard catalog."""
    return list(project.required_roles or []) or list(DEFAULT_ROLE_ORDER)


# ═════════════════════════════════════════════════════════════════════════════
# Provider proposals
# ═════════════════════════════════════════════════════════════════════════════


def validate_proposal(project: Project, data: dict) -> tuple[dict, list[dict]]:
    """Check a provider proposal and return (identity_fields, parsed_lines).

    Raises ValidationError with one entry per failing field.
    """
    errors: dict[str, str] = {}

    info = {field: _clean_str(data.get(field)) for field in REQUIRED_IDENTITY_FIELDS}
    for field, value in info.items():
        if not value:
            errors[field] = "Required"

    raw_lines = data.get("lines")
    if not isinstance(raw_lines, list) or not raw_lines:
        errors["lines"] = "At least one role line is required"
        raw_lines = []

    allowed = set(role_catalog(project))
    seen: set[str] = set()
    lines = []
    for idx, raw in enumerate(raw_lines):
        if not isinstance(raw, dict):
            errors[f"lines[{idx}]"] = "Expected an object"
            continue
        role = _clean_str(raw.get("role"))
        cost = to_number(raw.get("unit_cost", raw.get("cost")))
        days = to_number(raw.get("days"))
        if not role:
            errors[f"lines[{idx}].role"] = "Required"
        elif role not in allowed:
            errors[f"lines[{idx}].role"] = f"'{role}' is not requested on this project"
        elif role in seen:
            errors[f"lines[{idx}].role"] = f"'{role}' appears more than once"
        if cost <= 0:
            errors[f"lines[{idx}].unit_cost"] = "Must be greater than 0"
        if days <= 0:
            errors[f"lines[{idx}].days"] = "Must be greater than 0"
        seen.add(role)
        lines.append({"role": role, "unit_cost": cost, "days": days})

    if errors:
        raise ValidationError("Proposal is incomplete", details=errors)
    return info, lines


def submit_proposal(project: Project, identity: dict, data: dict) -> list[ProviderBid]:
    """Record one ProviderBid per proposal line.

    The provisional sale price is unit cost times PROVIDER_SALE_MARKUP; the
    final one is set by the global margin when the bid is selected.
    """
    info, lines = validate_proposal(project, data)
    markup = to_number(current_app.config.get("PROVIDER_SALE_MARKUP", 1.5), default=1.5)
    email = identity.get("email")

    bids = []
    for line in lines:
        bid = ProviderBid(
            project_id=project.id,
            role=line["role"],
            category="Production",
            product="Service",
            unit_cost=line["unit_cost"],
            sale_price=line["unit_cost"] * markup,
            days=line["days"],
            responder_email=email,
            **info,
        )
        db.session.add(bid)
        bids.append(bid)
    db.session.commit()
    logger.info(
        "Proposal submitted project=%s email=%s company=%r lines=%d",
        project.id, email, info["company_name"], len(bids),
    )
    return bids


def list_bids(project: Project) -> list[ProviderBid]:
    return project.bids.all()


def get_bid(project: Project, bid_id: int) -> ProviderBid:
    bid = db.session.get(ProviderBid, bid_id)
    if bid is None or bid.project_id != project.id:
        raise NotFoundError(resource="ProviderBid", resource_id=bid_id)
    return bid


def compare_bids(project: Project) -> list[dict]:
    """Bids grouped by role with best-price / most-expensive flags."""
    groups = group_bids([bid.to_quote_line() for bid in list_bids(project)])
    return [group.to_dict() for group in groups]
