"""
Quote controller: one QuoteComposer per request, persisted per project.

Every mutating operation follows the same cycle:

    composer = load_composer(project)    # rows → QuoteComposer
    composer.<operation>(...)            # pure in-memory change
    store_composer(project, composer)    # QuoteComposer → rows, one commit

Views (quote table, planning) are recomputed from the stored lines on
every call; nothing derived is persisted.
"""

from __future__ import annotations

import logging
import re

from flask import current_app

from vrshow.core.quote_types import PLANNING_PHASES, QuoteLine
from vrshow.models import db
from vrshow.models.project import Project, QuoteLineRecord
from vrshow.services import project_service
from vrshow.services.export_service import (
    DEFAULT_DATE_FORMAT,
    export_planning_csv,
    export_quote_xlsx,
)
from vrshow.services.planning import generate_planning, line_id_from_task_id, planning_summary
from vrshow.services.quote_composer import QuoteComposer
from vrshow.services.summary import compute_stats

logger = logging.getLogger(__name__)

QUOTE_EXPORT_PREFIX = "Devis_VR_SHOW_"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w\-]+", re.ASCII)


# ═════════════════════════════════════════════════════════════════════════════
# Persistence
# ═════════════════════════════════════════════════════════════════════════════


def load_composer(project: Project) -> QuoteComposer:
    lines = [record.to_quote_line() for record in project.quote_lines]
    return QuoteComposer(lines=lines, margin=project.global_margin)


def store_composer(project: Project, composer: QuoteComposer) -> None:
    """Write the composer's lines and margin back to the project.

    Removed rows are flushed before new ones are inserted so a role that
    was re-selected never collides with its previous line.
    """
    existing = {record.id: record for record in project.quote_lines}
    kept_ids = {line.id for line in composer.lines}

    for record_id, record in existing.items():
        if record_id not in kept_ids:
            db.session.delete(record)
    db.session.flush()

    for position, line in enumerate(composer.lines):
        record = existing.get(line.id)
        if record is None:
            db.session.add(QuoteLineRecord.from_quote_line(project.id, position, line))
        else:
            record.apply_quote_line(position, line)

    project.global_margin = composer.margin
    db.session.commit()


# ═════════════════════════════════════════════════════════════════════════════
# Operations
# ═════════════════════════════════════════════════════════════════════════════


def select_bid(project: Project, bid_id: int) -> QuoteLine:
    """Put a provider bid into the quote, replacing any line for its role."""
    bid = project_service.get_bid(project, bid_id)
    composer = load_composer(project)
    line = composer.select_bid(bid.to_quote_line())
    store_composer(project, composer)
    logger.info(
        "QuoteLine selected project=%s role=%s bid=%s sale_price=%s",
        project.id, line.role, bid.id, line.sale_price,
    )
    return line


def apply_margin(project: Project, margin) -> float:
    composer = load_composer(project)
    applied = composer.apply_global_margin(margin)
    store_composer(project, composer)
    return applied


def move_line(project: Project, line_id: str, direction: str) -> bool:
    """Move a line one step up or down. Accepts a line id or a task id."""
    composer = load_composer(project)
    moved = composer.move_line(line_id_from_task_id(line_id), direction)
    if moved:
        store_composer(project, composer)
        logger.info("QuoteLine moved project=%s line=%s direction=%s", project.id, line_id, direction)
    return moved


def update_line(project: Project, line_id: str, patch: dict) -> QuoteLine | None:
    composer = load_composer(project)
    line = composer.update_line(line_id_from_task_id(line_id), patch)
    if line is not None:
        store_composer(project, composer)
        logger.info("QuoteLine updated project=%s line=%s fields=%s", project.id, line.id, sorted(patch))
    return line


def remove_line(project: Project, line_id: str) -> bool:
    composer = load_composer(project)
    removed = composer.remove_line(line_id_from_task_id(line_id))
    if removed:
        store_composer(project, composer)
        logger.info("QuoteLine removed project=%s line=%s", project.id, line_id)
    return removed


def reset_quote(project: Project) -> None:
    composer = load_composer(project)
    count = len(composer)
    composer.clear()
    store_composer(project, composer)
    logger.info("Quote cleared project=%s lines=%d", project.id, count)


# ═════════════════════════════════════════════════════════════════════════════
# Views
# ═════════════════════════════════════════════════════════════════════════════


def _line_row(line: QuoteLine) -> dict:
    return {
        **line.to_dict(),
        "total_cost": line.total_cost,
        "total_sale": line.total_sale,
        "line_margin": line.line_margin,
    }


def quote_view(project: Project) -> dict:
    """The priced quote table with its financial summary."""
    composer = load_composer(project)
    return {
        "project_id": project.id,
        "global_margin": composer.margin,
        "lines": [_line_row(line) for line in composer],
        "stats": compute_stats(composer.lines).to_dict(),
    }


def planning_view(project: Project) -> dict:
    composer = load_composer(project)
    tasks = generate_planning(composer.lines)
    return {
        "project_id": project.id,
        "project_type": project.project_type,
        "tasks": [task.to_dict() for task in tasks],
        "phases": list(PLANNING_PHASES),
        **planning_summary(tasks, project.start_date),
    }


def export_planning(project: Project) -> str:
    composer = load_composer(project)
    tasks = generate_planning(composer.lines)
    summary = planning_summary(tasks, project.start_date)
    date_format = current_app.config.get("EXPORT_DATE_FORMAT", DEFAULT_DATE_FORMAT)
    return export_planning_csv(tasks, project.start_date, summary["total_days"], date_format)


def quote_export_filename(project: Project) -> str:
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", project.name or "").strip("_") or "Projet"
    return f"{QUOTE_EXPORT_PREFIX}{safe_name}.xlsx"


def export_quote(project: Project) -> bytes:
    composer = load_composer(project)
    return export_quote_xlsx(
        project.name, composer.lines, compute_stats(composer.lines), composer.margin,
    )
