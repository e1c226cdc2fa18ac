"""
Project archive: save, list, delete and restore project snapshots.

A snapshot copies the project's name, quote lines, computed stats, invited
team and brief at the moment of saving. Restoring writes them back into a
live project (which may be a different one) with fresh line ids.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date

from vrshow.core.exceptions import NotFoundError
from vrshow.core.quote_types import QuoteLine
from vrshow.models import db
from vrshow.models.archive import ProjectSnapshot
from vrshow.models.project import Project
from vrshow.services import quote_service
from vrshow.services.quote_composer import QuoteComposer
from vrshow.services.summary import compute_stats

logger = logging.getLogger(__name__)

SNAPSHOT_DATE_FORMAT = "%d/%m/%Y"


def archive_query():
    return ProjectSnapshot.query.order_by(
        ProjectSnapshot.created_at.desc(), ProjectSnapshot.id.desc(),
    )


def load_archive() -> list[ProjectSnapshot]:
    """All snapshots, most recently saved first."""
    return archive_query().all()


def get_snapshot(snapshot_id: int) -> ProjectSnapshot:
    snapshot = db.session.get(ProjectSnapshot, snapshot_id)
    if snapshot is None:
        raise NotFoundError(resource="ProjectSnapshot", resource_id=snapshot_id)
    return snapshot


def save_snapshot(project: Project) -> ProjectSnapshot:
    composer = quote_service.load_composer(project)
    snapshot = ProjectSnapshot(
        name=project.name,
        saved_on=date.today().strftime(SNAPSHOT_DATE_FORMAT),
        data=[line.to_dict() for line in composer],
        stats=compute_stats(composer.lines).to_dict(),
        invited_team=list(project.invited_team or []),
        brief=project.brief or "",
        global_margin=composer.margin,
        source_project_id=project.id,
    )
    db.session.add(snapshot)
    db.session.commit()
    logger.info("Snapshot saved id=%s project=%s lines=%d", snapshot.id, project.id, len(composer))
    return snapshot


def delete_snapshot(snapshot_id: int) -> None:
    snapshot = get_snapshot(snapshot_id)
    db.session.delete(snapshot)
    db.session.commit()
    logger.info("Snapshot deleted id=%s", snapshot_id)


def restore_snapshot(snapshot_id: int, project: Project) -> Project:
    """Load a snapshot's name, quote, brief and team into ``project``.

    The project's current quote is replaced. Restored lines get new ids so
    the same snapshot can be restored into several projects.
    """
    snapshot = get_snapshot(snapshot_id)
    lines = [
        QuoteLine.from_dict({**raw, "id": uuid.uuid4().hex})
        for raw in (snapshot.data or [])
    ]
    margin = snapshot.global_margin if snapshot.global_margin is not None else project.global_margin

    project.name = snapshot.name
    project.brief = snapshot.brief or ""
    project.invited_team = list(snapshot.invited_team or [])
    quote_service.store_composer(project, QuoteComposer(lines=lines, margin=margin))
    logger.info(
        "Snapshot restored id=%s project=%s lines=%d", snapshot_id, project.id, len(lines),
    )
    return project
