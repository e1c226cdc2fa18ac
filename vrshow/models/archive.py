"""
VR SHOW Quoting Service
Project archive model.

A ProjectSnapshot is a frozen copy of a project's quote taken from the
dashboard's "save" action. Snapshots are independent of the live project:
editing or deleting the project never touches them.
"""

from datetime import datetime, timezone

from vrshow.models import db


class ProjectSnapshot(db.Model):
    """Archived copy of a project's name, quote lines, stats, team and brief."""

    __tablename__ = "project_snapshots"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    saved_on = db.Column(db.String(20), nullable=False, comment="Display date, DD/MM/YYYY")
    data = db.Column(db.JSON, default=list, comment="Quote lines as dicts, in quote order")
    stats = db.Column(db.JSON, default=dict)
    invited_team = db.Column(db.JSON, default=list)
    brief = db.Column(db.Text, default="")
    global_margin = db.Column(db.Float, nullable=True)
    source_project_id = db.Column(db.Integer, nullable=True, index=True)
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True,
    )

    def to_dict(self, include_data=True):
        result = {
            "id": self.id,
            "name": self.name,
            "date": self.saved_on,
            "stats": dict(self.stats or {}),
            "invited_team": list(self.invited_team or []),
            "brief": self.brief,
            "global_margin": self.global_margin,
            "source_project_id": self.source_project_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_data:
            result["data"] = list(self.data or [])
        return result

    def __repr__(self):
        return f"<ProjectSnapshot {self.id}: {self.name} ({self.saved_on})>"
