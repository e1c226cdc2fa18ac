"""
VR SHOW Quoting Service
Project domain models.

Models:
    - Project:          one production being quoted (roles, margin, start date)
    - ProviderBid:      one role line of a provider proposal
    - QuoteLineRecord:  one line of the project's final quote

Architecture:
    Project ──1:N──▶ ProviderBid
    Project ──1:N──▶ QuoteLineRecord   (ordered by ``position``)

``position`` is the list index of a quote line and is always contiguous.
``order_index`` is the line's own order attribute: it may be NULL and may
have gaps after a removal. Both are written by quote_service only.
"""

from datetime import date, datetime, timezone

from vrshow.core.quote_types import QuoteLine
from vrshow.models import db


def _utcnow():
    return datetime.now(timezone.utc)


# ═════════════════════════════════════════════════════════════════════════════
# 1. Project
# ═════════════════════════════════════════════════════════════════════════════


class Project(db.Model):
    """A VR production being quoted and scheduled."""

    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, default="Nouveau Projet")
    brief = db.Column(db.Text, default="")
    project_type = db.Column(
        db.String(20), default="UnityVR",
        comment="UnityVR | WebGL | Video360 | Hybrid",
    )
    required_roles = db.Column(db.JSON, default=list)
    invited_team = db.Column(
        db.JSON, default=list,
        comment="[{email, code}] as supplied by the invitation collaborator",
    )
    global_margin = db.Column(db.Float, nullable=False, default=40.0)
    start_date = db.Column(db.Date, nullable=False, default=date.today)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        db.CheckConstraint(
            "project_type IN ('UnityVR','WebGL','Video360','Hybrid')",
            name="ck_project_type",
        ),
    )

    # ── Relationships ────────────────────────────────────────────────────
    bids = db.relationship(
        "ProviderBid", backref="project", lazy="dynamic",
        cascade="all, delete-orphan", order_by="ProviderBid.id",
    )
    quote_lines = db.relationship(
        "QuoteLineRecord", backref="project", lazy="dynamic",
        cascade="all, delete-orphan", order_by="QuoteLineRecord.position",
    )

    def to_dict(self, include_team=True):
        result = {
            "id": self.id,
            "name": self.name,
            "brief": self.brief,
            "project_type": self.project_type,
            "required_roles": list(self.required_roles or []),
            "global_margin": self.global_margin,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "bid_count": self.bids.count(),
            "quote_line_count": self.quote_lines.count(),
        }
        if include_team:
            result["invited_team"] = list(self.invited_team or [])
        return result

    def __repr__(self):
        return f"<Project {self.id}: {self.name}>"


# ═════════════════════════════════════════════════════════════════════════════
# 2. ProviderBid
# ═════════════════════════════════════════════════════════════════════════════


class ProviderBid(db.Model):
    """One role line of a proposal submitted by an external provider."""

    __tablename__ = "provider_bids"

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.Integer, db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    role = db.Column(db.String(200), nullable=False, index=True)
    category = db.Column(db.String(50), default="Production")
    product = db.Column(db.String(50), default="Service")
    unit_cost = db.Column(db.Float, nullable=False, default=0.0)
    sale_price = db.Column(db.Float, nullable=False, default=0.0)
    days = db.Column(db.Float, nullable=False, default=0.0)

    first_name = db.Column(db.String(100), default="")
    last_name = db.Column(db.String(100), default="")
    company_name = db.Column(db.String(200), default="")
    responder_email = db.Column(db.String(200), nullable=True)
    submitted_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_quote_line(self) -> QuoteLine:
        return QuoteLine(
            id=str(self.id),
            role=self.role,
            unit_cost=self.unit_cost,
            sale_price=self.sale_price,
            days=self.days,
            category=self.category,
            product=self.product,
            first_name=self.first_name,
            last_name=self.last_name,
            company_name=self.company_name,
            responder_email=self.responder_email,
            last_provider_update=self.submitted_at.isoformat() if self.submitted_at else None,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "role": self.role,
            "category": self.category,
            "product": self.product,
            "unit_cost": self.unit_cost,
            "sale_price": self.sale_price,
            "days": self.days,
            "total": self.unit_cost * self.days,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "company_name": self.company_name,
            "responder_email": self.responder_email,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
        }

    def __repr__(self):
        return f"<ProviderBid {self.id}: {self.role} {self.unit_cost}x{self.days}>"


# ═════════════════════════════════════════════════════════════════════════════
# 3. QuoteLineRecord
# ═════════════════════════════════════════════════════════════════════════════


class QuoteLineRecord(db.Model):
    """Persisted line of a project's final quote."""

    __tablename__ = "quote_lines"

    id = db.Column(db.String(40), primary_key=True)
    project_id = db.Column(
        db.Integer, db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    position = db.Column(db.Integer, nullable=False, default=0, comment="List index in the quote")
    order_index = db.Column(db.Integer, nullable=True, comment="Line order attribute (may have gaps)")

    role = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(50), default="Production")
    product = db.Column(db.String(50), default="Service")
    unit_cost = db.Column(db.Float, nullable=False, default=0.0)
    sale_price = db.Column(db.Float, nullable=False, default=0.0)
    days = db.Column(db.Float, nullable=False, default=0.0)

    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    company_name = db.Column(db.String(200), nullable=True)
    responder_email = db.Column(db.String(200), nullable=True)
    last_provider_update = db.Column(db.String(40), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("project_id", "role", name="uq_quote_line_project_role"),
    )

    @classmethod
    def from_quote_line(cls, project_id: int, position: int, line: QuoteLine) -> "QuoteLineRecord":
        return cls(
            id=line.id,
            project_id=project_id,
            position=position,
            order_index=line.order,
            role=line.role,
            category=line.category,
            product=line.product,
            unit_cost=line.unit_cost,
            sale_price=line.sale_price,
            days=line.days,
            first_name=line.first_name,
            last_name=line.last_name,
            company_name=line.company_name,
            responder_email=line.responder_email,
            last_provider_update=line.last_provider_update,
        )

    def apply_quote_line(self, position: int, line: QuoteLine) -> None:
        """Copy the mutable parts of ``line`` onto this row."""
        self.position = position
        self.order_index = line.order
        self.unit_cost = line.unit_cost
        self.sale_price = line.sale_price
        self.days = line.days

    def to_quote_line(self) -> QuoteLine:
        return QuoteLine(
            id=self.id,
            role=self.role,
            unit_cost=self.unit_cost,
            sale_price=self.sale_price,
            days=self.days,
            order=self.order_index,
            category=self.category,
            product=self.product,
            first_name=self.first_name,
            last_name=self.last_name,
            company_name=self.company_name,
            responder_email=self.responder_email,
            last_provider_update=self.last_provider_update,
        )

    def __repr__(self):
        return f"<QuoteLineRecord {self.id}: {self.role} #{self.position}>"
