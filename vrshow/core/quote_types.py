"""
VR SHOW Quoting Service
Value types shared by the quote-to-schedule pipeline.

Types:
    - QuoteLine:     a provider bid, or a line of the final quote (same shape)
    - SummaryStats:  aggregate financial figures derived from a quote
    - PlanningTask:  one bar of the sequential production timeline

These are plain dataclasses with no database or Flask dependency so the
pipeline services can run inside or outside a request context.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

# ── Phases ───────────────────────────────────────────────────────────────────

PHASE_FRAMING = "Cadrage"
PHASE_PREPRODUCTION = "Préproduction"
PHASE_PRODUCTION = "Production"
PHASE_STABILIZATION = "Stabilisation"
PHASE_DELIVERY = "Livraison"  # reserved, never auto-assigned

PLANNING_PHASES = (
    PHASE_FRAMING,
    PHASE_PREPRODUCTION,
    PHASE_PRODUCTION,
    PHASE_STABILIZATION,
    PHASE_DELIVERY,
)

PROJECT_TYPES = ("UnityVR", "WebGL", "Video360", "Hybrid")


@dataclass
class QuoteLine:
    """A priced role line. Used both for raw provider bids and quote lines."""

    id: str
    role: str
    unit_cost: float = 0.0
    sale_price: float = 0.0
    days: float = 0.0
    order: int | None = None
    category: str = "Production"
    product: str = "Service"
    first_name: str | None = None
    last_name: str | None = None
    company_name: str | None = None
    responder_email: str | None = None
    last_provider_update: str | None = None

    @property
    def total_cost(self) -> float:
        return self.unit_cost * self.days

    @property
    def total_sale(self) -> float:
        return self.sale_price * self.days

    @property
    def line_margin(self) -> float:
        """Margin of this line as a percentage of its sale total (0 when unsold)."""
        sale = self.total_sale
        if sale <= 0:
            return 0.0
        return (sale - self.total_cost) / sale * 100

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "QuoteLine":
        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class SummaryStats:
    total_revenue: float = 0.0
    total_cost: float = 0.0
    total_profit: float = 0.0
    average_margin: float = 0.0
    total_days: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PlanningTask:
    id: str
    name: str
    role: str
    phase: str
    start_day: float
    duration: float
    dependencies: list[str] = field(default_factory=list)
    deliverable: str = "Livrable étape"
    color: str | None = None

    @property
    def end_day(self) -> float:
        return self.start_day + self.duration

    def to_dict(self) -> dict:
        data = asdict(self)
        data["end_day"] = self.end_day
        return data
