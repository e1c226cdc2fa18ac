"""
Production planning — sequential timeline derived from the ordered quote.

The quote order is authoritative: the generator never re-sorts. Each line
with days > 0 becomes one task placed right after the previous one, so the
tasks partition [0, total_days) with no gaps and no overlap. There is no
parallelism and no dependency modelling in this timeline.

Phase classification is substring matching on the (French) role name, first
match wins:
    Chef de projet / Scénariste / Directeur artistique  → Cadrage
    3D / Cadreur                                        → Préproduction
    QA                                                  → Stabilisation
    anything else                                       → Production
Livraison exists as a phase but is never assigned automatically.
"""

import logging
import math
from datetime import timedelta

from vrshow.core.quote_types import (
    PHASE_FRAMING,
    PHASE_PREPRODUCTION,
    PHASE_PRODUCTION,
    PHASE_STABILIZATION,
    PlanningTask,
)

logger = logging.getLogger(__name__)

TASK_ID_PREFIX = "task-"
DEFAULT_DELIVERABLE = "Livrable étape"
DEFAULT_COLOR = "#94a3b8"

# Minimum width of the timeline view, in days
MIN_VIEW_DAYS = 14

# Standard VR production hierarchy, also the default role catalog
DEFAULT_ROLE_ORDER = [
    "Chef de projet / Direction de production",
    "Scénariste immersif",
    "Directeur artistique",
    "Modeleur 3D",
    "Animateur 3D",
    "Cadreur vidéo 360",
    "Monteur vidéo 360",
    "Sound designer",
    "Intégrateur Unity",
    "Intégrateur WebGL",
    "Développeur VR senior",
    "Comédien",
    "QA / Test VR",
]

ROLE_COLORS = {
    "Chef de projet / Direction de production": "#475569",
    "Scénariste immersif": "#0ea5e9",
    "Directeur artistique": "#8b5cf6",
    "Modeleur 3D": "#10b981",
    "Animateur 3D": "#34d399",
    "Cadreur vidéo 360": "#f59e0b",
    "Monteur vidéo 360": "#d97706",
    "Sound designer": "#ec4899",
    "Intégrateur Unity": "#6366f1",
    "Intégrateur WebGL": "#4f46e5",
    "Développeur VR senior": "#1d4ed8",
    "Comédien": "#f43f5e",
    "QA / Test VR": "#94a3b8",
}

# (keywords, phase) in precedence order
PHASE_RULES = (
    (("Chef de projet", "Scénariste", "Directeur artistique"), PHASE_FRAMING),
    (("3D", "Cadreur"), PHASE_PREPRODUCTION),
    (("QA",), PHASE_STABILIZATION),
)


def classify_phase(role: str) -> str:
    for keywords, phase in PHASE_RULES:
        if any(keyword in role for keyword in keywords):
            return phase
    return PHASE_PRODUCTION


def color_for(role: str) -> str:
    return ROLE_COLORS.get(role, DEFAULT_COLOR)


def task_id_for(line_id: str) -> str:
    return f"{TASK_ID_PREFIX}{line_id}"


def line_id_from_task_id(task_id: str) -> str:
    """Strip the task prefix; plain line ids pass through unchanged."""
    if task_id.startswith(TASK_ID_PREFIX):
        return task_id[len(TASK_ID_PREFIX):]
    return task_id


def generate_planning(lines) -> list[PlanningTask]:
    """Lay the quote lines end to end on a day axis starting at 0."""
    tasks = []
    elapsed = 0
    for line in lines:
        if line.days <= 0:
            continue
        tasks.append(PlanningTask(
            id=task_id_for(line.id),
            name=line.role,
            role=line.role,
            phase=classify_phase(line.role),
            start_day=elapsed,
            duration=line.days,
            dependencies=[],
            deliverable=DEFAULT_DELIVERABLE,
            color=color_for(line.role),
        ))
        elapsed += line.days
    return tasks


def total_duration(tasks) -> float:
    return sum(task.duration for task in tasks)


def planning_summary(tasks, start_date) -> dict:
    """Timeline figures shown under the Gantt: total load and estimated close."""
    total_days = total_duration(tasks)
    view_days = max(total_days, MIN_VIEW_DAYS)
    return {
        "total_days": total_days,
        "start_date": start_date.isoformat() if start_date else None,
        "estimated_end_date": (
            (start_date + timedelta(days=total_days)).isoformat() if start_date else None
        ),
        "view_days": view_days,
        "weeks": math.ceil(view_days / 7),
    }
