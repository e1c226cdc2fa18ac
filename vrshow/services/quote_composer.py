"""
Quote composition — the ordered set of winning bids and the margin policy.

QuoteComposer is the in-memory application state for one project's quote.
It never touches the database: quote_service loads it, applies one operation
and stores the result back.

Rules:
    - One line per role. Selecting a bid for a role replaces the earlier line.
    - sale_price = round_half_up(unit_cost / (1 - margin / 100))
    - Margins of 100 or more become MAX_MARGIN_PCT (99.99), negatives 0; any
      value strictly between 0 and 100 is used as given.
    - move_line renumbers every line's ``order`` to its list position.
    - remove_line does NOT renumber (gaps are allowed).
    - Unknown line ids are silent no-ops for move / update / remove.
    - Patched day counts never go below 0.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace

from vrshow.core.quote_types import QuoteLine
from vrshow.utils.numbers import round_half_up, to_number

logger = logging.getLogger(__name__)

DEFAULT_MARGIN_PCT = 40
MIN_MARGIN_PCT = 0
# Margins of 100 or more would divide by zero; they are pulled just below 100
MAX_MARGIN_PCT = 99.99

MOVE_DIRECTIONS = {"up", "down"}

# Fields a caller may patch on an existing line
UPDATABLE_FIELDS = ("days", "unit_cost", "sale_price")


def clamp_margin(margin) -> float:
    """Coerce and clamp a margin percentage into the supported range."""
    value = to_number(margin)
    if value >= 100:
        logger.warning("Margin %s%% clamped to %s%%", value, MAX_MARGIN_PCT)
        return MAX_MARGIN_PCT
    if value < MIN_MARGIN_PCT:
        logger.warning("Margin %s%% clamped to %s%%", value, MIN_MARGIN_PCT)
        return float(MIN_MARGIN_PCT)
    return value


def sale_price_for(unit_cost, margin) -> int:
    """Day sale price that yields ``margin`` percent of the sale as profit."""
    return round_half_up(to_number(unit_cost) / (1 - clamp_margin(margin) / 100))


def _order_key(line: QuoteLine) -> int:
    return line.order or 0


def _new_line_id() -> str:
    return uuid.uuid4().hex


class QuoteComposer:
    """Ordered quote lines plus the global margin they are priced with."""

    def __init__(self, lines=None, margin=DEFAULT_MARGIN_PCT):
        self.lines: list[QuoteLine] = list(lines or [])
        self.margin: float = clamp_margin(margin)

    def __len__(self):
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    def index_of(self, line_id: str) -> int:
        for idx, line in enumerate(self.lines):
            if line.id == line_id:
                return idx
        return -1

    def get(self, line_id: str) -> QuoteLine | None:
        idx = self.index_of(line_id)
        return self.lines[idx] if idx >= 0 else None

    # ── Operations ───────────────────────────────────────────────────────

    def select_bid(self, bid: QuoteLine) -> QuoteLine:
        """Make ``bid`` the winning line for its role.

        Any existing line for the same role is dropped, the new line gets a
        fresh id and a sale price at the current margin, then all lines are
        stably re-sorted by order index (missing index sorts as 0).
        """
        kept = [line for line in self.lines if line.role != bid.role]
        replaced = len(self.lines) - len(kept)
        line = replace(
            bid,
            id=_new_line_id(),
            sale_price=sale_price_for(bid.unit_cost, self.margin),
        )
        kept.append(line)
        self.lines = sorted(kept, key=_order_key)
        logger.info(
            "Bid selected role=%s bid=%s replaced=%d lines=%d",
            bid.role, bid.id, replaced, len(self.lines),
        )
        return line

    def apply_global_margin(self, margin) -> float:
        """Store the margin and reprice every line in place."""
        self.margin = clamp_margin(margin)
        for line in self.lines:
            line.sale_price = sale_price_for(line.unit_cost, self.margin)
        logger.info("Global margin applied margin=%s lines=%d", self.margin, len(self.lines))
        return self.margin

    def move_line(self, line_id: str, direction: str) -> bool:
        """Swap a line with its neighbour. Returns True when a swap happened."""
        idx = self.index_of(line_id)
        if idx == -1 or direction not in MOVE_DIRECTIONS:
            return False
        target = idx - 1 if direction == "up" else idx + 1
        if target < 0 or target >= len(self.lines):
            return False
        self.lines[idx], self.lines[target] = self.lines[target], self.lines[idx]
        self.renumber()
        return True

    def renumber(self) -> None:
        """Set every line's order index to its list position (0-based)."""
        for position, line in enumerate(self.lines):
            line.order = position

    def update_line(self, line_id: str, patch: dict) -> QuoteLine | None:
        """Overwrite numeric fields from ``patch``.

        Unparseable values become 0 and negative day counts are floored at 0.
        """
        line = self.get(line_id)
        if line is None:
            return None
        for field_name in UPDATABLE_FIELDS:
            if field_name in patch:
                setattr(line, field_name, to_number(patch[field_name]))
        if line.days < 0:
            logger.warning("Negative days %s on line %s floored to 0", line.days, line.id)
            line.days = 0.0
        return line

    def remove_line(self, line_id: str) -> bool:
        idx = self.index_of(line_id)
        if idx == -1:
            return False
        del self.lines[idx]
        return True

    def clear(self) -> None:
        self.lines = []
