"""
Bid comparison — groups provider bids per role and flags price extremes.

A group with a single bid carries no label: a comparison needs at least two
candidates. Ties are not broken; every bid at the extreme total is labelled.
When all bids of a group share the same total they are all "best price" and
none is "most expensive".
"""

import logging
from dataclasses import dataclass, field

from vrshow.core.quote_types import QuoteLine

logger = logging.getLogger(__name__)


@dataclass
class RankedBid:
    bid: QuoteLine
    total: float
    is_best_price: bool = False
    is_most_expensive: bool = False

    def to_dict(self) -> dict:
        return {
            **self.bid.to_dict(),
            "total": self.total,
            "is_best_price": self.is_best_price,
            "is_most_expensive": self.is_most_expensive,
        }


@dataclass
class BidGroup:
    role: str
    bids: list[RankedBid] = field(default_factory=list)
    min_total: float = 0.0
    max_total: float = 0.0

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "min_total": self.min_total,
            "max_total": self.max_total,
            "count": len(self.bids),
            "bids": [b.to_dict() for b in self.bids],
        }


def group_bids(bids) -> list[BidGroup]:
    """Group bids by role, keeping the order in which each role first appears.

    Args:
        bids: Iterable of QuoteLine bids.

    Returns:
        One BidGroup per distinct role, with min/max totals and labels set.
    """
    groups: dict[str, BidGroup] = {}
    for bid in bids:
        group = groups.get(bid.role)
        if group is None:
            group = groups[bid.role] = BidGroup(role=bid.role)
        group.bids.append(RankedBid(bid=bid, total=bid.unit_cost * bid.days))

    for group in groups.values():
        totals = [rb.total for rb in group.bids]
        group.min_total = min(totals)
        group.max_total = max(totals)
        if len(group.bids) < 2:
            continue
        for rb in group.bids:
            if rb.total == group.min_total:
                rb.is_best_price = True
            elif rb.total == group.max_total:
                rb.is_most_expensive = True

    logger.debug("Grouped %d bids into %d roles", sum(len(g.bids) for g in groups.values()), len(groups))
    return list(groups.values())
