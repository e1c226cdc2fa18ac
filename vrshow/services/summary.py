"""Financial summary of a quote — a pure function of the quote lines."""

from vrshow.core.quote_types import SummaryStats


def compute_stats(lines) -> SummaryStats:
    """Compute revenue, cost, profit, average margin and total days.

    The average margin is profit over revenue as a percentage, and 0 when
    revenue is 0 (empty quote, or every sale price at 0).
    """
    total_revenue = 0.0
    total_cost = 0.0
    total_days = 0.0
    for line in lines:
        total_revenue += line.sale_price * line.days
        total_cost += line.unit_cost * line.days
        total_days += line.days

    profit = total_revenue - total_cost
    average_margin = profit / total_revenue * 100 if total_revenue > 0 else 0.0

    return SummaryStats(
        total_revenue=total_revenue,
        total_cost=total_cost,
        total_profit=profit,
        average_margin=average_margin,
        total_days=total_days,
    )
