"""Tests — financial summary of a quote."""

import pytest

from vrshow.core.quote_types import QuoteLine
from vrshow.services.summary import compute_stats

pytestmark = pytest.mark.unit


def _line(role, cost, sale, days):
    return QuoteLine(id=role, role=role, unit_cost=cost, sale_price=sale, days=days)


def test_empty_quote_is_all_zero():
    stats = compute_stats([])
    assert stats.total_revenue == 0
    assert stats.total_cost == 0
    assert stats.total_profit == 0
    assert stats.average_margin == 0
    assert stats.total_days == 0


def test_totals_and_margin():
    stats = compute_stats([
        _line("Modeleur 3D", 300, 500, 5),
        _line("QA / Test VR", 200, 333, 2),
    ])
    assert stats.total_revenue == 500 * 5 + 333 * 2
    assert stats.total_cost == 300 * 5 + 200 * 2
    assert stats.total_profit == stats.total_revenue - stats.total_cost
    assert stats.total_days == 7
    assert stats.average_margin == pytest.approx(stats.total_profit / stats.total_revenue * 100)


def test_zero_revenue_gives_zero_margin():
    stats = compute_stats([_line("A", 300, 0, 4)])
    assert stats.total_revenue == 0
    assert stats.total_profit == -1200
    assert stats.average_margin == 0


def test_margin_40_quote_has_40_percent_average():
    stats = compute_stats([_line("A", 300, 500, 10)])
    assert stats.average_margin == pytest.approx(40.0)


def test_to_dict_keys():
    assert set(compute_stats([]).to_dict()) == {
        "total_revenue", "total_cost", "total_profit", "average_margin", "total_days",
    }
