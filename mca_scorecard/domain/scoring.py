"""Section scoring - turns each metric group into a 0-100 score and 1-5 rating"""

import math
from typing import List, Optional, Sequence, Tuple

from mca_scorecard.domain.exceptions import IncompleteMetricsError
from mca_scorecard.domain.models import (
    AggregatedMetrics,
    MetricValue,
    Section,
    StackingStatus,
)

# Piecewise-linear tables: (metric value, score) points in ascending value order.
# Values outside the table take the score of the nearest end point.
REVENUE_TREND_POINTS = [(-0.5, 0.0), (-0.2, 45.0), (0.0, 90.0), (0.15, 100.0)]
REVENUE_CONSISTENCY_POINTS = [(0.0, 0.0), (0.5, 50.0), (0.8, 85.0), (1.0, 100.0)]
EXPENSE_RATIO_POINTS = [(0.5, 100.0), (0.8, 80.0), (1.0, 50.0), (1.3, 0.0)]
OWNER_DRAW_RATIO_POINTS = [(0.0, 100.0), (0.1, 90.0), (0.25, 50.0), (0.5, 0.0)]
DEBT_RATIO_POINTS = [(0.0, 100.0), (0.1, 85.0), (0.3, 50.0), (0.5, 0.0)]
NSF_COUNT_POINTS = [(0.0, 100.0), (2.0, 80.0), (5.0, 50.0), (10.0, 0.0)]
NEGATIVE_DAYS_POINTS = [(0.0, 100.0), (3.0, 80.0), (10.0, 40.0), (20.0, 0.0)]

STACKING_SCORES = {
    StackingStatus.CLEAN: 100.0,
    StackingStatus.STACKED: 50.0,
    StackingStatus.HEAVY: 0.0,
}

RATING_LABELS = {1: "Critical", 2: "Poor", 3: "Fair", 4: "Good", 5: "Excellent"}

SECTION_NAMES = {
    "revenue_quality": "Revenue Quality",
    "expense_quality": "Expense Quality",
    "existing_debt_impact": "Existing Debt Impact",
    "cashflow_charges": "Cashflow & Charges",
}


def interpolate(value: float, points: Sequence[Tuple[float, float]]) -> float:
    """Linear interpolation over (x, score) points, clamped at both ends"""
    if value <= points[0][0]:
        return points[0][1]
    if value >= points[-1][0]:
        return points[-1][1]
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        if x0 <= value <= x1:
            return y0 + (value - x0) / (x1 - x0) * (y1 - y0)
    return points[-1][1]


def score_to_rating(score: float) -> int:
    """ceil(score / 20) clamped to 1-5, so 0 rates 1 and 100 rates 5"""
    return min(max(math.ceil(score / 20), 1), 5)


def _finish(key: str, components: List[Tuple[float, float]], weight: float, narrative: str,
            metrics: List[MetricValue]) -> Section:
    score = round(sum(s * w for s, w in components), 2)
    if math.isnan(score):
        raise IncompleteMetricsError(f"{SECTION_NAMES[key]} score is undefined", section=key)
    rating = score_to_rating(score)
    return Section(
        name=SECTION_NAMES[key],
        score=score,
        rating=rating,
        rating_label=RATING_LABELS[rating],
        weight=weight,
        narrative=narrative,
        metrics=metrics,
    )


def _pct(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.1%}"


def _money(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"-${abs(value):,.0f}" if value < 0 else f"${value:,.0f}"


def score_revenue_quality(metrics: AggregatedMetrics, weight: float = 0.25) -> Section:
    """Penalizes a declining trend and month-to-month inconsistency"""
    if not metrics.monthly_data or len(metrics.monthly_data) != metrics.months_analyzed:
        raise IncompleteMetricsError(
            "Revenue quality needs one monthly bucket per analyzed month", section="revenue_quality"
        )

    revenue = metrics.revenue
    trend = revenue.revenue_trend if revenue.revenue_trend is not None else 0.0
    consistency = revenue.revenue_consistency
    if consistency is None:
        raise IncompleteMetricsError("Revenue consistency is missing", section="revenue_quality")

    direction = "growing" if trend > 0.05 else "declining" if trend < -0.05 else "flat"
    narrative = (
        f"Revenue averaged {_money(revenue.average_monthly_revenue)}/month over "
        f"{metrics.months_analyzed} month(s) with a {direction} trend ({trend:+.1%}) "
        f"and {consistency:.0%} consistency."
    )
    return _finish(
        "revenue_quality",
        [(interpolate(trend, REVENUE_TREND_POINTS), 0.5),
         (interpolate(consistency, REVENUE_CONSISTENCY_POINTS), 0.5)],
        weight,
        narrative,
        [
            MetricValue("Total Revenue", revenue.total_revenue, _money(revenue.total_revenue)),
            MetricValue("Average Monthly Revenue", revenue.average_monthly_revenue,
                        _money(revenue.average_monthly_revenue)),
            MetricValue("Revenue Trend", trend, f"{trend:+.1%}", direction.capitalize()),
            MetricValue("Revenue Consistency", consistency, _pct(consistency),
                        "Stable" if consistency >= 0.8 else "Volatile"),
        ],
    )


def score_expense_quality(metrics: AggregatedMetrics, weight: float = 0.25) -> Section:
    """Penalizes a high expense-to-revenue ratio and heavy owner withdrawals"""
    expense = metrics.expense
    ratio = expense.expense_to_revenue_ratio
    total_revenue = metrics.revenue.total_revenue
    draw_ratio = expense.owner_withdrawals / total_revenue if total_revenue > 0 else None

    narrative = (
        f"Expenses of {_money(expense.total_expenses)} are {_pct(ratio)} of revenue; "
        f"owner withdrawals total {_money(expense.owner_withdrawals)}."
    )
    return _finish(
        "expense_quality",
        [(interpolate(ratio if ratio is not None else 0.0, EXPENSE_RATIO_POINTS), 0.7),
         (interpolate(draw_ratio if draw_ratio is not None else 0.0, OWNER_DRAW_RATIO_POINTS), 0.3)],
        weight,
        narrative,
        [
            MetricValue("Total Expenses", expense.total_expenses, _money(expense.total_expenses)),
            MetricValue("Expense to Revenue", ratio, _pct(ratio),
                        None if ratio is None else "Healthy margin" if ratio < 0.8 else "Thin margin"),
            MetricValue("Owner Withdrawals", expense.owner_withdrawals, _money(expense.owner_withdrawals)),
            MetricValue("Owner Draw to Revenue", draw_ratio, _pct(draw_ratio)),
        ],
    )


def score_existing_debt_impact(metrics: AggregatedMetrics, weight: float = 0.25) -> Section:
    """Penalizes MCA repayments relative to revenue and stacked positions"""
    mca = metrics.mca
    ratio = mca.debt_to_revenue_ratio
    status = mca.stacking_status or StackingStatus.CLEAN

    if mca.active_mca_count == 0:
        narrative = "No active MCA positions detected."
    else:
        narrative = (
            f"{mca.active_mca_count} active MCA position(s) ({status.value}) costing "
            f"{_money(mca.daily_mca_obligation)}/day; repayments are {_pct(ratio)} of revenue."
        )
    return _finish(
        "existing_debt_impact",
        [(interpolate(ratio if ratio is not None else 0.0, DEBT_RATIO_POINTS), 0.6),
         (STACKING_SCORES[status], 0.4)],
        weight,
        narrative,
        [
            MetricValue("Active MCAs", mca.active_mca_count, str(mca.active_mca_count), status.value),
            MetricValue("Daily MCA Obligation", mca.daily_mca_obligation, _money(mca.daily_mca_obligation)),
            MetricValue("Debt to Revenue", ratio, _pct(ratio)),
            MetricValue("Funders", len(mca.mca_payments),
                        ", ".join(p.funder for p in mca.mca_payments) or "None"),
        ],
    )


def score_cashflow_charges(metrics: AggregatedMetrics, weight: float = 0.25) -> Section:
    """Penalizes NSF/overdraft events and days spent below zero"""
    risk = metrics.risk
    nsf = risk.nsf_count or 0
    negative_days = risk.negative_balance_days or 0

    narrative = (
        f"{nsf} NSF/overdraft event(s) and {negative_days} negative-balance day(s); "
        f"lowest balance {_money(risk.lowest_balance)}."
    )
    return _finish(
        "cashflow_charges",
        [(interpolate(nsf, NSF_COUNT_POINTS), 0.5),
         (interpolate(negative_days, NEGATIVE_DAYS_POINTS), 0.5)],
        weight,
        narrative,
        [
            MetricValue("NSF Count", nsf, str(nsf), "None" if nsf == 0 else "Concerning"),
            MetricValue("Negative Balance Days", negative_days, str(negative_days)),
            MetricValue("Lowest Balance", risk.lowest_balance, _money(risk.lowest_balance)),
            MetricValue("Average Daily Balance", risk.average_daily_balance, _money(risk.average_daily_balance)),
        ],
    )
