"""Threshold rules that flag underwriting concerns"""

from typing import List

from mca_scorecard.domain.models import (
    ExpenseMetrics,
    McaMetrics,
    RedFlag,
    RedFlagThresholds,
    RedFlagType,
    RevenueMetrics,
    RiskMetrics,
    Severity,
)


def detect_red_flags(
    revenue: RevenueMetrics,
    expense: ExpenseMetrics,
    mca: McaMetrics,
    risk: RiskMetrics,
    thresholds: RedFlagThresholds | None = None,
) -> List[RedFlag]:
    """
    Evaluate every rule independently against the aggregated metrics.

    Rules (defaults):
    - NSF volume:      nsf_count > 5                      HIGH
    - Negative days:   negative_balance_days > 10         HIGH
    - Debt load:       debt_to_revenue_ratio > 0.30       HIGH
    - Revenue decline: revenue_trend < -0.20              MEDIUM
    - Owner draw:      owner_withdrawals / revenue > 0.25 MEDIUM

    A ratio that cannot be computed (no revenue) does not trigger its rule.
    """
    t = thresholds or RedFlagThresholds()
    flags: List[RedFlag] = []

    if risk.nsf_count > t.nsf_count_max:
        flags.append(RedFlag(
            type=RedFlagType.NSF,
            severity=Severity.HIGH,
            description=f"{risk.nsf_count} NSF/overdraft events (limit {t.nsf_count_max})",
        ))

    if risk.negative_balance_days > t.negative_days_max:
        flags.append(RedFlag(
            type=RedFlagType.NEGATIVE_BALANCE,
            severity=Severity.HIGH,
            description=f"{risk.negative_balance_days} days with a negative balance (limit {t.negative_days_max})",
        ))

    debt_ratio = mca.debt_to_revenue_ratio
    if debt_ratio is not None and debt_ratio > t.debt_to_revenue_max:
        flags.append(RedFlag(
            type=RedFlagType.DEBT_LOAD,
            severity=Severity.HIGH,
            description=f"MCA repayments are {debt_ratio:.1%} of revenue (limit {t.debt_to_revenue_max:.0%})",
        ))

    if revenue.revenue_trend < -t.revenue_decline_max:
        flags.append(RedFlag(
            type=RedFlagType.REVENUE_DECLINE,
            severity=Severity.MEDIUM,
            description=f"Revenue declined {abs(revenue.revenue_trend):.1%} over the period (limit {t.revenue_decline_max:.0%})",
        ))

    if revenue.total_revenue > 0:
        draw_ratio = expense.owner_withdrawals / revenue.total_revenue
        if draw_ratio > t.owner_draw_max:
            flags.append(RedFlag(
                type=RedFlagType.OWNER_DRAW,
                severity=Severity.MEDIUM,
                description=f"Owner withdrawals are {draw_ratio:.1%} of revenue (limit {t.owner_draw_max:.0%})",
            ))

    return flags


def top_red_flag(flags: List[RedFlag]) -> RedFlag | None:
    """Most severe flag; ties go to the rule evaluated first"""
    rank = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}
    if not flags:
        return None
    return sorted(flags, key=lambda f: rank[f.severity])[0]
