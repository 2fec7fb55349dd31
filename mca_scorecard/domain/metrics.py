"""Metrics calculator - core aggregation for MCA underwriting"""

from dataclasses import replace
from datetime import date, timedelta
from statistics import mean, median, pstdev
from typing import Any, Dict, Iterable, List, Optional

from mca_scorecard.domain.aggregator import CategoryTotals, aggregate_categories
from mca_scorecard.domain.bucketizer import bucketize
from mca_scorecard.domain.categories import lender_label
from mca_scorecard.domain.models import (
    AggregatedMetrics,
    ExpenseMetrics,
    McaMetrics,
    McaPayment,
    MonthlyBucket,
    NormalizedTransactions,
    RedFlagThresholds,
    RevenueMetrics,
    RiskMetrics,
    StackingStatus,
    Transaction,
)
from mca_scorecard.domain.normalizer import normalize_transactions
from mca_scorecard.domain.red_flags import detect_red_flags
from mca_scorecard.utils.date_utils import generate_date_range

MIN_TREND_MONTHS = 3
# A funder still counts as active if it was paid less than this many days before period end
ACTIVE_WINDOW_DAYS = 45
SINGLE_PAYMENT_CADENCE_DAYS = 30.0


def compute_metrics(
    transactions: Iterable[Any],
    thresholds: RedFlagThresholds | None = None,
) -> AggregatedMetrics:
    """
    Aggregate a raw transaction collection into the four metric groups.

    Pure function of its input: same transactions in, identical metrics out.

    Raises:
        EmptyInputError: No transactions
        InvalidTransactionError: A malformed record
    """
    normalized = normalize_transactions(transactions)
    buckets = bucketize(normalized)
    totals = aggregate_categories(normalized.transactions)

    revenue = _revenue_metrics(buckets, totals)
    expense = _expense_metrics(buckets, totals, revenue.total_revenue)
    mca = _mca_metrics(totals, revenue.total_revenue, normalized.period.end)
    risk = _risk_metrics(normalized, buckets, totals)

    flags = detect_red_flags(revenue, expense, mca, risk, thresholds)
    risk = replace(risk, red_flag_count=len(flags), red_flags=[f.description for f in flags])

    return AggregatedMetrics(
        period_start=normalized.period.start,
        period_end=normalized.period.end,
        months_analyzed=normalized.period.months_analyzed,
        revenue=revenue,
        expense=expense,
        mca=mca,
        risk=risk,
        monthly_data=buckets,
        red_flag_details=flags,
        parse_quality_counts=_parse_quality_counts(normalized.transactions),
    )


def revenue_trend(monthly_revenue: List[float]) -> float:
    """
    Relative change between the first and last third of the series.

    Histories shorter than three months report 0 rather than a noisy ratio.
    """
    if len(monthly_revenue) < MIN_TREND_MONTHS:
        return 0.0
    window = len(monthly_revenue) // 3
    first = mean(monthly_revenue[:window])
    last = mean(monthly_revenue[-window:])
    if first == 0:
        return 0.0
    return (last - first) / first


def revenue_consistency(monthly_revenue: List[float]) -> float:
    """1 - coefficient of variation, clamped to [0, 1]; no revenue means 0"""
    if not monthly_revenue:
        return 0.0
    average = mean(monthly_revenue)
    if average <= 0:
        return 0.0
    return min(max(1.0 - pstdev(monthly_revenue) / average, 0.0), 1.0)


def stacking_status(active_mca_count: int) -> StackingStatus:
    if active_mca_count <= 1:
        return StackingStatus.CLEAN
    if active_mca_count <= 3:
        return StackingStatus.STACKED
    return StackingStatus.HEAVY


def payment_frequency(cadence_days: float) -> str:
    if cadence_days <= 2:
        return "DAILY"
    if cadence_days <= 8:
        return "WEEKLY"
    if cadence_days <= 16:
        return "BIWEEKLY"
    return "MONTHLY"


def _revenue_metrics(buckets: List[MonthlyBucket], totals: CategoryTotals) -> RevenueMetrics:
    monthly = [b.revenue for b in buckets]
    total = sum(monthly)
    return RevenueMetrics(
        total_revenue=total,
        average_monthly_revenue=total / len(buckets),
        revenue_trend=revenue_trend(monthly),
        revenue_consistency=revenue_consistency(monthly),
        revenue_by_month={b.month: b.revenue for b in buckets},
        revenue_by_category=totals.revenue_by_category,
    )


def _expense_metrics(buckets: List[MonthlyBucket], totals: CategoryTotals, total_revenue: float) -> ExpenseMetrics:
    total = sum(b.expenses for b in buckets)
    return ExpenseMetrics(
        total_expenses=total,
        expense_to_revenue_ratio=total / total_revenue if total_revenue > 0 else None,
        owner_withdrawals=totals.owner_withdrawals,
        expenses_by_category=totals.expenses_by_category,
    )


def _lender_payment(key: str, repayments: List[Transaction], period_end: date) -> McaPayment:
    dates = sorted({t.date for t in repayments})
    gaps = [(later - earlier).days for earlier, later in zip(dates, dates[1:])]
    cadence = float(median(gaps)) if gaps else SINGLE_PAYMENT_CADENCE_DAYS
    typical = float(median(t.amount for t in repayments))
    last_payment = dates[-1]

    return McaPayment(
        funder=lender_label(key),
        amount=sum(t.amount for t in repayments),
        frequency=payment_frequency(cadence),
        payment_count=len(repayments),
        typical_payment=typical,
        cadence_days=cadence,
        daily_obligation=typical / cadence,
        last_payment=last_payment,
        active=(period_end - last_payment) < timedelta(days=ACTIVE_WINDOW_DAYS),
    )


def _mca_metrics(totals: CategoryTotals, total_revenue: float, period_end: date) -> McaMetrics:
    payments = [
        _lender_payment(key, repayments, period_end)
        for key, repayments in totals.repayments_by_lender.items()
    ]
    payments.sort(key=lambda p: (-p.amount, p.funder))
    active = [p for p in payments if p.active]

    return McaMetrics(
        active_mca_count=len(active),
        daily_mca_obligation=sum(p.daily_obligation for p in active),
        debt_to_revenue_ratio=totals.total_repayments / total_revenue if total_revenue > 0 else None,
        stacking_status=stacking_status(len(active)),
        mca_payments=payments,
        total_repayments=totals.total_repayments,
        total_funding_received=totals.total_funding_received,
    )


def _average_daily_balance(normalized: NormalizedTransactions) -> Optional[float]:
    """Carry the last known balance forward across days without transactions"""
    balance_by_date: Dict[date, float] = {}
    for txn in normalized.transactions:
        if txn.running_balance is not None:
            balance_by_date[txn.date] = txn.running_balance
    if not balance_by_date:
        return None

    first_known = min(balance_by_date)
    daily_balances = []
    last_known_balance = balance_by_date[first_known]
    for day in generate_date_range(first_known, normalized.period.end):
        if day in balance_by_date:
            last_known_balance = balance_by_date[day]
        daily_balances.append(last_known_balance)

    return sum(daily_balances) / len(daily_balances)


def _risk_metrics(
    normalized: NormalizedTransactions,
    buckets: List[MonthlyBucket],
    totals: CategoryTotals,
) -> RiskMetrics:
    balances = [t.running_balance for t in normalized.transactions if t.running_balance is not None]
    return RiskMetrics(
        nsf_count=totals.nsf_count,
        negative_balance_days=sum(b.negative_days for b in buckets),
        lowest_balance=min(balances) if balances else None,
        average_daily_balance=_average_daily_balance(normalized),
    )


def _parse_quality_counts(transactions) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for txn in transactions:
        label = txn.parse_quality.value if txn.parse_quality else "NONE"
        counts[label] = counts.get(label, 0) + 1
    return counts
