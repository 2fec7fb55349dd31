"""Scorecard composition - overall score, risk tier, verdict and recommendation"""

from typing import Any, Dict, Iterable, List

from mca_scorecard.domain.metrics import compute_metrics
from mca_scorecard.domain.models import (
    AggregatedMetrics,
    DealAnalysis,
    RedFlag,
    RedFlagThresholds,
    RiskTier,
    Scorecard,
    Scores,
    ScoringWeights,
    Section,
    Severity,
    Verdict,
)
from mca_scorecard.domain.red_flags import top_red_flag
from mca_scorecard.domain.scoring import (
    score_cashflow_charges,
    score_existing_debt_impact,
    score_expense_quality,
    score_revenue_quality,
    score_to_rating,
)

RISK_TIER_LABELS = {
    RiskTier.A: "Low Risk",
    RiskTier.B: "Moderate Risk",
    RiskTier.C: "Elevated Risk",
    RiskTier.D: "High Risk",
}

VERDICT_PHRASES = {
    Verdict.APPROVE: "approve for funding",
    Verdict.CAUTION: "proceed with caution and underwriter review",
    Verdict.DECLINE: "decline",
}


def determine_risk_tier(overall_score: float) -> RiskTier:
    """
    Score bands (inclusive lower bounds):
    - 80+:   A
    - 65-80: B
    - 50-65: C
    - <50:   D
    """
    if overall_score >= 80:
        return RiskTier.A
    elif overall_score >= 65:
        return RiskTier.B
    elif overall_score >= 50:
        return RiskTier.C
    else:
        return RiskTier.D


def determine_verdict(tier: RiskTier, red_flags: List[RedFlag]) -> Verdict:
    high_flags = sum(1 for f in red_flags if f.severity is Severity.HIGH)
    if tier is RiskTier.D or high_flags >= 2:
        return Verdict.DECLINE
    if tier in (RiskTier.A, RiskTier.B) and high_flags == 0:
        return Verdict.APPROVE
    return Verdict.CAUTION


def weighted_overall_score(sections: List[Section], weights: ScoringWeights) -> float:
    values = [
        weights.revenue_quality,
        weights.expense_quality,
        weights.existing_debt_impact,
        weights.cashflow_charges,
    ]
    total = sum(values)
    return round(sum(s.score * w for s, w in zip(sections, values)) / total, 2)


def build_recommendation(tier: RiskTier, verdict: Verdict, red_flags: List[RedFlag]) -> str:
    text = f"Tier {tier.value} ({RISK_TIER_LABELS[tier]}): {VERDICT_PHRASES[verdict]}."
    top = top_red_flag(red_flags)
    if top is None:
        return text + " No red flags detected."
    return text + f" Primary concern ({top.severity.value}): {top.description}."


def compose_scorecard(metrics: AggregatedMetrics, weights: ScoringWeights | None = None) -> Scorecard:
    """
    Score all four sections and combine them into the final scorecard.

    Weights are passed in explicitly (equal 25% each by default) so each deal
    can be scored under its own underwriting policy.

    Raises:
        IncompleteMetricsError: A section could not be scored. The scorecard is
            never returned with a section missing.
    """
    weights = weights or ScoringWeights()
    sections: Dict[str, Section] = {
        "revenue_quality": score_revenue_quality(metrics, weights.revenue_quality),
        "expense_quality": score_expense_quality(metrics, weights.expense_quality),
        "existing_debt_impact": score_existing_debt_impact(metrics, weights.existing_debt_impact),
        "cashflow_charges": score_cashflow_charges(metrics, weights.cashflow_charges),
    }

    ordered = list(sections.values())
    overall = weighted_overall_score(ordered, weights)
    red_flags = list(metrics.red_flag_details)
    tier = determine_risk_tier(overall)
    verdict = determine_verdict(tier, red_flags)

    return Scorecard(
        period_start=metrics.period_start,
        period_end=metrics.period_end,
        months_analyzed=metrics.months_analyzed,
        revenue_quality=sections["revenue_quality"],
        expense_quality=sections["expense_quality"],
        existing_debt_impact=sections["existing_debt_impact"],
        cashflow_charges=sections["cashflow_charges"],
        red_flags=red_flags,
        scores=Scores(
            revenue_score=sections["revenue_quality"].score,
            expense_score=sections["expense_quality"].score,
            debt_score=sections["existing_debt_impact"].score,
            risk_score=sections["cashflow_charges"].score,
            overall_score=overall,
            risk_tier=tier,
            verdict=verdict,
        ),
        overall_rating=score_to_rating(overall),
        recommendation=build_recommendation(tier, verdict, red_flags),
    )


def analyze_deal(
    transactions: Iterable[Any],
    weights: ScoringWeights | None = None,
    thresholds: RedFlagThresholds | None = None,
) -> DealAnalysis:
    """
    Main entry point: aggregate a deal's transactions and score them.

    Returns both the aggregated metrics and the composed scorecard.
    """
    metrics = compute_metrics(transactions, thresholds)
    scorecard = compose_scorecard(metrics, weights)
    return DealAnalysis(metrics=metrics, scorecard=scorecard)


def to_deal_metrics(metrics: AggregatedMetrics, scorecard: Scorecard) -> Dict[str, Any]:
    """Flat record in the shape the storage layer persists per deal"""
    return {
        "total_revenue": metrics.revenue.total_revenue,
        "average_monthly_revenue": metrics.revenue.average_monthly_revenue,
        "revenue_trend": metrics.revenue.revenue_trend,
        "revenue_consistency": metrics.revenue.revenue_consistency,
        "total_expenses": metrics.expense.total_expenses,
        "expense_to_revenue_ratio": metrics.expense.expense_to_revenue_ratio,
        "owner_withdrawals": metrics.expense.owner_withdrawals,
        "active_mca_count": metrics.mca.active_mca_count,
        "daily_mca_obligation": metrics.mca.daily_mca_obligation,
        "debt_to_revenue_ratio": metrics.mca.debt_to_revenue_ratio,
        "stacking_status": metrics.mca.stacking_status.value,
        "nsf_count": metrics.risk.nsf_count,
        "negative_balance_days": metrics.risk.negative_balance_days,
        "lowest_balance": metrics.risk.lowest_balance,
        "red_flag_count": metrics.risk.red_flag_count,
        "revenue_score": scorecard.scores.revenue_score,
        "expense_score": scorecard.scores.expense_score,
        "debt_score": scorecard.scores.debt_score,
        "risk_score": scorecard.scores.risk_score,
        "overall_score": scorecard.overall_score,
        "risk_tier": scorecard.risk_tier.value,
        "verdict": scorecard.verdict.value,
    }
