"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from mca_scorecard.domain.models import RedFlagType, RiskTier, Severity, StackingStatus, Verdict


class TransactionSchema(BaseModel):
    """Transaction as produced by statement ingestion; validated by the engine"""

    id: str = Field(..., min_length=1)
    date: Optional[str] = Field(None, description="ISO date, YYYY-MM-DD")
    description: str = ""
    amount: Optional[float] = None
    type: Optional[str] = Field(None, description="CREDIT or DEBIT")
    running_balance: Optional[float] = Field(
        None, validation_alias=AliasChoices("running_balance", "runningBalance")
    )
    category: Optional[str] = None
    subcategory: Optional[str] = Field(None, validation_alias=AliasChoices("subcategory", "subCategory"))
    parse_quality: Optional[str] = Field(None, validation_alias=AliasChoices("parse_quality", "parseQuality"))


class WeightsSchema(BaseModel):
    """Per-deal override of the overall score weights"""

    revenue_quality: float = Field(0.25, ge=0)
    expense_quality: float = Field(0.25, ge=0)
    existing_debt_impact: float = Field(0.25, ge=0)
    cashflow_charges: float = Field(0.25, ge=0)

    @model_validator(mode="after")
    def check_positive_total(self) -> "WeightsSchema":
        if self.revenue_quality + self.expense_quality + self.existing_debt_impact + self.cashflow_charges <= 0:
            raise ValueError("At least one weight must be positive")
        return self


class AnalysisRequest(BaseModel):
    """Request body for POST /v1/analysis"""

    deal_id: str = Field(..., min_length=1, description="Deal identifier")
    transactions: List[TransactionSchema]
    weights: Optional[WeightsSchema] = None


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class MonthlyBucketSchema(_FromDomain):
    month: str
    revenue: float
    expenses: float
    net_cash_flow: float
    mca_payments: float
    nsf_count: int
    negative_days: int


class RevenueMetricsSchema(_FromDomain):
    total_revenue: float
    average_monthly_revenue: float
    revenue_trend: float
    revenue_consistency: float
    revenue_by_month: Dict[str, float]
    revenue_by_category: Dict[str, float]


class ExpenseMetricsSchema(_FromDomain):
    total_expenses: float
    expense_to_revenue_ratio: Optional[float]
    owner_withdrawals: float
    expenses_by_category: Dict[str, float]


class McaPaymentSchema(_FromDomain):
    funder: str
    amount: float
    frequency: str
    payment_count: int
    typical_payment: float
    cadence_days: float
    daily_obligation: float
    last_payment: date
    active: bool


class McaMetricsSchema(_FromDomain):
    active_mca_count: int
    daily_mca_obligation: float
    debt_to_revenue_ratio: Optional[float]
    stacking_status: StackingStatus
    mca_payments: List[McaPaymentSchema]
    total_repayments: float
    total_funding_received: float


class RiskMetricsSchema(_FromDomain):
    nsf_count: int
    negative_balance_days: int
    lowest_balance: Optional[float]
    average_daily_balance: Optional[float]
    red_flag_count: int
    red_flags: List[str]


class AggregatedMetricsSchema(_FromDomain):
    period_start: date
    period_end: date
    months_analyzed: int
    revenue: RevenueMetricsSchema
    expense: ExpenseMetricsSchema
    mca: McaMetricsSchema
    risk: RiskMetricsSchema
    monthly_data: List[MonthlyBucketSchema]
    parse_quality_counts: Dict[str, int]


class RedFlagSchema(_FromDomain):
    type: RedFlagType
    severity: Severity
    description: str


class MetricValueSchema(_FromDomain):
    name: str
    value: Optional[float]
    formatted_value: str
    interpretation: Optional[str] = None


class SectionSchema(_FromDomain):
    name: str
    score: float
    rating: int
    rating_label: str
    weight: float
    narrative: str
    metrics: List[MetricValueSchema]


class ScorecardSchema(_FromDomain):
    period_start: date
    period_end: date
    months_analyzed: int
    revenue_quality: SectionSchema
    expense_quality: SectionSchema
    existing_debt_impact: SectionSchema
    cashflow_charges: SectionSchema
    red_flags: List[RedFlagSchema]
    overall_score: float
    overall_rating: int
    risk_tier: RiskTier
    verdict: Verdict
    recommendation: str


class AnalysisResponse(BaseModel):
    """Response for POST /v1/analysis"""

    deal_id: str
    metrics: AggregatedMetricsSchema
    scorecard: ScorecardSchema
    deal_metrics: Dict[str, Union[float, int, str, None]]
