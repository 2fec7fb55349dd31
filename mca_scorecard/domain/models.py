"""Domain models - pure Python dataclasses representing underwriting entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple


class TransactionType(str, Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class ParseQuality(str, Enum):
    """Upstream confidence in a transaction's category (display only)"""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    UNASSIGNED = "UNASSIGNED"


class StackingStatus(str, Enum):
    CLEAN = "CLEAN"
    STACKED = "STACKED"
    HEAVY = "HEAVY"


class RiskTier(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class Verdict(str, Enum):
    APPROVE = "APPROVE"
    CAUTION = "CAUTION"
    DECLINE = "DECLINE"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RedFlagType(str, Enum):
    NSF = "NSF"
    NEGATIVE_BALANCE = "NEGATIVE_BALANCE"
    DEBT_LOAD = "DEBT_LOAD"
    REVENUE_DECLINE = "REVENUE_DECLINE"
    OWNER_DRAW = "OWNER_DRAW"


@dataclass(frozen=True)
class Transaction:
    """Bank transaction produced by the statement ingestion pipeline"""

    id: str
    date: date
    description: str
    amount: float  # always >= 0, direction comes from type
    type: TransactionType
    running_balance: Optional[float] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    parse_quality: Optional[ParseQuality] = None


@dataclass(frozen=True)
class AnalysisPeriod:
    start: date
    end: date
    months_analyzed: int


@dataclass(frozen=True)
class NormalizedTransactions:
    """Validated transactions sorted by date, with the period they cover"""

    transactions: Tuple[Transaction, ...]
    period: AnalysisPeriod


@dataclass
class MonthlyBucket:
    month: str  # YYYY-MM
    revenue: float = 0.0
    expenses: float = 0.0
    net_cash_flow: float = 0.0
    mca_payments: float = 0.0
    nsf_count: int = 0
    negative_days: int = 0


@dataclass
class RevenueMetrics:
    total_revenue: float
    average_monthly_revenue: float
    revenue_trend: float
    revenue_consistency: float
    revenue_by_month: Dict[str, float]
    revenue_by_category: Dict[str, float]


@dataclass
class ExpenseMetrics:
    total_expenses: float
    expense_to_revenue_ratio: Optional[float]  # None when there is no revenue
    owner_withdrawals: float
    expenses_by_category: Dict[str, float]


@dataclass
class McaPayment:
    """Repayment pattern of a single MCA funder"""

    funder: str
    amount: float
    frequency: str
    payment_count: int
    typical_payment: float
    cadence_days: float
    daily_obligation: float
    last_payment: date
    active: bool


@dataclass
class McaMetrics:
    active_mca_count: int
    daily_mca_obligation: float
    debt_to_revenue_ratio: Optional[float]  # None when there is no revenue
    stacking_status: StackingStatus
    mca_payments: List[McaPayment]
    total_repayments: float = 0.0
    total_funding_received: float = 0.0


@dataclass
class RiskMetrics:
    nsf_count: int
    negative_balance_days: int
    lowest_balance: Optional[float]
    average_daily_balance: Optional[float] = None
    red_flag_count: int = 0
    red_flags: List[str] = field(default_factory=list)


@dataclass
class RedFlag:
    type: RedFlagType
    severity: Severity
    description: str


@dataclass
class AggregatedMetrics:
    """Everything the scorecard, report pages and exports read"""

    period_start: date
    period_end: date
    months_analyzed: int
    revenue: RevenueMetrics
    expense: ExpenseMetrics
    mca: McaMetrics
    risk: RiskMetrics
    monthly_data: List[MonthlyBucket]
    red_flag_details: List[RedFlag] = field(default_factory=list)
    parse_quality_counts: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoringWeights:
    """Relative weight of each section in the overall score"""

    revenue_quality: float = 0.25
    expense_quality: float = 0.25
    existing_debt_impact: float = 0.25
    cashflow_charges: float = 0.25

    def __post_init__(self):
        values = (self.revenue_quality, self.expense_quality, self.existing_debt_impact, self.cashflow_charges)
        if any(v < 0 for v in values):
            raise ValueError("Scoring weights must be non-negative")
        if sum(values) <= 0:
            raise ValueError("At least one scoring weight must be positive")


@dataclass(frozen=True)
class RedFlagThresholds:
    nsf_count_max: int = 5
    negative_days_max: int = 10
    debt_to_revenue_max: float = 0.30
    revenue_decline_max: float = 0.20
    owner_draw_max: float = 0.25


@dataclass
class MetricValue:
    name: str
    value: Optional[float]
    formatted_value: str
    interpretation: Optional[str] = None


@dataclass
class Section:
    name: str
    score: float  # 0-100
    rating: int  # 1-5
    rating_label: str
    weight: float
    narrative: str
    metrics: List[MetricValue]


@dataclass
class Scores:
    revenue_score: float
    expense_score: float
    debt_score: float
    risk_score: float
    overall_score: float
    risk_tier: RiskTier
    verdict: Verdict


@dataclass
class Scorecard:
    """Composed underwriting output"""

    period_start: date
    period_end: date
    months_analyzed: int
    revenue_quality: Section
    expense_quality: Section
    existing_debt_impact: Section
    cashflow_charges: Section
    red_flags: List[RedFlag]
    scores: Scores
    overall_rating: int
    recommendation: str

    @property
    def overall_score(self) -> float:
        return self.scores.overall_score

    @property
    def risk_tier(self) -> RiskTier:
        return self.scores.risk_tier

    @property
    def verdict(self) -> Verdict:
        return self.scores.verdict


@dataclass
class DealAnalysis:
    metrics: AggregatedMetrics
    scorecard: Scorecard
