"""Category totals, MCA movement and NSF events across the whole period"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from mca_scorecard.domain.categories import (
    InflowCategory,
    OutflowCategory,
    inflow_category,
    is_mca_funding,
    is_mca_repayment,
    is_nsf_event,
    lender_key,
    outflow_category,
)
from mca_scorecard.domain.models import Transaction, TransactionType


@dataclass
class CategoryTotals:
    revenue_by_category: Dict[str, float]
    expenses_by_category: Dict[str, float]
    owner_withdrawals: float
    nsf_count: int
    total_repayments: float
    total_funding_received: float
    # lender key -> repayments in date order
    repayments_by_lender: Dict[str, List[Transaction]] = field(default_factory=dict)


def aggregate_categories(transactions: Iterable[Transaction]) -> CategoryTotals:
    """
    Sum amounts per effective category on each side of the ledger.

    Every transaction lands in exactly one key: labels outside the vocabulary
    go to other_income / other_expense rather than being dropped. Keys are
    reported in vocabulary order and only when they saw activity.
    """
    revenue: Dict[InflowCategory, float] = {}
    expenses: Dict[OutflowCategory, float] = {}
    nsf_count = 0
    total_repayments = 0.0
    total_funding = 0.0
    by_lender: Dict[str, List[Transaction]] = {}

    for txn in transactions:
        if txn.type is TransactionType.CREDIT:
            category = inflow_category(txn)
            revenue[category] = revenue.get(category, 0.0) + txn.amount
            if is_mca_funding(txn):
                total_funding += txn.amount
            continue

        category = outflow_category(txn)
        expenses[category] = expenses.get(category, 0.0) + txn.amount
        if is_nsf_event(txn):
            nsf_count += 1
        if is_mca_repayment(txn):
            total_repayments += txn.amount
            by_lender.setdefault(lender_key(txn.description), []).append(txn)

    return CategoryTotals(
        revenue_by_category={c.value: revenue[c] for c in InflowCategory if c in revenue},
        expenses_by_category={c.value: expenses[c] for c in OutflowCategory if c in expenses},
        owner_withdrawals=expenses.get(OutflowCategory.OWNER_DRAW, 0.0),
        nsf_count=nsf_count,
        total_repayments=total_repayments,
        total_funding_received=total_funding,
        repayments_by_lender=by_lender,
    )
