"""Partition transactions into calendar-month buckets"""

from collections import defaultdict
from typing import Dict, List, Set

from mca_scorecard.domain.categories import is_mca_repayment, is_nsf_event
from mca_scorecard.domain.models import MonthlyBucket, NormalizedTransactions, TransactionType
from mca_scorecard.utils.date_utils import generate_month_range, month_key


def bucketize(normalized: NormalizedTransactions) -> List[MonthlyBucket]:
    """
    One bucket per calendar month of the analysis period, oldest first.

    Months without transactions are still present with zero values, so the
    series length always equals period.months_analyzed.
    """
    period = normalized.period
    buckets: Dict[str, MonthlyBucket] = {
        f"{year:04d}-{month:02d}": MonthlyBucket(month=f"{year:04d}-{month:02d}")
        for year, month in generate_month_range(period.start, period.end)
    }
    negative_dates: Dict[str, Set] = defaultdict(set)

    for txn in normalized.transactions:
        key = month_key(txn.date)
        bucket = buckets[key]

        if txn.type is TransactionType.CREDIT:
            bucket.revenue += txn.amount
        else:
            bucket.expenses += txn.amount
            if is_mca_repayment(txn):
                bucket.mca_payments += txn.amount
            if is_nsf_event(txn):
                bucket.nsf_count += 1

        if txn.running_balance is not None and txn.running_balance < 0:
            negative_dates[key].add(txn.date)

    for key, bucket in buckets.items():
        bucket.net_cash_flow = bucket.revenue - bucket.expenses
        bucket.negative_days = len(negative_dates[key])

    return list(buckets.values())
