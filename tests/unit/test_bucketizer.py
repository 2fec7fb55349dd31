"""Unit tests for monthly bucketing"""

from datetime import date
from mca_scorecard.domain.bucketizer import bucketize
from mca_scorecard.domain.models import TransactionType
from mca_scorecard.domain.normalizer import normalize_transactions


def test_months_without_transactions_are_zero_filled(make_txn):
    """Test that a gap month is present with zero values"""
    normalized = normalize_transactions([
        make_txn(date(2024, 1, 15), 5000.0),
        make_txn(date(2024, 3, 15), 7000.0),
    ])

    buckets = bucketize(normalized)

    assert [b.month for b in buckets] == ["2024-01", "2024-02", "2024-03"]
    assert buckets[1].revenue == 0.0
    assert buckets[1].expenses == 0.0
    assert buckets[1].net_cash_flow == 0.0
    assert len(buckets) == normalized.period.months_analyzed


def test_buckets_cross_year_boundary(make_txn):
    """Test month keys across December/January"""
    normalized = normalize_transactions([
        make_txn(date(2023, 12, 31), 100.0),
        make_txn(date(2024, 1, 1), 100.0),
    ])

    assert [b.month for b in bucketize(normalized)] == ["2023-12", "2024-01"]


def test_bucket_sums_and_net_cash_flow(make_txn):
    """Test per-month revenue, expenses, MCA repayments and NSF counts"""
    normalized = normalize_transactions([
        make_txn(date(2024, 2, 1), 8000.0, category="card_processing"),
        make_txn(date(2024, 2, 2), 300.0, TransactionType.DEBIT, "ONDECK PMT", category="mca_payment"),
        make_txn(date(2024, 2, 3), 35.0, TransactionType.DEBIT, "NSF FEE", category="nsf_fee"),
        make_txn(date(2024, 2, 4), 1000.0, TransactionType.DEBIT, "RENT", category="rent"),
    ])

    bucket = bucketize(normalized)[0]

    assert bucket.revenue == 8000.0
    assert bucket.expenses == 1335.0
    assert bucket.net_cash_flow == 6665.0
    assert bucket.mca_payments == 300.0
    assert bucket.nsf_count == 1


def test_negative_days_count_distinct_dates(make_txn):
    """Test that several negative balances on one day count as one day"""
    normalized = normalize_transactions([
        make_txn(date(2024, 4, 1), 10.0, TransactionType.DEBIT, "Fee", running_balance=-5.0),
        make_txn(date(2024, 4, 1), 10.0, TransactionType.DEBIT, "Wire fee", running_balance=-15.0),
        make_txn(date(2024, 4, 2), 10.0, TransactionType.DEBIT, "Fee", running_balance=-25.0),
        make_txn(date(2024, 4, 3), 100.0, running_balance=75.0),
    ])

    assert bucketize(normalized)[0].negative_days == 2
