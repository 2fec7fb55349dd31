"""Unit tests for category mapping, lexical fallbacks and category totals"""

import pytest
from datetime import date
from mca_scorecard.domain.aggregator import aggregate_categories
from mca_scorecard.domain.categories import (
    InflowCategory,
    OutflowCategory,
    inflow_category,
    is_mca_repayment,
    is_nsf_event,
    lender_key,
    lender_label,
    outflow_category,
)
from mca_scorecard.domain.models import ParseQuality, TransactionType
from mca_scorecard.domain.normalizer import normalize_transactions


def test_unknown_labels_fall_into_catch_all(make_txn):
    """Test that labels outside the vocabulary are not dropped"""
    credit = make_txn(date(2024, 1, 1), 100.0, category="crypto_sale")
    debit = make_txn(date(2024, 1, 1), 100.0, TransactionType.DEBIT, category="yacht")

    assert inflow_category(credit) is InflowCategory.OTHER_INCOME
    assert outflow_category(debit) is OutflowCategory.OTHER_EXPENSE


def test_mca_label_on_either_side(make_txn):
    """Test MCA labels map to the MCA category of the transaction's side"""
    credit = make_txn(date(2024, 1, 1), 50000.0, category="mca_payment")
    debit = make_txn(date(2024, 1, 1), 500.0, TransactionType.DEBIT, category="mca_funding")

    assert inflow_category(credit) is InflowCategory.MCA_FUNDING
    assert outflow_category(debit) is OutflowCategory.MCA_PAYMENT


@pytest.mark.parametrize(
    "description,expected",
    [
        ("ONDECK CAPITAL DAILY ACH 88213", OutflowCategory.MCA_PAYMENT),
        ("Merchant Cash Advance Remit", OutflowCategory.MCA_PAYMENT),
        ("OVERDRAFT ITEM FEE", OutflowCategory.OVERDRAFT_FEE),
        ("NSF RETURNED ITEM FEE", OutflowCategory.NSF_FEE),
        ("OWNER DRAW TRANSFER", OutflowCategory.OWNER_DRAW),
        ("HOME DEPOT #4410", OutflowCategory.OTHER_EXPENSE),
    ],
)
def test_lexical_fallback_for_uncategorized_debits(make_txn, description, expected):
    """Test description matching when the upstream category is a placeholder"""
    txn = make_txn(date(2024, 1, 1), 10.0, TransactionType.DEBIT, description, category="unassigned")
    assert outflow_category(txn) is expected


def test_lexical_fallback_ignored_for_categorized_rows(make_txn):
    """Test that an explicit category wins over the description"""
    txn = make_txn(date(2024, 1, 1), 10.0, TransactionType.DEBIT, "KABBAGE LOAN", category="loan_payment")
    assert outflow_category(txn) is OutflowCategory.LOAN_PAYMENT


def test_waived_nsf_is_not_an_event(make_txn):
    """Test NSF waiver/reversal descriptions"""
    waived = make_txn(date(2024, 1, 1), 35.0, TransactionType.DEBIT, "NSF FEE WAIVED")
    charged = make_txn(date(2024, 1, 1), 35.0, TransactionType.DEBIT, "NSF FEE", category="bank_fee")
    refund = make_txn(date(2024, 1, 1), 35.0, TransactionType.CREDIT, "NSF FEE REFUND")

    assert is_nsf_event(waived) is False
    assert is_nsf_event(charged) is True
    assert is_nsf_event(refund) is False


@pytest.mark.parametrize(
    "description,expected",
    [
        ("RAPID FINANCE ACH 000123", "rapid finance ach"),
        ("Rapid  Finance ACH REF 99A12", "rapid finance ach"),
        ("FORA FINANCIAL 03/14", "fora financial"),
        ("ON DECK 0412 ID 99887", "on deck"),
        ("12345", "12345"),
    ],
)
def test_lender_key_strips_trailing_noise(description, expected):
    """Test repayment descriptions collapse to a stable lender key"""
    assert lender_key(description) == expected


def test_lender_label():
    """Test display label for lender keys"""
    assert lender_label("fora financial") == "FORA FINANCIAL"
    assert lender_label("") == "UNKNOWN FUNDER"


def test_aggregate_categories_totals(make_txn):
    """Test category sums, owner draws, NSF and MCA totals"""
    transactions = [
        make_txn(date(2024, 1, 1), 9000.0, category="card_processing"),
        make_txn(date(2024, 1, 2), 1000.0, description="Zelle from customer"),
        make_txn(date(2024, 1, 3), 25000.0, description="FUNDBOX ADVANCE", category="unassigned"),
        make_txn(date(2024, 1, 4), 2000.0, TransactionType.DEBIT, "Transfer", category="owner_draw"),
        make_txn(date(2024, 1, 5), 500.0, TransactionType.DEBIT, "FUNDBOX PMT 001", category="mca_payment"),
        make_txn(date(2024, 1, 6), 500.0, TransactionType.DEBIT, "FUNDBOX PMT 002", category="mca_payment"),
        make_txn(date(2024, 1, 7), 35.0, TransactionType.DEBIT, "OD FEE", category="overdraft_fee"),
    ]

    totals = aggregate_categories(transactions)

    assert totals.revenue_by_category == {
        "card_processing": 9000.0,
        "mca_funding": 25000.0,
        "other_income": 1000.0,
    }
    assert totals.expenses_by_category == {
        "mca_payment": 1000.0,
        "owner_draw": 2000.0,
        "overdraft_fee": 35.0,
    }
    assert totals.owner_withdrawals == 2000.0
    assert totals.nsf_count == 1
    assert totals.total_repayments == 1000.0
    assert totals.total_funding_received == 25000.0
    assert list(totals.repayments_by_lender) == ["fundbox pmt"]
    assert len(totals.repayments_by_lender["fundbox pmt"]) == 2


@pytest.mark.parametrize("label", ["unassigned_expense", "99.UNASSIGNED", "Unassigned Expense", None])
def test_unassigned_labels_still_surface_mca_debt(label):
    """Test upstream 'unassigned' spellings get the lexical fallback"""
    normalized = normalize_transactions([{
        "id": "m1",
        "date": "2024-02-01",
        "description": "ONDECK CAPITAL DAILY ACH",
        "amount": 500.0,
        "type": "DEBIT",
        "category": label,
        "parseQuality": "UNASSIGNED",
    }])

    totals = aggregate_categories(normalized.transactions)

    assert totals.expenses_by_category == {"mca_payment": 500.0}
    assert totals.total_repayments == 500.0


def test_unassigned_income_label_surfaces_funding(make_txn):
    """Test MCA funding tagged with the inflow placeholder"""
    txn = make_txn(date(2024, 1, 1), 40000.0, description="KABBAGE FUNDING", category="unassigned_income")
    assert inflow_category(txn) is InflowCategory.MCA_FUNDING


def test_unassigned_quality_lets_lexical_match_win(make_txn):
    """Test a guessed label yields to an MCA description, but is kept otherwise"""
    guessed_mca = make_txn(date(2024, 1, 1), 500.0, TransactionType.DEBIT, "FORA FINANCIAL",
                           category="loan_payment", parse_quality=ParseQuality.UNASSIGNED)
    guessed_rent = make_txn(date(2024, 1, 1), 500.0, TransactionType.DEBIT, "LANDLORD LLC",
                            category="rent", parse_quality=ParseQuality.UNASSIGNED)
    confident = make_txn(date(2024, 1, 1), 500.0, TransactionType.DEBIT, "FORA FINANCIAL",
                         category="loan_payment", parse_quality=ParseQuality.HIGH)

    assert is_mca_repayment(guessed_mca) is True
    assert outflow_category(guessed_rent) is OutflowCategory.RENT
    assert outflow_category(confident) is OutflowCategory.LOAN_PAYMENT


@pytest.mark.parametrize(
    "description",
    [
        "CREDIT CARD CASH ADVANCE",
        "VISA CARD CASH ADVANCE 0412",
        "CASH ADVANCE FEE",
        "ATM CASH ADVANCE",
        "DAILY ACH DEBIT CITY WATER",
    ],
)
def test_consumer_credit_is_not_mca(make_txn, description):
    """Test card advances and generic daily debits do not count as MCA debt"""
    txn = make_txn(date(2024, 1, 1), 200.0, TransactionType.DEBIT, description)
    assert is_mca_repayment(txn) is False


def test_business_cash_advance_is_mca(make_txn):
    """Test the generic advance phrase still matches outside card contexts"""
    txn = make_txn(date(2024, 1, 1), 200.0, TransactionType.DEBIT, "BUSINESS CASH ADVANCE REMIT")
    assert is_mca_repayment(txn) is True
