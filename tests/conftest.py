"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from fastapi.testclient import TestClient
from mca_scorecard.api.main import create_app
from mca_scorecard.domain.models import Transaction, TransactionType


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    return TestClient(create_app())


@pytest.fixture
def make_txn():
    """Factory for transactions with sensible defaults"""
    counter = {"n": 0}

    def _make(
        day: date,
        amount: float,
        type: TransactionType = TransactionType.CREDIT,
        description: str = "Deposit",
        category: str | None = None,
        running_balance: float | None = None,
        **kwargs,
    ) -> Transaction:
        counter["n"] += 1
        return Transaction(
            id=kwargs.pop("id", f"tx_{counter['n']}"),
            date=day,
            description=description,
            amount=amount,
            type=type,
            running_balance=running_balance,
            category=category,
            **kwargs,
        )

    return _make


@pytest.fixture
def steady_deal() -> list[Transaction]:
    """Six months of $10k card revenue against $6k of operating expenses"""
    transactions = []
    for month in range(1, 7):
        transactions.append(
            Transaction(
                id=f"credit_{month}",
                date=date(2024, month, 5),
                description="SQUARE DEPOSIT",
                amount=10000.0,
                type=TransactionType.CREDIT,
                running_balance=15000.0,
                category="card_processing",
            )
        )
        transactions.append(
            Transaction(
                id=f"rent_{month}",
                date=date(2024, month, 10),
                description="RENT PAYMENT",
                amount=4000.0,
                type=TransactionType.DEBIT,
                running_balance=11000.0,
                category="rent",
            )
        )
        transactions.append(
            Transaction(
                id=f"payroll_{month}",
                date=date(2024, month, 20),
                description="GUSTO PAYROLL",
                amount=2000.0,
                type=TransactionType.DEBIT,
                running_balance=9000.0,
                category="payroll",
            )
        )
    return transactions


@pytest.fixture
def distressed_deal() -> list[Transaction]:
    """Three months with heavy MCA repayments and repeated NSF charges"""
    base_date = date(2024, 1, 2)
    transactions = []
    for month in range(3):
        transactions.append(
            Transaction(
                id=f"credit_{month}",
                date=base_date + timedelta(days=month * 30),
                description="ACH DEPOSIT",
                amount=10000.0,
                type=TransactionType.CREDIT,
                running_balance=2000.0,
                category="ach_deposit",
            )
        )
        transactions.append(
            Transaction(
                id=f"mca_{month}",
                date=base_date + timedelta(days=month * 30 + 1),
                description="RAPID FINANCE ACH",
                amount=4500.0,
                type=TransactionType.DEBIT,
                running_balance=500.0,
                category="mca_payment",
            )
        )
    for i in range(7):
        transactions.append(
            Transaction(
                id=f"nsf_{i}",
                date=base_date + timedelta(days=i * 10 + 3),
                description="NSF FEE",
                amount=35.0,
                type=TransactionType.DEBIT,
                running_balance=100.0,
                category="nsf_fee",
            )
        )
    return transactions
