"""Validate raw transaction records and resolve the analysis period"""

import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from mca_scorecard.domain.exceptions import EmptyInputError, InvalidTransactionError
from mca_scorecard.domain.models import (
    AnalysisPeriod,
    NormalizedTransactions,
    ParseQuality,
    Transaction,
    TransactionType,
)
from mca_scorecard.utils.date_utils import months_spanned

# Statement summary lines that parsers sometimes emit as transactions
STATEMENT_SUMMARY_PATTERNS = [
    r"^previous\s*balance",
    r"^opening\s*balance",
    r"^beginning\s*balance",
    r"^closing\s*balance",
    r"^ending\s*balance",
    r"^new\s*balance",
    r"^balance\s*forward",
    r"^statement\s*period",
]

_STATEMENT_SUMMARY_RE = re.compile("|".join(STATEMENT_SUMMARY_PATTERNS), re.IGNORECASE)

# Accepted spellings per field; ingestion exports use camelCase
FIELD_ALIASES = {
    "id": ("id", "transaction_id", "transactionId"),
    "running_balance": ("running_balance", "runningBalance"),
    "parse_quality": ("parse_quality", "parseQuality"),
    "subcategory": ("subcategory", "subCategory", "sub_category"),
}


def normalize_transactions(records: Iterable[Any]) -> NormalizedTransactions:
    """
    Turn an unordered collection of transactions into the engine's canonical shape.

    Records may be Transaction instances or mappings (snake_case or camelCase keys).
    Malformed records are rejected, never repaired. Statement summary rows
    (opening/ending balance, statement period) are dropped, and so are exact
    repeats of the same date, description, amount and type from overlapping uploads.

    Raises:
        EmptyInputError: No records supplied, or none left after filtering
        InvalidTransactionError: Negative amount, missing date, unknown type, ...
    """
    records = list(records)
    if not records:
        raise EmptyInputError("No transactions available for analysis")

    transactions = [_coerce(record, index) for index, record in enumerate(records)]
    transactions = deduplicate(t for t in transactions if not is_statement_summary(t.description))
    if not transactions:
        raise EmptyInputError("Only statement summary rows were supplied")

    # sorted() is stable, so same-day transactions keep their input order
    ordered = tuple(sorted(transactions, key=lambda t: t.date))
    start, end = ordered[0].date, ordered[-1].date

    return NormalizedTransactions(
        transactions=ordered,
        period=AnalysisPeriod(start=start, end=end, months_analyzed=months_spanned(start, end)),
    )


def is_statement_summary(description: str) -> bool:
    return bool(_STATEMENT_SUMMARY_RE.search(description.strip()))


def deduplicate(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Keep the first of each (date, description, amount, type); ids are not compared"""
    seen = set()
    unique = []
    for txn in transactions:
        key = (txn.date, " ".join(txn.description.lower().split()), round(txn.amount, 2), txn.type)
        if key not in seen:
            seen.add(key)
            unique.append(txn)
    return unique


def _field(fields: Mapping, name: str):
    for key in FIELD_ALIASES.get(name, (name,)):
        value = fields.get(key)
        if value is not None:
            return value
    return None


def _coerce(record: Any, index: int) -> Transaction:
    if isinstance(record, Transaction):
        fields = {
            "id": record.id,
            "date": record.date,
            "description": record.description,
            "amount": record.amount,
            "type": record.type,
            "running_balance": record.running_balance,
            "category": record.category,
            "subcategory": record.subcategory,
            "parse_quality": record.parse_quality,
        }
    elif isinstance(record, Mapping):
        fields = record
    else:
        raise InvalidTransactionError(
            f"Transaction #{index} has unsupported type {type(record).__name__}", index=index
        )

    txn_id = str(_field(fields, "id") or index)

    def fail(reason: str) -> InvalidTransactionError:
        return InvalidTransactionError(f"Transaction {txn_id} (#{index}): {reason}", index=index, transaction_id=txn_id)

    return Transaction(
        id=txn_id,
        date=_parse_date(fields.get("date"), fail),
        description=str(fields.get("description") or ""),
        amount=_parse_amount(fields.get("amount"), fail),
        type=_parse_type(fields.get("type"), fail),
        running_balance=_parse_balance(_field(fields, "running_balance"), fail),
        category=_parse_label(fields.get("category")),
        subcategory=_field(fields, "subcategory") or None,
        parse_quality=_parse_quality(_field(fields, "parse_quality"), fail),
    )


def _parse_date(value, fail) -> date:
    if value is None or value == "":
        raise fail("missing date")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise fail(f"unparseable date {value!r}")
    raise fail(f"unsupported date value {value!r}")


def _to_number(value, fail, what: str) -> float:
    if isinstance(value, bool):
        raise fail(f"{what} must be numeric, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise fail(f"{what} must be numeric, got {value!r}")
    if math.isnan(number) or math.isinf(number):
        raise fail(f"{what} must be finite, got {value!r}")
    return number


def _parse_amount(value, fail) -> float:
    if value is None:
        raise fail("missing amount")
    amount = _to_number(value, fail, "amount")
    if amount < 0:
        raise fail(f"negative amount {amount}; direction must be given by type")
    return amount


def _parse_balance(value, fail) -> Optional[float]:
    if value is None or value == "":
        return None
    return _to_number(value, fail, "running balance")


def _parse_type(value, fail) -> TransactionType:
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().upper())
    except ValueError:
        raise fail(f"unknown transaction type {value!r}")


def _parse_quality(value, fail) -> Optional[ParseQuality]:
    if value is None or value == "":
        return None
    if isinstance(value, ParseQuality):
        return value
    try:
        return ParseQuality(str(value).strip().upper())
    except ValueError:
        raise fail(f"unknown parse quality {value!r}")


def _parse_label(value) -> Optional[str]:
    if value is None:
        return None
    label = "_".join(re.sub(r"[.\-]", " ", str(value).strip().lower()).split())
    return label or None
