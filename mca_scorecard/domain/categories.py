"""
Category vocabulary and lexical fallbacks for bank transactions.

Categories arrive from the upstream tagging pipeline. The engine does not
re-classify them; it only maps labels onto a closed vocabulary (with a
catch-all key per side) and, for transactions left uncategorized or tagged
with no confidence, looks at the description to still surface MCA debt,
NSF events and owner draws.
"""

import re
from enum import Enum
from typing import Optional

from mca_scorecard.domain.models import ParseQuality, Transaction, TransactionType


class InflowCategory(str, Enum):
    CARD_PROCESSING = "card_processing"
    ACH_DEPOSIT = "ach_deposit"
    WIRE_TRANSFER = "wire_transfer"
    CASH_DEPOSIT = "cash_deposit"
    CHECK_DEPOSIT = "check_deposit"
    MCA_FUNDING = "mca_funding"
    LOAN_RECEIVED = "loan_received"
    TAX_REFUND = "tax_refund"
    OTHER_INCOME = "other_income"


class OutflowCategory(str, Enum):
    MCA_PAYMENT = "mca_payment"
    LOAN_PAYMENT = "loan_payment"
    RENT = "rent"
    UTILITIES = "utilities"
    PAYROLL = "payroll"
    INSURANCE = "insurance"
    INVENTORY = "inventory"
    MARKETING = "marketing"
    PROFESSIONAL_SERVICES = "professional_services"
    OWNER_DRAW = "owner_draw"
    ATM_WITHDRAWAL = "atm_withdrawal"
    PERSONAL_TRANSFER = "personal_transfer"
    NSF_FEE = "nsf_fee"
    OVERDRAFT_FEE = "overdraft_fee"
    BANK_FEE = "bank_fee"
    TAX_PAYMENT = "tax_payment"
    OTHER_EXPENSE = "other_expense"


INFLOW_LABELS = {c.value: c for c in InflowCategory}
OUTFLOW_LABELS = {c.value: c for c in OutflowCategory}

# MCA movement is MCA-related whichever side it was tagged on
INFLOW_LABELS["mca_payment"] = InflowCategory.MCA_FUNDING
OUTFLOW_LABELS["mca_funding"] = OutflowCategory.MCA_PAYMENT

# Placeholders the tagging pipeline writes when it could not decide
UNCATEGORIZED_LABELS = {
    "unassigned",
    "unassigned_income",
    "unassigned_expense",
    "uncategorized",
    "unknown",
    "99_unassigned",
}

NSF_CATEGORIES = {OutflowCategory.NSF_FEE, OutflowCategory.OVERDRAFT_FEE}

MCA_PATTERNS = [
    r"merchant\s*cash",
    r"\bmca\b",
    r"cash\s*advance",
    r"business\s*advance",
    r"revenue\s*based",
    r"split\s*funding",
    r"ebf\s*holdings", r"everest\s*business",
    r"lending\s*point",
    r"fundbox",
    r"blue\s*vine",
    r"on\s*deck",
    r"kabbage",
    r"can\s*capital",
    r"rapid\s*financ",
    r"credibly",
    r"fora\s*financial",
    r"pearl\s*capital",
    r"forward\s*financing",
    r"clearco",
    r"capify",
    r"libertas",
    r"bizfi", r"bizfund",
    r"yellowstone\s*capital",
    r"national\s*funding",
    r"payability",
    r"fundkite",
    r"kalamata",
    r"cloudfund",
    r"itria\s*ventures",
    r"capytal",
]

NSF_PATTERNS = [
    r"\bnsf\b",
    r"non[-\s]*sufficient",
    r"overdraft",
    r"insufficient",
    r"returned\s*item",
    r"\bod\s*fee",
]

NSF_WAIVER_PATTERNS = [
    r"waived",
    r"not\s*charged",
    r"reversed",
    r"reversal",
    r"refund",
    r"credit\s*back",
    r"overdraft\s*(protection\s*)?transfer",
    r"od\s*transfer",
]

OWNER_DRAW_PATTERNS = [
    r"owner\s*(draw|distribution)",
    r"partner\s*draw",
    r"member\s*distribution",
    r"shareholder\s*distribution",
]

# Consumer credit look-alikes of the generic MCA phrases above
NON_MCA_PATTERNS = [
    r"credit\s*card",
    r"\bcard\b.*cash\s*advance",
    r"cash\s*advance\s*(fee|interest)",
    r"\batm\b",
]

_MCA_RE = re.compile("|".join(MCA_PATTERNS), re.IGNORECASE)
_NON_MCA_RE = re.compile("|".join(NON_MCA_PATTERNS), re.IGNORECASE)
_NSF_RE = re.compile("|".join(NSF_PATTERNS), re.IGNORECASE)
_NSF_WAIVER_RE = re.compile("|".join(NSF_WAIVER_PATTERNS), re.IGNORECASE)
_OWNER_DRAW_RE = re.compile("|".join(OWNER_DRAW_PATTERNS), re.IGNORECASE)

# Trailing noise on repayment descriptions: reference ids, numbers, dates
_TRAILING_NOISE_RE = re.compile(
    r"(?:^|\s)(?:"
    r"(?:id|ref|trace|conf|txn|tran|seq)[:#.\s]*[a-z0-9-]*\d[a-z0-9-]*"
    r"|\d{1,4}[/-]\d{1,2}(?:[/-]\d{2,4})?"
    r"|#?[a-z]*\d[a-z0-9-]*"
    r")[\s:#*.-]*$"
)


def is_uncategorized(txn: Transaction) -> bool:
    return txn.category is None or txn.category in UNCATEGORIZED_LABELS


def is_low_confidence(txn: Transaction) -> bool:
    """Upstream could not place the row; its label, if any, is only a guess"""
    return is_uncategorized(txn) or txn.parse_quality is ParseQuality.UNASSIGNED


def is_mca_text(description: str) -> bool:
    return bool(_MCA_RE.search(description)) and not _NON_MCA_RE.search(description)


def _lexical_outflow(description: str) -> Optional[OutflowCategory]:
    if is_mca_text(description):
        return OutflowCategory.MCA_PAYMENT
    if _NSF_RE.search(description) and not _NSF_WAIVER_RE.search(description):
        if re.search(r"overdraft", description, re.IGNORECASE):
            return OutflowCategory.OVERDRAFT_FEE
        return OutflowCategory.NSF_FEE
    if _OWNER_DRAW_RE.search(description):
        return OutflowCategory.OWNER_DRAW
    return None


def inflow_category(txn: Transaction) -> InflowCategory:
    """
    Effective inflow category of a CREDIT; unknown labels land in other_income.

    On low-confidence rows a lender match in the description wins over the label.
    """
    if is_low_confidence(txn) and is_mca_text(txn.description):
        return InflowCategory.MCA_FUNDING
    if is_uncategorized(txn):
        return InflowCategory.OTHER_INCOME
    return INFLOW_LABELS.get(txn.category, InflowCategory.OTHER_INCOME)


def outflow_category(txn: Transaction) -> OutflowCategory:
    """
    Effective outflow category of a DEBIT; unknown labels land in other_expense.

    On low-confidence rows a lexical MCA, NSF or owner draw match wins over
    the label. A confidently tagged row keeps its category.
    """
    if is_low_confidence(txn):
        lexical = _lexical_outflow(txn.description)
        if lexical is not None:
            return lexical
    if is_uncategorized(txn):
        return OutflowCategory.OTHER_EXPENSE
    return OUTFLOW_LABELS.get(txn.category, OutflowCategory.OTHER_EXPENSE)


def is_mca_repayment(txn: Transaction) -> bool:
    return txn.type is TransactionType.DEBIT and outflow_category(txn) is OutflowCategory.MCA_PAYMENT


def is_mca_funding(txn: Transaction) -> bool:
    return txn.type is TransactionType.CREDIT and inflow_category(txn) is InflowCategory.MCA_FUNDING


def is_nsf_event(txn: Transaction) -> bool:
    """NSF/overdraft charge: tagged as such, or described as such and not waived"""
    if txn.type is not TransactionType.DEBIT:
        return False
    if outflow_category(txn) in NSF_CATEGORIES:
        return True
    return bool(_NSF_RE.search(txn.description)) and not _NSF_WAIVER_RE.search(txn.description)


def lender_key(description: str) -> str:
    """
    Grouping key for MCA repayments: lowercase, whitespace collapsed and
    trailing ids/dates stripped. Two repayments belong to the same funder
    only when their keys are equal.
    """
    text = " ".join(description.lower().split())
    while True:
        stripped = _TRAILING_NOISE_RE.sub("", text).strip()
        if not stripped or stripped == text:
            return text
        text = stripped


def lender_label(key: Optional[str]) -> str:
    return key.upper() if key else "UNKNOWN FUNDER"
