"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class EmptyInputError(DomainException):
    """No transactions were supplied, so there is nothing to analyze"""

    pass


class InvalidTransactionError(DomainException):
    """Transaction record is malformed (negative amount, missing date, unknown type)"""

    def __init__(self, message: str, index: int | None = None, transaction_id: str | None = None):
        super().__init__(message)
        self.index = index
        self.transaction_id = transaction_id


class IncompleteMetricsError(DomainException):
    """A scorecard section could not be computed from the aggregated metrics"""

    def __init__(self, message: str, section: str | None = None):
        super().__init__(message)
        self.section = section
