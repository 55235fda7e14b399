"""
Domain Errors Module

Exceptions raised by the managers when a banking rule is violated. Each error
carries the HTTP status the API layer answers with.
"""


class BankingError(Exception):
    """Base class for all portal errors"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BankingError):
    """A customer, account, branch, loan or payment does not exist"""
    status_code = 404


class ValidationError(BankingError):
    """Invalid input or an operation not allowed in the record's current state"""
    status_code = 400


class InsufficientFundsError(ValidationError):
    """The account balance does not cover the requested debit"""


class LimitExceededError(BankingError):
    """A configured business limit would be exceeded"""
    status_code = 406


class ConflictError(BankingError):
    """A record with the same unique key already exists"""
    status_code = 409
