"""Ledger exceptions

Every engine operation either returns a record or raises exactly one of the
errors below. The console reports them; nothing in the core swallows them.
"""


class LedgerError(Exception):
    """Base exception for the ledger"""

    pass


class AccountNotFoundError(LedgerError):
    """No account with the given account number"""

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(f"Account not found: {account_number}")


class CustomerNotFoundError(LedgerError):
    """No customer matches the given reference"""

    def __init__(self, reference):
        self.reference = reference
        super().__init__(f"Customer not found: {reference}")


class InvalidAmountError(LedgerError):
    """Amount is not a positive two-decimal value"""

    pass


class InsufficientBalanceError(LedgerError):
    """Account balance does not cover the requested amount"""

    def __init__(self, account_number: str, available, requested):
        self.account_number = account_number
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient balance in {account_number}. Available: {available}, requested: {requested}"
        )


class SameAccountError(LedgerError):
    """Transfer source and destination are the same account"""

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(f"Cannot transfer to the same account: {account_number}")


class DuplicateIdentityError(LedgerError):
    """PAN or Aadhar number is already registered"""

    pass


class InvalidFormatError(LedgerError):
    """Input does not match the required format"""

    pass


class StoreUnavailableError(LedgerError):
    """Underlying persistence is unreachable or failed"""

    pass


class ConcurrencyConflictError(StoreUnavailableError):
    """Concurrent writers kept conflicting on the same rows"""

    pass
