class LedgerError(Exception):
    """Base class for every error the ledger reports to its callers."""


class InvalidInputError(LedgerError, ValueError):
    """Raised when an argument is malformed or out of range."""


class DuplicateAccountError(LedgerError):
    """Raised when an account number is already taken."""


class AccountNotFoundError(LedgerError):
    """Raised when an account number is missing from the store."""


class InsufficientFundsError(LedgerError):
    """Raised when a withdrawal/transfer would drop balance below zero."""


class SameAccountTransferError(LedgerError):
    """Raised when a transfer names the same account on both sides."""
