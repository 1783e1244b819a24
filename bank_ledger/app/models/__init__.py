from .db import Account as AccountModel
from .db import LedgerTransaction as LedgerTransactionModel
from .domain import (
    Account,
    BalanceChange,
    Counterparty,
    DashboardStats,
    Deposit,
    Transaction,
    TransactionDetails,
    TransactionType,
    Transfer,
    Withdrawal,
)
from .schemas import (
    AccountCreate,
    AccountResponse,
    BalanceChangeResponse,
    CounterpartyResponse,
    DashboardStatsResponse,
    HealthResponse,
    MoneyMovementRequest,
    TransactionResponse,
    TransferRequest,
    TransferResponse,
)

__all__ = [
    "Account",
    "AccountCreate",
    "AccountModel",
    "AccountResponse",
    "BalanceChange",
    "BalanceChangeResponse",
    "Counterparty",
    "CounterpartyResponse",
    "DashboardStats",
    "DashboardStatsResponse",
    "Deposit",
    "HealthResponse",
    "LedgerTransactionModel",
    "MoneyMovementRequest",
    "Transaction",
    "TransactionDetails",
    "TransactionResponse",
    "TransactionType",
    "Transfer",
    "TransferRequest",
    "TransferResponse",
    "Withdrawal",
]
