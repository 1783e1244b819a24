from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AccountCreate(BaseModel):
    account_number: int = Field(..., gt=0, description="Business key chosen by the caller")
    name: str = Field(..., min_length=1, description="Name of the account holder; length is checked by the ledger")
    balance: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        decimal_places=2,
        description="Opening balance; recorded as a deposit when positive",
    )


class AccountResponse(BaseModel):
    id: UUID
    account_number: int
    name: str
    balance: Decimal = Field(..., ge=0)
    created_at: datetime


class MoneyMovementRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Amount with at most two decimals")


class TransferRequest(BaseModel):
    from_account_number: int = Field(..., gt=0)
    to_account_number: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, decimal_places=2)


class BalanceChangeResponse(BaseModel):
    account: AccountResponse
    new_balance: Decimal
    message: str


class TransferResponse(BaseModel):
    from_account: AccountResponse
    to_account: AccountResponse
    message: str


class CounterpartyResponse(BaseModel):
    account_number: int
    name: str


class TransactionResponse(BaseModel):
    id: UUID
    type: Literal["deposit", "withdraw", "transfer"]
    from_account_id: Optional[UUID] = None
    to_account_id: Optional[UUID] = None
    amount: Decimal
    created_at: datetime
    from_account: Optional[CounterpartyResponse] = None
    to_account: Optional[CounterpartyResponse] = None


class DashboardStatsResponse(BaseModel):
    total_accounts: int
    total_deposits: Decimal
    total_withdrawals: Decimal
    active_transfers: int
    total_deposits_display: str = Field(..., description="Deposits formatted for display, e.g. $1,250.00")
    total_withdrawals_display: str


class HealthResponse(BaseModel):
    status: str
    storage: Literal["memory", "sql"]
    durable: bool
