from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class Account(SQLModel, table=True):
    __tablename__ = "account"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    account_number: int = Field(unique=True, index=True, gt=0)
    name: str = Field(max_length=255)
    # Minor units (cents); SQLite has no exact decimal column type.
    balance: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class LedgerTransaction(SQLModel, table=True):
    __tablename__ = "ledger_transaction"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    sequence: int = Field(unique=True, index=True)
    type: str
    from_account_id: Optional[UUID] = Field(default=None, foreign_key="account.id", index=True)
    to_account_id: Optional[UUID] = Field(default=None, foreign_key="account.id", index=True)
    amount: int = Field(gt=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
