from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import Optional

from bankledger.modules.transactions.models import TransactionType

DESCRIPTION_ELLIPSIS = "..."


def truncate_description(description: Optional[str], width: int = 25) -> str:
    """Shorten a description for tabular display"""
    text = description or ""
    if len(text) <= width:
        return text
    return text[:width - len(DESCRIPTION_ELLIPSIS)] + DESCRIPTION_ELLIPSIS


class TransactionCreate(BaseModel):
    """Ledger entry about to be appended"""
    transaction_id: str
    transaction_type: TransactionType
    amount: Decimal
    description: Optional[str] = None
    balance_after_transaction: Decimal
    account_id: int
    account_number: str
    related_account_number: Optional[str] = None


class TransactionRecord(BaseModel):
    """Committed ledger entry"""
    id: int
    transaction_id: str
    transaction_type: TransactionType
    amount: Decimal
    description: Optional[str]
    transaction_date: datetime
    balance_after_transaction: Decimal
    account_id: int
    account_number: str
    related_account_number: Optional[str] = None

    class Config:
        from_attributes = True
