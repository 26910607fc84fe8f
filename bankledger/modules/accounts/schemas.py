from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal

from bankledger.modules.accounts.models import AccountType, AccountStatus


# Account Creation
class AccountCreateRequest(BaseModel):
    """Request to open an account for an existing customer"""
    customer_id: int
    account_type: AccountType = AccountType.SAVINGS


class AccountRecord(BaseModel):
    """Plain account record handed between the store and the services"""
    id: int
    customer_id: int
    account_number: str
    account_type: AccountType
    balance: Decimal
    status: AccountStatus
    version: int
    created_at: datetime

    class Config:
        from_attributes = True


class BalanceResponse(BaseModel):
    """Account balance information"""
    account_number: str
    account_type: AccountType
    balance: Decimal
    status: AccountStatus
