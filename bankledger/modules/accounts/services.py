from decimal import Decimal
from typing import List, Optional, Union
import logging
import random
import time

from bankledger.core.config import settings
from bankledger.core.exceptions import (
    AccountNotFoundError,
    CustomerNotFoundError,
    InvalidFormatError,
    StoreUnavailableError,
)
from bankledger.core.store import AtomicUnit, LedgerStore
from bankledger.modules.accounts.models import AccountType
from bankledger.modules.accounts import schemas

logger = logging.getLogger(__name__)


class AccountService:
    """Account registry: opening accounts and looking them up by number"""

    def __init__(self, store: LedgerStore):
        self.store = store

    @staticmethod
    def generate_account_number() -> str:
        """Prefix, epoch milliseconds and a random 0-999 suffix"""
        millis = int(time.time() * 1000)
        return f"{settings.ACCOUNT_NUMBER_PREFIX}{millis}{random.randint(0, 999)}"

    @staticmethod
    def parse_account_type(account_type: Union[AccountType, str]) -> AccountType:
        """Resolve a case-insensitive account type name"""
        if isinstance(account_type, AccountType):
            return account_type
        try:
            return AccountType(str(account_type).strip().upper())
        except ValueError:
            allowed = "/".join(t.value for t in AccountType)
            raise InvalidFormatError(f"Invalid account type '{account_type}'. Expected one of {allowed}")

    async def _allocate_account_number(self, unit: AtomicUnit) -> str:
        for _ in range(settings.ACCOUNT_NUMBER_MAX_ATTEMPTS):
            account_number = self.generate_account_number()
            if not await self.store.account_number_exists(account_number, unit):
                return account_number
        raise StoreUnavailableError("Could not allocate a unique account number")

    async def create_account(
        self,
        customer_id: int,
        account_type: Union[AccountType, str] = AccountType.SAVINGS
    ) -> schemas.AccountRecord:
        """Open a zero-balance ACTIVE account for an existing customer"""
        resolved_type = self.parse_account_type(account_type)

        async def _open(unit: AtomicUnit) -> schemas.AccountRecord:
            customer = await self.store.find_customer_by_id(customer_id, unit)
            if customer is None:
                raise CustomerNotFoundError(customer_id)

            account_number = await self._allocate_account_number(unit)
            return await self.store.insert_account(customer_id, account_number, resolved_type, unit)

        account = await self.store.run_atomic(_open)
        logger.info(f"Opened {account.account_type.value} account {account.account_number} for customer {customer_id}")
        return account

    async def open_account(self, request: schemas.AccountCreateRequest) -> schemas.AccountRecord:
        return await self.create_account(request.customer_id, request.account_type)

    async def find_account(self, account_number: str) -> Optional[schemas.AccountRecord]:
        """Look up an account, None when the number is unknown"""
        async with self.store.atomic_unit() as unit:
            return await self.store.find_account_by_number(account_number, unit)

    async def get_account(self, account_number: str) -> schemas.AccountRecord:
        """Look up an account, raising when the number is unknown"""
        account = await self.find_account(account_number)
        if account is None:
            raise AccountNotFoundError(account_number)
        return account

    async def get_balance(self, account_number: str) -> Decimal:
        account = await self.get_account(account_number)
        return account.balance

    async def get_balance_details(self, account_number: str) -> schemas.BalanceResponse:
        account = await self.get_account(account_number)
        return schemas.BalanceResponse(
            account_number=account.account_number,
            account_type=account.account_type,
            balance=account.balance,
            status=account.status
        )

    async def list_customer_accounts(self, customer_id: int) -> List[schemas.AccountRecord]:
        """All accounts owned by a customer"""
        async with self.store.atomic_unit() as unit:
            grouped = await self.store.list_accounts_for_customers([customer_id], unit)
        return grouped[customer_id]
