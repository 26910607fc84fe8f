"""
Transaction engine

Deposits, withdrawals and transfers. Each operation re-reads the balance
from the store, validates, and writes the balance change together with its
ledger entry in one atomic unit. Amounts are exact two-place Decimals.
"""

from decimal import Decimal, InvalidOperation
from typing import List, Optional
import logging
import uuid

from bankledger.core.config import settings
from bankledger.core.exceptions import (
    AccountNotFoundError,
    InsufficientBalanceError,
    InvalidAmountError,
    SameAccountError,
)
from bankledger.core.store import AtomicUnit, LedgerStore
from bankledger.modules.accounts.schemas import AccountRecord
from bankledger.modules.transactions.models import TransactionType
from bankledger.modules.transactions.schemas import TransactionCreate, TransactionRecord

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
# Largest amount or balance a NUMERIC(15, 2) column holds
MAX_AMOUNT = Decimal("9999999999999.99")
DESCRIPTION_MAX_LENGTH = 255


class TransactionService:
    """Atomic money movement against the ledger store"""

    def __init__(self, store: LedgerStore):
        self.store = store

    @staticmethod
    def _generate_reference() -> str:
        """Generate a unique transaction reference"""
        return f"{settings.TRANSACTION_ID_PREFIX}-{uuid.uuid4().hex[:12].upper()}"

    @staticmethod
    def parse_amount(amount) -> Decimal:
        """Validate an amount and return it as a two-place Decimal"""
        if isinstance(amount, (float, bool)):
            raise InvalidAmountError("Amount must be given as a decimal, not a float")

        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmountError(f"Invalid amount: {amount!r}")

        if not value.is_finite():
            raise InvalidAmountError(f"Invalid amount: {amount!r}")
        if value <= 0:
            raise InvalidAmountError("Amount must be positive")
        if value > MAX_AMOUNT:
            raise InvalidAmountError(f"Amount exceeds the maximum of {MAX_AMOUNT}")
        if value.as_tuple().exponent < -2 and value != value.quantize(TWO_PLACES):
            raise InvalidAmountError("Amount cannot have more than two decimal places")

        return value.quantize(TWO_PLACES)

    async def _load_for_update(self, account_number: str, unit: AtomicUnit) -> AccountRecord:
        account = await self.store.find_account_by_number(account_number, unit, for_update=True)
        if account is None:
            raise AccountNotFoundError(account_number)
        return account

    async def _apply_balance(self, account: AccountRecord, delta: Decimal, unit: AtomicUnit) -> AccountRecord:
        balance = account.balance + delta
        if balance > MAX_AMOUNT:
            raise InvalidAmountError(
                f"Balance of {account.account_number} would exceed the maximum of {MAX_AMOUNT}"
            )
        return await self.store.save_account(
            account.model_copy(update={"balance": balance}),
            unit
        )

    async def _record(
        self,
        unit: AtomicUnit,
        account: AccountRecord,
        transaction_type: TransactionType,
        amount: Decimal,
        description: Optional[str],
        related_account_number: Optional[str] = None
    ) -> TransactionRecord:
        """Append a ledger entry stamped with the account's post-update balance"""
        return await self.store.save_transaction(
            TransactionCreate(
                transaction_id=self._generate_reference(),
                transaction_type=transaction_type,
                amount=amount,
                description=(description or "")[:DESCRIPTION_MAX_LENGTH],
                balance_after_transaction=account.balance,
                account_id=account.id,
                account_number=account.account_number,
                related_account_number=related_account_number
            ),
            unit
        )

    async def deposit(self, account_number: str, amount, description: Optional[str] = None) -> TransactionRecord:
        """Credit an account and record a DEPOSIT entry"""
        value = self.parse_amount(amount)

        async def _apply(unit: AtomicUnit) -> TransactionRecord:
            account = await self._load_for_update(account_number, unit)
            account = await self._apply_balance(account, value, unit)
            return await self._record(unit, account, TransactionType.DEPOSIT, value, description)

        transaction = await self.store.run_atomic(_apply)
        logger.info(
            f"Deposit {transaction.transaction_id}: {value} into {account_number}, "
            f"balance {transaction.balance_after_transaction}"
        )
        return transaction

    async def withdraw(self, account_number: str, amount, description: Optional[str] = None) -> TransactionRecord:
        """Debit an account and record a WITHDRAWAL entry"""
        value = self.parse_amount(amount)

        async def _apply(unit: AtomicUnit) -> TransactionRecord:
            account = await self._load_for_update(account_number, unit)
            if account.balance < value:
                raise InsufficientBalanceError(account_number, account.balance, value)

            account = await self._apply_balance(account, -value, unit)
            return await self._record(unit, account, TransactionType.WITHDRAWAL, value, description)

        transaction = await self.store.run_atomic(_apply)
        logger.info(
            f"Withdrawal {transaction.transaction_id}: {value} from {account_number}, "
            f"balance {transaction.balance_after_transaction}"
        )
        return transaction

    async def transfer(
        self,
        from_account_number: str,
        to_account_number: str,
        amount,
        description: Optional[str] = None
    ) -> TransactionRecord:
        """Move money between two accounts; returns the debit leg"""
        if from_account_number == to_account_number:
            raise SameAccountError(from_account_number)

        async def _apply(unit: AtomicUnit) -> TransactionRecord:
            # Rows are locked in ascending account-number order
            locked = {}
            for account_number in sorted((from_account_number, to_account_number)):
                locked[account_number] = await self._load_for_update(account_number, unit)

            value = self.parse_amount(amount)
            source = locked[from_account_number]
            if source.balance < value:
                raise InsufficientBalanceError(from_account_number, source.balance, value)

            source = await self._apply_balance(source, -value, unit)
            destination = await self._apply_balance(locked[to_account_number], value, unit)

            debit = await self._record(
                unit, source, TransactionType.TRANSFER, value,
                _leg_description(description, f"(To: {to_account_number})"),
                related_account_number=to_account_number
            )
            await self._record(
                unit, destination, TransactionType.TRANSFER, value,
                _leg_description(description, f"(From: {from_account_number})"),
                related_account_number=from_account_number
            )
            return debit

        transaction = await self.store.run_atomic(_apply)
        logger.info(
            f"Transfer {transaction.transaction_id}: {transaction.amount} "
            f"from {from_account_number} to {to_account_number}"
        )
        return transaction

    async def history(self, account_number: str) -> List[TransactionRecord]:
        """Ledger entries for an account, newest first"""
        async with self.store.atomic_unit() as unit:
            if await self.store.find_account_by_number(account_number, unit) is None:
                raise AccountNotFoundError(account_number)
            return await self.store.list_transactions_for_account(account_number, unit)


def _leg_description(description: Optional[str], counterparty: str) -> str:
    if description:
        return f"{description} {counterparty}"
    return counterparty
