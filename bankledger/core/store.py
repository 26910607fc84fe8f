"""
Ledger Store

Persistence boundary for customers, accounts and ledger entries. Every read
and write runs inside an AtomicUnit, one database session whose changes
commit or roll back together. Services never keep sessions between calls.

Balance writes are version-checked so a stale read can never overwrite a
newer balance; conflicts surface as ConcurrencyConflictError and
run_atomic() replays the whole unit a bounded number of times.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

from sqlalchemy import select, update, func
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from bankledger.core.config import settings
from bankledger.core.database import build_session_factory
from bankledger.core.exceptions import (
    ConcurrencyConflictError,
    DuplicateIdentityError,
    StoreUnavailableError,
)
from bankledger.modules.accounts.models import Account, AccountType, AccountStatus
from bankledger.modules.accounts.schemas import AccountRecord
from bankledger.modules.customers.models import Customer
from bankledger.modules.customers.schemas import CustomerRecord
from bankledger.modules.transactions.models import Transaction
from bankledger.modules.transactions.schemas import TransactionCreate, TransactionRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected
LOCK_CONTENTION_SQLSTATES = {"40001", "40P01"}


def is_lock_contention(exc: DBAPIError) -> bool:
    """Whether the driver reported a lock conflict rather than an outage"""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in LOCK_CONTENTION_SQLSTATES:
        return True
    return "database is locked" in str(orig).lower()


def _transaction_record(row: Transaction, account_number: str) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,
        transaction_id=row.transaction_id,
        transaction_type=row.transaction_type,
        amount=row.amount,
        description=row.description,
        transaction_date=row.transaction_date,
        balance_after_transaction=row.balance_after_transaction,
        account_id=row.account_id,
        account_number=account_number,
        related_account_number=row.related_account_number
    )


class AtomicUnit:
    """Handle for one all-or-nothing group of store operations"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def __repr__(self):
        return f"<AtomicUnit(session={id(self.session):#x})>"


class LedgerStore:
    """Relational ledger store backed by an async SQLAlchemy session factory"""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        max_attempts: Optional[int] = None,
        retry_backoff: Optional[float] = None
    ):
        self.session_factory = session_factory
        self.max_attempts = max_attempts or settings.STORE_MAX_ATTEMPTS
        self.retry_backoff = settings.STORE_RETRY_BACKOFF_SECONDS if retry_backoff is None else retry_backoff

    @classmethod
    def from_engine(cls, engine: AsyncEngine, **kwargs) -> "LedgerStore":
        return cls(build_session_factory(engine), **kwargs)

    # ------------------------------------------------------------------
    # Transactional bracketing
    # ------------------------------------------------------------------

    async def begin(self) -> AtomicUnit:
        """Open a session and start its transaction"""
        session = self.session_factory()
        try:
            await session.begin()
        except (DBAPIError, OSError) as e:
            await session.close()
            raise self._translate(e) from e
        return AtomicUnit(session)

    async def commit(self, unit: AtomicUnit) -> None:
        """Commit and release the unit's session"""
        try:
            await unit.session.commit()
        except (DBAPIError, OSError) as e:
            await self._rollback_quietly(unit)
            raise self._translate(e) from e
        finally:
            await unit.session.close()

    async def abort(self, unit: AtomicUnit) -> None:
        """Roll back and release the unit's session"""
        try:
            await self._rollback_quietly(unit)
        finally:
            await unit.session.close()

    async def _rollback_quietly(self, unit: AtomicUnit) -> None:
        # The caller is already propagating the failure that caused the rollback
        try:
            await unit.session.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Rollback failed: {str(e)}")

    @asynccontextmanager
    async def atomic_unit(self) -> AsyncIterator[AtomicUnit]:
        """Commit on success, roll back on any exception"""
        unit = await self.begin()
        try:
            yield unit
        except (DBAPIError, OSError) as e:
            await self.abort(unit)
            raise self._translate(e) from e
        except BaseException:
            await self.abort(unit)
            raise
        else:
            await self.commit(unit)

    async def run_atomic(self, operation: Callable[[AtomicUnit], Awaitable[T]]) -> T:
        """Run operation in a fresh unit, replaying it on concurrency conflicts"""
        attempt = 1
        while True:
            try:
                async with self.atomic_unit() as unit:
                    return await operation(unit)
            except ConcurrencyConflictError as e:
                if attempt >= self.max_attempts:
                    logger.error(f"Giving up after {attempt} attempts: {str(e)}")
                    raise
                logger.warning(f"Conflict on attempt {attempt}/{self.max_attempts}, retrying: {str(e)}")
                await asyncio.sleep(self.retry_backoff * attempt)
                attempt += 1

    def _translate(self, exc: Exception) -> StoreUnavailableError:
        if isinstance(exc, DBAPIError) and is_lock_contention(exc):
            return ConcurrencyConflictError(f"Lock contention: {exc.orig}")
        return StoreUnavailableError(f"Ledger store failure: {exc}")

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def find_account_by_number(
        self,
        account_number: str,
        unit: AtomicUnit,
        for_update: bool = False
    ) -> Optional[AccountRecord]:
        """Load an account; for_update takes a row lock where the backend supports it"""
        stmt = (
            select(Account)
            .where(Account.account_number == account_number)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await unit.session.execute(stmt)
        account = result.scalar_one_or_none()
        if account is None:
            return None
        return AccountRecord.model_validate(account)

    async def save_account(self, account: AccountRecord, unit: AtomicUnit) -> AccountRecord:
        """Persist balance and status; fails if the row changed since it was read"""
        result = await unit.session.execute(
            update(Account)
            .where(Account.id == account.id, Account.version == account.version)
            .values(
                balance=account.balance,
                status=account.status,
                version=account.version + 1
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConcurrencyConflictError(
                f"Account {account.account_number} was modified concurrently"
            )
        return account.model_copy(update={"version": account.version + 1})

    async def insert_account(
        self,
        customer_id: int,
        account_number: str,
        account_type: AccountType,
        unit: AtomicUnit
    ) -> AccountRecord:
        """Create an account row with zero balance"""
        account = Account(
            customer_id=customer_id,
            account_number=account_number,
            account_type=account_type,
            balance=0,
            status=AccountStatus.ACTIVE,
            version=1,
            created_at=datetime.now(timezone.utc)
        )
        unit.session.add(account)
        try:
            await unit.session.flush()
        except IntegrityError as e:
            # Another writer took the same number between the check and the insert
            raise ConcurrencyConflictError(f"Account number {account_number} already taken") from e
        return AccountRecord.model_validate(account)

    async def account_number_exists(self, account_number: str, unit: AtomicUnit) -> bool:
        result = await unit.session.execute(
            select(Account.id).where(Account.account_number == account_number)
        )
        return result.first() is not None

    async def list_accounts_for_customers(
        self,
        customer_ids: Iterable[int],
        unit: AtomicUnit
    ) -> Dict[int, List[AccountRecord]]:
        """Accounts grouped by owning customer"""
        ids = list(customer_ids)
        grouped: Dict[int, List[AccountRecord]] = {customer_id: [] for customer_id in ids}
        if not ids:
            return grouped

        result = await unit.session.execute(
            select(Account)
            .where(Account.customer_id.in_(ids))
            .order_by(Account.customer_id, Account.id)
        )
        for account in result.scalars().all():
            grouped[account.customer_id].append(AccountRecord.model_validate(account))
        return grouped

    # ------------------------------------------------------------------
    # Ledger entries
    # ------------------------------------------------------------------

    async def save_transaction(self, transaction: TransactionCreate, unit: AtomicUnit) -> TransactionRecord:
        """Append a ledger entry"""
        row = Transaction(
            transaction_id=transaction.transaction_id,
            transaction_type=transaction.transaction_type,
            amount=transaction.amount,
            description=transaction.description,
            transaction_date=datetime.now(timezone.utc),
            balance_after_transaction=transaction.balance_after_transaction,
            account_id=transaction.account_id,
            related_account_number=transaction.related_account_number
        )
        unit.session.add(row)
        await unit.session.flush()
        return _transaction_record(row, transaction.account_number)

    async def list_transactions_for_account(self, account_number: str, unit: AtomicUnit) -> List[TransactionRecord]:
        """Ledger entries for an account, newest first"""
        result = await unit.session.execute(
            select(Transaction, Account.account_number)
            .join(Account, Transaction.account_id == Account.id)
            .where(Account.account_number == account_number)
            .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        )
        return [_transaction_record(row, number) for row, number in result.all()]

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    async def find_customer_by_id(self, customer_id: int, unit: AtomicUnit) -> Optional[CustomerRecord]:
        customer = await unit.session.get(Customer, customer_id)
        if customer is None:
            return None
        return CustomerRecord.model_validate(customer)

    async def find_customer_by_pan(self, pan_number: str, unit: AtomicUnit) -> Optional[CustomerRecord]:
        result = await unit.session.execute(
            select(Customer).where(Customer.pan_number == pan_number.upper())
        )
        customer = result.scalar_one_or_none()
        if customer is None:
            return None
        return CustomerRecord.model_validate(customer)

    async def find_customer_by_aadhar(self, aadhar_number: str, unit: AtomicUnit) -> Optional[CustomerRecord]:
        result = await unit.session.execute(
            select(Customer).where(Customer.aadhar_number == aadhar_number)
        )
        customer = result.scalar_one_or_none()
        if customer is None:
            return None
        return CustomerRecord.model_validate(customer)

    async def save_customer(self, customer: Customer, unit: AtomicUnit) -> CustomerRecord:
        """Insert a new customer"""
        unit.session.add(customer)
        try:
            await unit.session.flush()
        except IntegrityError as e:
            raise DuplicateIdentityError("PAN or Aadhar number already registered") from e
        return CustomerRecord.model_validate(customer)

    async def list_customers(self, unit: AtomicUnit) -> List[CustomerRecord]:
        result = await unit.session.execute(select(Customer).order_by(Customer.id))
        return [CustomerRecord.model_validate(customer) for customer in result.scalars().all()]

    async def count_customers(self, unit: AtomicUnit) -> int:
        result = await unit.session.execute(select(func.count()).select_from(Customer))
        return result.scalar_one()
