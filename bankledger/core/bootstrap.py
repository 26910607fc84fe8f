"""Schema bootstrap and sample data"""

from decimal import Decimal
import logging

from sqlalchemy import inspect, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine

from bankledger.core.database import Base
from bankledger.core.exceptions import StoreUnavailableError
from bankledger.core.store import LedgerStore
from bankledger.modules.accounts.models import Account, AccountType
from bankledger.modules.accounts.services import AccountService
from bankledger.modules.customers.models import Customer
from bankledger.modules.customers.schemas import CustomerCreateRequest
from bankledger.modules.customers.services import CustomerService
from bankledger.modules.transactions.models import Transaction
from bankledger.modules.transactions.services import TransactionService

logger = logging.getLogger(__name__)

REQUIRED_TABLES = (Customer.__tablename__, Account.__tablename__, Transaction.__tablename__)


async def initialize_database(engine: AsyncEngine) -> None:
    """Check connectivity, create the schema and verify the tables exist"""
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            logger.info("Database connection successful")

            await conn.run_sync(Base.metadata.create_all)
            existing = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
    except (DBAPIError, OSError) as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise StoreUnavailableError(f"Cannot initialize database: {e}") from e

    missing = [table for table in REQUIRED_TABLES if table not in existing]
    if missing:
        raise StoreUnavailableError(f"Schema verification failed, missing tables: {', '.join(missing)}")

    logger.info("Database initialization completed successfully")


async def create_sample_data(store: LedgerStore) -> bool:
    """Seed one customer with a funded savings account on an empty database"""
    async with store.atomic_unit() as unit:
        customer_count = await store.count_customers(unit)

    if customer_count:
        logger.info("Database already contains data. Skipping sample data creation.")
        return False

    customer = await CustomerService(store).register_customer(
        CustomerCreateRequest(
            first_name="John",
            last_name="Doe",
            email="john.doe@email.com",
            pan_number="ABCDE1234F",
            aadhar_number="234567890123",
            phone="9876543210",
            address="123 Main Street, Mumbai"
        )
    )
    account = await AccountService(store).create_account(customer.id, AccountType.SAVINGS)
    await TransactionService(store).deposit(account.account_number, Decimal("10000.00"), "Initial deposit")

    logger.info(f"Sample data created: customer {customer.id}, account {account.account_number}")
    return True
