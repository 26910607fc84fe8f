"""
Test configuration and fixtures for the bank ledger tests.
"""
import pytest
from typing import AsyncGenerator
from decimal import Decimal

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.pool import StaticPool

from bankledger.core.bootstrap import initialize_database
from bankledger.core.database import build_async_engine
from bankledger.core.store import LedgerStore
from bankledger.modules.accounts.models import AccountType
from bankledger.modules.accounts.services import AccountService
from bankledger.modules.customers.schemas import CustomerCreateRequest
from bankledger.modules.customers.services import CustomerService
from bankledger.modules.transactions.services import TransactionService


# ============================================================
# Database Fixtures
# ============================================================

# Use SQLite for testing (in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database for each test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    await initialize_database(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def store(test_engine) -> LedgerStore:
    """Ledger store over the in-memory database"""
    return LedgerStore.from_engine(test_engine, max_attempts=3, retry_backoff=0)


@pytest.fixture
async def file_store(tmp_path) -> AsyncGenerator[LedgerStore, None]:
    """Ledger store over a file database; each unit gets its own connection"""
    engine = build_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", echo=False)
    await initialize_database(engine)

    yield LedgerStore.from_engine(engine, max_attempts=25, retry_backoff=0.01)

    await engine.dispose()


# ============================================================
# Service Fixtures
# ============================================================

@pytest.fixture
def customer_service(store) -> CustomerService:
    return CustomerService(store)


@pytest.fixture
def account_service(store) -> AccountService:
    return AccountService(store)


@pytest.fixture
def transaction_service(store) -> TransactionService:
    return TransactionService(store)


# ============================================================
# Customer / Account Fixtures
# ============================================================

def make_customer_request(**overrides) -> CustomerCreateRequest:
    data = {
        "first_name": "Test",
        "last_name": "User",
        "email": "test.user@example.com",
        "pan_number": "ABCDE1234F",
        "aadhar_number": "234567890123",
        "phone": "9876543210",
        "address": "123 Test Street, Mumbai",
    }
    data.update(overrides)
    return CustomerCreateRequest(**data)


@pytest.fixture
async def test_customer(customer_service):
    """Create a test customer"""
    return await customer_service.register_customer(make_customer_request())


@pytest.fixture
async def test_account(account_service, test_customer):
    """Create a zero-balance savings account"""
    return await account_service.create_account(test_customer.id, AccountType.SAVINGS)


@pytest.fixture
async def second_account(account_service, test_customer):
    """Create a zero-balance current account"""
    return await account_service.create_account(test_customer.id, AccountType.CURRENT)


@pytest.fixture
async def funded_account(transaction_service, test_account):
    """Savings account holding 1000.00"""
    await transaction_service.deposit(test_account.account_number, Decimal("1000.00"), "Opening balance")
    return test_account
