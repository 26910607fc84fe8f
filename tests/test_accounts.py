"""
Tests for the account registry
"""
import re
import pytest
from decimal import Decimal

from bankledger.core.exceptions import (
    AccountNotFoundError,
    CustomerNotFoundError,
    InvalidFormatError,
    StoreUnavailableError,
)
from bankledger.modules.accounts.models import AccountType, AccountStatus
from bankledger.modules.accounts.schemas import AccountCreateRequest
from bankledger.modules.accounts.services import AccountService


class TestAccountNumbers:
    """Tests for account number generation"""

    @pytest.mark.unit
    def test_generate_account_number(self):
        number = AccountService.generate_account_number()

        assert re.fullmatch(r"ACC\d{14,16}", number)
        assert len(number) <= 20

    @pytest.mark.unit
    @pytest.mark.parametrize("raw,expected", [
        ("savings", AccountType.SAVINGS),
        (" Current ", AccountType.CURRENT),
        ("SALARY", AccountType.SALARY),
        (AccountType.CURRENT, AccountType.CURRENT),
    ])
    def test_parse_account_type(self, raw, expected):
        assert AccountService.parse_account_type(raw) == expected

    @pytest.mark.unit
    def test_parse_unknown_account_type(self):
        with pytest.raises(InvalidFormatError, match="SAVINGS/CURRENT/SALARY"):
            AccountService.parse_account_type("checking")


class TestCreateAccount:
    """Tests for opening accounts"""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_account(self, account_service, test_customer):
        account = await account_service.create_account(test_customer.id, "current")

        assert account.account_number.startswith("ACC")
        assert account.account_type == AccountType.CURRENT
        assert account.balance == Decimal("0")
        assert account.status == AccountStatus.ACTIVE
        assert account.customer_id == test_customer.id
        assert account.version == 1

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_open_account_from_request(self, account_service, test_customer):
        account = await account_service.open_account(
            AccountCreateRequest(customer_id=test_customer.id, account_type=AccountType.SALARY)
        )
        assert account.account_type == AccountType.SALARY

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_account_unknown_customer(self, account_service):
        with pytest.raises(CustomerNotFoundError):
            await account_service.create_account(9999, AccountType.SAVINGS)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_account_invalid_type(self, account_service, test_customer):
        with pytest.raises(InvalidFormatError):
            await account_service.create_account(test_customer.id, "loan")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_account_number_collision_retried(self, account_service, test_account, monkeypatch):
        numbers = iter([test_account.account_number, "ACC1234567890123"])
        monkeypatch.setattr(AccountService, "generate_account_number", staticmethod(lambda: next(numbers)))

        account = await account_service.create_account(test_account.customer_id, AccountType.CURRENT)

        assert account.account_number == "ACC1234567890123"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_account_number_space_exhausted(self, account_service, test_account, monkeypatch):
        monkeypatch.setattr(
            AccountService, "generate_account_number", staticmethod(lambda: test_account.account_number)
        )

        with pytest.raises(StoreUnavailableError):
            await account_service.create_account(test_account.customer_id, AccountType.CURRENT)


class TestAccountLookup:
    """Tests for account lookups"""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_account(self, account_service, test_account):
        account = await account_service.get_account(test_account.account_number)

        assert account.id == test_account.id
        assert account.account_type == AccountType.SAVINGS

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_find_unknown_account(self, account_service):
        assert await account_service.find_account("ACC000") is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_unknown_account(self, account_service):
        with pytest.raises(AccountNotFoundError, match="ACC000"):
            await account_service.get_account("ACC000")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_balance(self, account_service, funded_account):
        assert await account_service.get_balance(funded_account.account_number) == Decimal("1000.00")

        details = await account_service.get_balance_details(funded_account.account_number)
        assert details.balance == Decimal("1000.00")
        assert details.status == AccountStatus.ACTIVE

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_list_customer_accounts(self, account_service, test_customer, test_account, second_account):
        accounts = await account_service.list_customer_accounts(test_customer.id)

        assert [a.account_number for a in accounts] == [
            test_account.account_number, second_account.account_number
        ]
