"""
Tests for customer registration and lookup
"""
import pytest
from decimal import Decimal

from pydantic import ValidationError

from bankledger.core.exceptions import DuplicateIdentityError, InvalidFormatError
from bankledger.modules.customers.services import is_valid_aadhar, is_valid_pan
from tests.conftest import make_customer_request


class TestIdentifierFormats:
    """Tests for PAN and Aadhar validation"""

    @pytest.mark.unit
    @pytest.mark.parametrize("pan", ["ABCDE1234F", "abcde1234f", "PQRST0000Z"])
    def test_valid_pan(self, pan):
        assert is_valid_pan(pan)

    @pytest.mark.unit
    @pytest.mark.parametrize("pan", ["ABCD1234F", "ABCDE12345", "1BCDE1234F", "ABCDE1234FG", ""])
    def test_invalid_pan(self, pan):
        assert not is_valid_pan(pan)

    @pytest.mark.unit
    @pytest.mark.parametrize("aadhar", ["234567890123", "999999999999"])
    def test_valid_aadhar(self, aadhar):
        assert is_valid_aadhar(aadhar)

    @pytest.mark.unit
    @pytest.mark.parametrize("aadhar", ["123456789012", "034567890123", "23456789012", "2345678901234", "23456789012a"])
    def test_invalid_aadhar(self, aadhar):
        assert not is_valid_aadhar(aadhar)


class TestRegistration:
    """Tests for customer registration"""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_register_uppercases_pan(self, customer_service):
        customer = await customer_service.register_customer(make_customer_request(pan_number="fghij5678k"))

        assert customer.id is not None
        assert customer.pan_number == "FGHIJ5678K"
        assert customer.full_name == "Test User"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_invalid_pan_rejected(self, customer_service):
        with pytest.raises(InvalidFormatError, match="PAN"):
            await customer_service.register_customer(make_customer_request(pan_number="ABC123"))

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_invalid_aadhar_rejected(self, customer_service):
        with pytest.raises(InvalidFormatError, match="Aadhar"):
            await customer_service.register_customer(make_customer_request(aadhar_number="123456789012"))

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_duplicate_pan_rejected(self, customer_service, test_customer):
        with pytest.raises(DuplicateIdentityError, match="PAN"):
            await customer_service.register_customer(
                make_customer_request(pan_number=test_customer.pan_number.lower(), aadhar_number="345678901234")
            )

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_duplicate_aadhar_rejected(self, customer_service, test_customer):
        with pytest.raises(DuplicateIdentityError, match="Aadhar"):
            await customer_service.register_customer(
                make_customer_request(pan_number="ZZZZZ9999Z", aadhar_number=test_customer.aadhar_number)
            )

    @pytest.mark.unit
    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            make_customer_request(email="not-an-email")


class TestCustomerLookup:
    """Tests for customer lookups"""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_customer_by_pan_case_insensitive(self, customer_service, test_customer):
        customer = await customer_service.get_customer_by_pan("abcde1234f")

        assert customer is not None
        assert customer.id == test_customer.id

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_get_unknown_customer(self, customer_service):
        assert await customer_service.get_customer(12345) is None
        assert await customer_service.get_customer_by_pan("QQQQQ1111Q") is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_list_customers_with_accounts(
        self, customer_service, test_customer, funded_account, second_account
    ):
        other = await customer_service.register_customer(
            make_customer_request(first_name="Asha", pan_number="LMNOP4321Q", aadhar_number="987654321098")
        )

        summaries = await customer_service.list_customers_with_accounts()

        assert [s.customer.id for s in summaries] == [test_customer.id, other.id]
        owned = summaries[0].accounts
        assert [a.account_number for a in owned] == [
            funded_account.account_number, second_account.account_number
        ]
        assert owned[0].balance == Decimal("1000.00")
        assert summaries[1].accounts == []
