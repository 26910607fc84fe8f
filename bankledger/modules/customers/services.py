from typing import List, Optional
import logging
import re

from bankledger.core.exceptions import DuplicateIdentityError, InvalidFormatError
from bankledger.core.store import LedgerStore
from bankledger.modules.customers.models import Customer
from bankledger.modules.customers import schemas

logger = logging.getLogger(__name__)

PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
AADHAR_PATTERN = re.compile(r"^[2-9][0-9]{11}$")


def normalize_pan(pan_number: str) -> str:
    return pan_number.strip().upper()


def is_valid_pan(pan_number: str) -> bool:
    """5 letters, 4 digits, 1 letter (case-insensitive)"""
    return PAN_PATTERN.match(normalize_pan(pan_number)) is not None


def is_valid_aadhar(aadhar_number: str) -> bool:
    """12 digits, first digit 2-9"""
    return AADHAR_PATTERN.match(aadhar_number.strip()) is not None


class CustomerService:
    """Customer registration and lookup"""

    def __init__(self, store: LedgerStore):
        self.store = store

    async def register_customer(self, customer_data: schemas.CustomerCreateRequest) -> schemas.CustomerRecord:
        """Register a customer after format and uniqueness checks"""

        # Validate identifier formats
        if not is_valid_pan(customer_data.pan_number):
            raise InvalidFormatError("Invalid PAN number format")
        if not is_valid_aadhar(customer_data.aadhar_number):
            raise InvalidFormatError("Invalid Aadhar number format")

        pan_number = normalize_pan(customer_data.pan_number)
        aadhar_number = customer_data.aadhar_number.strip()

        async with self.store.atomic_unit() as unit:
            # Check if PAN or Aadhar already exists
            if await self.store.find_customer_by_pan(pan_number, unit):
                raise DuplicateIdentityError("PAN number already exists")
            if await self.store.find_customer_by_aadhar(aadhar_number, unit):
                raise DuplicateIdentityError("Aadhar number already exists")

            customer = await self.store.save_customer(
                Customer(
                    first_name=customer_data.first_name,
                    last_name=customer_data.last_name,
                    email=customer_data.email,
                    pan_number=pan_number,
                    aadhar_number=aadhar_number,
                    phone=customer_data.phone,
                    address=customer_data.address
                ),
                unit
            )

        logger.info(f"Registered customer {customer.id} with PAN {customer.pan_number}")
        return customer

    async def get_customer(self, customer_id: int) -> Optional[schemas.CustomerRecord]:
        async with self.store.atomic_unit() as unit:
            return await self.store.find_customer_by_id(customer_id, unit)

    async def get_customer_by_pan(self, pan_number: str) -> Optional[schemas.CustomerRecord]:
        async with self.store.atomic_unit() as unit:
            return await self.store.find_customer_by_pan(normalize_pan(pan_number), unit)

    async def list_customers_with_accounts(self) -> List[schemas.CustomerSummary]:
        """Every customer with their accounts, loaded in two queries"""
        async with self.store.atomic_unit() as unit:
            customers = await self.store.list_customers(unit)
            accounts = await self.store.list_accounts_for_customers(
                [customer.id for customer in customers], unit
            )

        return [
            schemas.CustomerSummary(customer=customer, accounts=accounts[customer.id])
            for customer in customers
        ]
