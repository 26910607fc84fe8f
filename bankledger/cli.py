"""Menu-driven console over the ledger services"""

from decimal import Decimal, InvalidOperation
from typing import Callable
import logging

from pydantic import ValidationError

from bankledger.core.config import settings
from bankledger.core.exceptions import LedgerError
from bankledger.core.store import LedgerStore
from bankledger.modules.accounts.schemas import AccountCreateRequest
from bankledger.modules.accounts.services import AccountService
from bankledger.modules.customers.schemas import CustomerCreateRequest
from bankledger.modules.customers.services import CustomerService
from bankledger.modules.transactions.schemas import truncate_description
from bankledger.modules.transactions.services import TransactionService

logger = logging.getLogger(__name__)

MENU = """
===== MAIN MENU =====
1. Create Customer
2. Create Account
3. Deposit Money
4. Withdraw Money
5. Transfer Money
6. View Transaction History
7. View Account Balance
8. List All Customers
0. Exit
====================="""

HISTORY_RULE = "=" * 82


def _validation_message(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in error.errors()
    )


class BankingConsole:
    """Interactive menu; input and output are injectable for tests"""

    def __init__(
        self,
        store: LedgerStore,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print
    ):
        self.customers = CustomerService(store)
        self.accounts = AccountService(store)
        self.transactions = TransactionService(store)
        self.input = input_func
        self.output = output
        self.actions = {
            1: self.create_customer,
            2: self.create_account,
            3: self.deposit_money,
            4: self.withdraw_money,
            5: self.transfer_money,
            6: self.view_transaction_history,
            7: self.view_account_balance,
            8: self.list_all_customers,
        }

    async def run(self) -> None:
        """Show the menu until the user exits or input ends"""
        while True:
            self.output(MENU)
            try:
                choice = self._read_int("Enter your choice: ")
            except EOFError:
                choice = 0

            if choice == 0:
                self.output("Thank you for using Banking System. Goodbye!")
                return

            action = self.actions.get(choice)
            if action is None:
                self.output("Invalid choice. Please try again.")
                continue

            try:
                await action()
            except EOFError:
                self.output("Input closed. Goodbye!")
                return

    # ------------------------------------------------------------------
    # Input helpers
    # ------------------------------------------------------------------

    def _read(self, prompt: str) -> str:
        return self.input(prompt).strip()

    def _read_int(self, prompt: str) -> int:
        while True:
            try:
                return int(self._read(prompt))
            except ValueError:
                self.output("Please enter a valid number.")

    def _read_amount(self, prompt: str) -> Decimal:
        while True:
            try:
                return Decimal(self._read(prompt))
            except InvalidOperation:
                self.output("Please enter a valid amount.")

    def _report(self, action: str, error: Exception) -> None:
        logger.debug(f"{action} failed: {error!r}")
        self.output(f"Error {action}: {error}")

    # ------------------------------------------------------------------
    # Menu actions
    # ------------------------------------------------------------------

    async def create_customer(self) -> None:
        self.output("\n----- Create New Customer -----")
        fields = {
            "first_name": self._read("First Name: "),
            "last_name": self._read("Last Name: "),
            "email": self._read("Email: "),
            "pan_number": self._read("PAN Number: "),
            "aadhar_number": self._read("Aadhar Number: "),
            "phone": self._read("Phone: ") or None,
            "address": self._read("Address: ") or None,
        }

        try:
            customer = await self.customers.register_customer(CustomerCreateRequest(**fields))
        except ValidationError as e:
            self.output(f"Error creating customer: {_validation_message(e)}")
            return
        except LedgerError as e:
            self._report("creating customer", e)
            return

        self.output("Customer created successfully!")
        self.output(f"   Customer ID: {customer.id}")
        self.output(f"   Name: {customer.full_name}")
        self.output(f"   PAN: {customer.pan_number}")

    async def create_account(self) -> None:
        self.output("\n----- Create New Account -----")
        pan_number = self._read("Customer PAN Number: ")

        try:
            customer = await self.customers.get_customer_by_pan(pan_number)
        except LedgerError as e:
            self._report("looking up customer", e)
            return

        if customer is None:
            self.output(f"Customer not found with PAN: {pan_number}")
            return

        self.output(f"Customer found: {customer.full_name}")
        account_type = self._read("Account Type (SAVINGS/CURRENT/SALARY): ")

        try:
            request = AccountCreateRequest(
                customer_id=customer.id,
                account_type=AccountService.parse_account_type(account_type)
            )
            account = await self.accounts.open_account(request)
        except LedgerError as e:
            self._report("creating account", e)
            return

        self.output("Account created successfully!")
        self.output(f"   Account Number: {account.account_number}")
        self.output(f"   Account Type: {account.account_type.value}")
        self.output(f"   Customer: {customer.full_name}")

    async def deposit_money(self) -> None:
        self.output("\n----- Deposit Money -----")
        account_number = self._read("Account Number: ")
        amount = self._read_amount("Amount to deposit: ")
        description = self._read("Description: ")

        try:
            transaction = await self.transactions.deposit(account_number, amount, description)
        except LedgerError as e:
            self._report("processing deposit", e)
            return

        self.output("Deposit successful!")
        self.output(f"   Transaction ID: {transaction.transaction_id}")
        self.output(f"   Amount: {transaction.amount}")
        self.output(f"   New Balance: {transaction.balance_after_transaction}")

    async def withdraw_money(self) -> None:
        self.output("\n----- Withdraw Money -----")
        account_number = self._read("Account Number: ")
        amount = self._read_amount("Amount to withdraw: ")
        description = self._read("Description: ")

        try:
            transaction = await self.transactions.withdraw(account_number, amount, description)
        except LedgerError as e:
            self._report("processing withdrawal", e)
            return

        self.output("Withdrawal successful!")
        self.output(f"   Transaction ID: {transaction.transaction_id}")
        self.output(f"   Amount: {transaction.amount}")
        self.output(f"   New Balance: {transaction.balance_after_transaction}")

    async def transfer_money(self) -> None:
        self.output("\n----- Transfer Money -----")
        from_account = self._read("From Account Number: ")
        to_account = self._read("To Account Number: ")
        amount = self._read_amount("Amount to transfer: ")
        description = self._read("Description: ")

        try:
            transaction = await self.transactions.transfer(from_account, to_account, amount, description)
        except LedgerError as e:
            self._report("processing transfer", e)
            return

        self.output("Transfer successful!")
        self.output(f"   Transaction ID: {transaction.transaction_id}")
        self.output(f"   From Account: {from_account}")
        self.output(f"   To Account: {to_account}")
        self.output(f"   Amount: {transaction.amount}")
        self.output(f"   New Balance: {transaction.balance_after_transaction}")

    async def view_transaction_history(self) -> None:
        self.output("\n----- Transaction History -----")
        account_number = self._read("Account Number: ")

        try:
            transactions = await self.transactions.history(account_number)
        except LedgerError as e:
            self._report("retrieving transaction history", e)
            return

        if not transactions:
            self.output(f"No transactions found for account: {account_number}")
            return

        self.output(f"\nTransaction History for Account: {account_number}")
        self.output(HISTORY_RULE)
        self.output(f"{'Date':<20} {'Type':<12} {'Amount':<12} {'Description':<25} {'Balance':<15}")
        self.output(HISTORY_RULE)
        for t in transactions:
            description = truncate_description(t.description, settings.DESCRIPTION_DISPLAY_WIDTH)
            self.output(
                f"{t.transaction_date.date().isoformat():<20} {t.transaction_type.value:<12} "
                f"{str(t.amount):<12} {description:<25} {str(t.balance_after_transaction):<15}"
            )

    async def view_account_balance(self) -> None:
        self.output("\n----- Account Balance -----")
        account_number = self._read("Account Number: ")

        try:
            details = await self.accounts.get_balance_details(account_number)
        except LedgerError as e:
            self._report("retrieving balance", e)
            return

        self.output(f"Account: {details.account_number} ({details.account_type.value}, {details.status.value})")
        self.output(f"Current Balance: {details.balance}")

    async def list_all_customers(self) -> None:
        self.output("\n----- All Customers -----")

        try:
            summaries = await self.customers.list_customers_with_accounts()
        except LedgerError as e:
            self._report("retrieving customers", e)
            return

        if not summaries:
            self.output("No customers found.")
            return

        for summary in summaries:
            customer = summary.customer
            self.output(f"\nCustomer: {customer.full_name}")
            self.output(f"   ID: {customer.id}")
            self.output(f"   PAN: {customer.pan_number}")
            self.output(f"   Email: {customer.email}")
            self.output("   Accounts:")
            if not summary.accounts:
                self.output("     No accounts")
            for account in summary.accounts:
                self.output(
                    f"     {account.account_number} ({account.account_type.value}) - Balance: {account.balance}"
                )
            self.output("---")
