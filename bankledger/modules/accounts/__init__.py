# Accounts module
from bankledger.modules.accounts.models import Account, AccountType, AccountStatus
from bankledger.modules.accounts.schemas import AccountRecord

__all__ = ["Account", "AccountType", "AccountStatus", "AccountRecord"]
