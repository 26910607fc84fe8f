# Transaction module
from bankledger.modules.transactions.models import Transaction, TransactionType
from bankledger.modules.transactions.schemas import TransactionCreate, TransactionRecord

__all__ = ["Transaction", "TransactionType", "TransactionCreate", "TransactionRecord"]
