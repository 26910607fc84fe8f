from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Enum as SQLEnum
from datetime import datetime, timezone
from bankledger.core.database import Base
import enum


class TransactionType(str, enum.Enum):
    """Ledger entry type"""
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"


class Transaction(Base):
    """Append-only ledger entry"""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(50), unique=True, index=True, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)

    transaction_type = Column("type", SQLEnum(TransactionType), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    description = Column(String(255), nullable=True)

    # History sorts on this, then id
    transaction_date = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True
    )
    balance_after_transaction = Column(Numeric(15, 2), nullable=False)

    # Counterparty for transfer legs
    related_account_number = Column(String(20), nullable=True)

    def __repr__(self):
        return f"<Transaction(id={self.id}, transaction_id={self.transaction_id}, type={self.transaction_type})>"
