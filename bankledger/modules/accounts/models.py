from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, CheckConstraint, Enum as SQLEnum
from datetime import datetime, timezone
from bankledger.core.database import Base
import enum


class AccountType(str, enum.Enum):
    """Account type enumeration"""
    SAVINGS = "SAVINGS"
    CURRENT = "CURRENT"
    SALARY = "SALARY"


class AccountStatus(str, enum.Enum):
    """Account status"""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BLOCKED = "BLOCKED"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    """Account row; balance changes only through the transaction engine"""
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Foreign Key
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

    # Account Identifiers
    account_number = Column(String(20), unique=True, nullable=False, index=True)

    # Account Configuration
    account_type = Column(SQLEnum(AccountType), nullable=False)

    # Balance (Numeric for precision with money)
    balance = Column(Numeric(15, 2), default=0, nullable=False)

    # Status
    status = Column(SQLEnum(AccountStatus), default=AccountStatus.ACTIVE, nullable=False)

    # Optimistic locking
    version = Column(Integer, default=1, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Account(id={self.id}, account_number={self.account_number}, type={self.account_type})>"
