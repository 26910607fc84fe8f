from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime, timezone
from bankledger.core.database import Base


class Customer(Base):
    """Customer identity; PAN and Aadhar are unique across all customers"""
    __tablename__ = "customers"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Personal Information
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)

    # Government identifiers
    pan_number = Column(String(10), unique=True, index=True, nullable=False)
    aadhar_number = Column(String(12), unique=True, index=True, nullable=False)

    # Contact
    phone = Column(String(20), nullable=True)
    address = Column(String(255), nullable=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self):
        return f"<Customer(id={self.id}, pan_number={self.pan_number})>"
