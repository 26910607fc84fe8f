from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from bankledger.modules.accounts.schemas import AccountRecord


# Customer Registration
class CustomerCreateRequest(BaseModel):
    """Customer registration request"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    pan_number: str = Field(..., min_length=1, max_length=20)
    aadhar_number: str = Field(..., min_length=1, max_length=20)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=255)


class CustomerRecord(BaseModel):
    """Registered customer"""
    id: int
    first_name: str
    last_name: str
    email: str
    pan_number: str
    aadhar_number: str
    phone: Optional[str]
    address: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class CustomerSummary(BaseModel):
    """Customer with the accounts they own"""
    customer: CustomerRecord
    accounts: List[AccountRecord] = []
