# Customers module
from bankledger.modules.customers.models import Customer
from bankledger.modules.customers.schemas import CustomerRecord, CustomerCreateRequest, CustomerSummary

__all__ = ["Customer", "CustomerRecord", "CustomerCreateRequest", "CustomerSummary"]
