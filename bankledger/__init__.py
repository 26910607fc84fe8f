"""
Bank Ledger

Console ledger for customers, accounts and money-movement transactions,
persisted to a relational store.
"""

__version__ = "1.0.0"
