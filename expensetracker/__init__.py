"""
Expense Tracker - Core Package

Per-user expense ledgers with an enforced budget hierarchy,
persisted encrypted-at-rest.

DESIGN PRINCIPLES:
1. A rejected command leaves the ledger exactly as it was
2. No two expenses in a ledger share an identity
3. Category budgets never add up to more than the total budget
4. Nothing is written to disk in clear text
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
