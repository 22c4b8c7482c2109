"""
finledger - Personal Finance Ledger

Tracks accounts, credit cards, incomes, expenses (including installment
plans) and recurring budget items. The whole ledger is persisted as one
snapshot in a local key-value store and balances, debts and monthly totals
are derived on demand.

DESIGN PRINCIPLES:
1. One engine owns the state, nothing global
2. Every mutation is persisted immediately
3. Create and delete are exact inverses
4. Bad numbers are rejected at the boundary
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "finledger contributors"
