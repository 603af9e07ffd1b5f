"""
Congregation Accounts - Source Package

Bookkeeping for a congregation's monthly accounts: income and expense
transactions, monthly opening balances, free-form notes and the monthly
financial report.

DESIGN PRINCIPLES:
1. Aggregation is pure and works on explicit data
2. Storage layer is swappable (Firestore in production, in-memory for tests)
3. Validation reports problems, it never silently corrects them
4. Every write is logged
"""

__version__ = "1.0.0"
__author__ = "Congregation Accounts Team"
