"""
Stock Kernel - stock operation lifecycle and query engine

Manages inventory stock operations with:
- Validated, uniquely numbered operations
- Total ordering of operations within and across business days
- Role-scoped visibility of operations for approvers
- Purge protection for operations with ledger transactions
"""

__version__ = "0.1.0"
