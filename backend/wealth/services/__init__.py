"""Services layer - business logic.

This module is organized into domain-based subpackages:
- ledger/: Ledger store, FIFO lot matching, simulation and direct writes
- imports/: CSV transaction import
- portfolio/: Holdings and realized P&L read models
- repositories/: Data access layer
- shared/: Shared utilities (pagination)
"""
