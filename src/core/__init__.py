"""
Core domain models, fixed-point arithmetic, errors, and data contracts.

This module holds the value objects shared by the ledger, settlement and
migration layers and does not depend on any of them.
"""
