"""
Test suite for folio-trust-core

Contains:
- tests/unit/          : Unit and property-based tests for settlement, migration and ledger modules
"""
