"""
models/ - Domain Layer
======================
Immutable dataclasses describing recurring definitions, ledger entries and
budgets. No I/O and no business rules beyond simple derived properties.
"""
