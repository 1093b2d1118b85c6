"""
utils/ - Shared Helpers
=======================
Logging, error types, the injected clock and calendar arithmetic.
Nothing in here touches the database.
"""
