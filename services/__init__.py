"""
services/ - Business Logic Layer
================================
Pure engines (recurrence_engine, budget_period_engine) hold the date and
amount rules; the *_service modules wire them to the stores and the clock.
"""
