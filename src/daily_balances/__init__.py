"""
Daily Balances - opening balance, sales and remaining credit tracking.

Tracks a day's opening balance of SyriaTel and MTN credit, what each
employee sold against it (plus cash), the derived totals and remaining
balances, and saves, exports and imports that dataset as JSON.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
