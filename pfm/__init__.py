"""
Personal Finance Manager - Account & Budget Core

The stateful heart of a personal-finance desktop application:
signing users in safely and telling them how much of each budget is spent.

DESIGN PRINCIPLES:
1. Expected failures are results, not exceptions
2. Plaintext passwords are never stored or logged
3. Every record belongs to exactly one user
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Personal Finance Manager Team"
