"""
FinTrack - Source Package

A personal finance tracker core: bank accounts, credit cards,
income/expense transactions and categories, with summary reports.

DESIGN PRINCIPLES:
1. One owner of state: every mutation goes through the reducer
2. Derived values are computed, never stored
3. Cascades happen in a single transition
4. The remote store is eventually consistent, never authoritative mid-session
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FinTrack Team"
