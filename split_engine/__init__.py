"""
Split Engine - Source Package

Allocation and reconciliation engine for splitting a shared expense
between a group of people.

DESIGN PRINCIPLES:
1. Money is integer minor units → no float drift
2. Nothing is silently lost (every remainder is reported)
3. Mismatches are results, not exceptions
4. Uncertain extracted data needs a human decision
5. Every step must be auditable
"""

__version__ = "1.0.0"
__author__ = "Split Engine Team"
