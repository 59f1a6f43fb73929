"""
Subscription Tracker - Source Package

A small single-tenant tracker for self-reported recurring costs
(software licences, streaming services, hosting plans).

DESIGN PRINCIPLES:
1. Renewal math is pure and deterministic
2. Records are parsed once, at the store boundary
3. No silent corrections of user input
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Subscription Tracker Team"
