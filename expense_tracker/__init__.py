"""
Expense Tracker - Source Package

The data core of a personal expense tracker: user-scoped expenses and
categories, default-category bootstrap, per-day totals, and validation
of what users type into the expense editor.

DESIGN PRINCIPLES:
1. Invalid input never reaches persistence
2. Only a record's owner can change it
3. Collaborators are injected, never global
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
