"""
Receipt Splitter - Source Package

Splits a shared receipt between the members of a room.

DESIGN PRINCIPLES:
1. The room state is one explicit object; totals are derived, never stored
2. Editing never raises: bad numbers are coerced, impossible actions are no-ops
3. Money is Decimal and rounded only for display
4. Recognition is a pluggable collaborator, not part of the core
5. Every change to a room is auditable
"""

__version__ = "1.0.0"
__author__ = "Receipt Splitter Team"
