"""
Security rules.
"""

from sqlinterp.rules.security import injection

__all__ = [
    "injection",
]
