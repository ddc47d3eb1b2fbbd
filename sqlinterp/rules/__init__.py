"""
Rules shipped with the package.

Importing this module registers them with the global registry.
"""

from sqlinterp.rules.security import injection

__all__ = [
    "injection",
]
