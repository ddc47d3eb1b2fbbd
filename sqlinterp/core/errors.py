"""
Exceptions raised by the analysis core.
"""


class SQLInterpError(Exception):
    """Base class for all analysis errors."""


class FormatError(SQLInterpError):
    """
    A literal's internal structure does not match any recognized sub-kind.

    Recoverable: the scanner drops the statement being analyzed and
    moves on to the next one.
    """


class PreconditionError(SQLInterpError):
    """
    A contract of the core was violated by its caller.

    Raised when the safe-variable registry is queried before it was
    populated, or with a malformed line number.
    """
