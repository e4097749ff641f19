"""
Exceptions raised by the analytics engines.

Business edge cases (blank fields, zero denominators, loans that never pay
off, undeterminable IRR) are reported through result values, never raised.
These exceptions cover programming errors: arguments of the wrong shape.
"""


class AnalyticsError(Exception):
    """Base exception for analytics errors."""


class InvalidArgumentError(AnalyticsError, ValueError):
    """Raised when a caller passes an argument the engine cannot interpret."""
