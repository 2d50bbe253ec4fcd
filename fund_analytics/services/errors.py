"""Exceptions raised by the fund analytics services.

"Not found" and "insufficient data" are normal results, not exceptions.
"""


class FundAnalyticsError(Exception):
    """Base class for analytics failures."""


class StoreUnavailable(FundAnalyticsError):
    """The fund store could not be reached after the retry budget was spent."""


class DataIntegrityError(FundAnalyticsError):
    """Stored data violates an invariant the analytics rely on."""
