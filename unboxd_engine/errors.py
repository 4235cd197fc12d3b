# unboxd-engine/unboxd_engine/errors.py
"""
Exceptions raised by the decision engines.

"No candidates" and "no suitable vehicle" are normal outcomes and are
reported through empty results and recommendations, never through these.
"""


class UnboxdError(Exception):
    """Base class for all engine errors."""


class InvalidInputError(UnboxdError, ValueError):
    """An input failed validation at the engine boundary."""


class MarketDataError(UnboxdError):
    """Live market conditions could not be fetched."""
