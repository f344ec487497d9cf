"""
Domain errors raised by the services and store backends.

Routers translate them into HTTP responses: InvalidInput -> 400,
NotFound -> 404, StoreUnavailable -> 500.
"""


class RecommenderError(Exception):
    """Base class for all domain errors."""


class InvalidInput(RecommenderError):
    """Missing or out-of-range request fields."""


class NotFound(RecommenderError):
    """A referenced user or movie does not exist."""


class StoreUnavailable(RecommenderError):
    """The store could not execute a query (connectivity, timeout, bad data)."""
