"""
Hydration error taxonomy.

Catalog failures are raised by the catalog package (UpstreamFailure) and store
failures by pymongo; the engine maps every failure to one terminal error event.
"""
from cardvault.models.events import ErrorKind


class HydrationError(Exception):
    """Base class for failures raised by the hydration pipeline itself."""

    kind: ErrorKind = ErrorKind.INTERNAL


class InvalidFilterError(HydrationError):
    """The filter has no field that can select an acquisition strategy."""

    kind = ErrorKind.INVALID_FILTER


class HydrationCancelled(HydrationError):
    """The caller cancelled the run; raised at the next checkpoint."""

    kind = ErrorKind.CANCELLED
