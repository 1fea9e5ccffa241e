"""Typed failures raised at the I/O boundary."""


class FangindexError(Exception):
    """Base class for all fangindex errors."""
    pass


class ProviderUnavailable(FangindexError):
    """Raised when weather or water-body data could not be retrieved.

    Retryable from the caller's point of view.
    """
    pass


class PermissionDenied(FangindexError):
    """Raised by a location provider when access to the position was refused."""
    pass


class LocationUnavailable(FangindexError):
    """Raised by a location provider when no position could be determined."""
    pass


class MalformedCandidate(FangindexError):
    """Raised when a single water-body record cannot be used."""
    pass
