"""Exceptions for the short URL service layer.

Service errors wrap store errors for callers that orchestrate several store
operations, such as the expiration sweep.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    pass


class CleanupError(ServiceError):
    """Base exception for cleanup-related errors."""
    pass


class ExpiredUrlCleanupError(CleanupError):
    """Error occurred while cleaning up expired URLs."""
    pass
