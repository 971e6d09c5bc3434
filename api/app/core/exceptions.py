"""
Custom exceptions for the application.
"""


class FlashmateException(Exception):
    """Base exception for all Flashmate application exceptions."""
    pass


class ValidationError(FlashmateException):
    """Raised when validation fails."""
    pass


class NotFoundError(FlashmateException):
    """Raised when a requested resource is not found."""
    pass


class ConflictError(FlashmateException):
    """Raised when there's a conflict (e.g., duplicate entry)."""
    pass


class StateError(FlashmateException):
    """Raised when an entity is not in the lifecycle state an operation requires."""
    pass


class AuthenticationError(FlashmateException):
    """Raised when there is no authenticated user."""
    pass


class AuthorizationError(FlashmateException):
    """Raised when authorization fails."""
    pass


class StoreError(FlashmateException):
    """Raised when the underlying document store call fails."""
    pass
