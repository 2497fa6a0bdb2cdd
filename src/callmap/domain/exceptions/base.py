"""Base exceptions for callmap domain."""


class CallMapError(Exception):
    """Root exception for all callmap errors.

    All domain exceptions inherit from this.
    Allows catching all callmap-specific errors.
    """
