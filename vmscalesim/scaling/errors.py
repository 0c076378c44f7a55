"""Exceptions raised by vertical scaling components."""


class InvalidVmConfigurationError(ValueError):
    """Raised when a VM reports a resource capacity it can never have."""
