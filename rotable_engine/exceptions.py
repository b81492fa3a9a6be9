"""Exceptions raised by the engine."""


class ConfigurationError(ValueError):
    """Reference data is structurally invalid (e.g. no hub airport)."""
