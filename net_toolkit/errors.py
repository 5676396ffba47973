from __future__ import annotations


class ToolkitError(Exception):
    """Base class for errors raised by net_toolkit."""


class ConfigurationError(ToolkitError, ValueError):
    """Raised before any network activity when a scan is misconfigured."""


class IntrospectionError(ToolkitError):
    """Raised when the local connection table cannot be read."""
