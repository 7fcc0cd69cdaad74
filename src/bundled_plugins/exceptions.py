"""Bundled plugin exceptions.

Every error here is local to one plugin. The manager logs it and moves on to
the next candidate, so a single broken archive never aborts a startup pass.
"""


class PluginBundleError(Exception):
    """Base exception for bundled plugin operations."""

    def __init__(self, message: str, context: dict | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (paths, URIs, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class UnresolvableLocationError(PluginBundleError):
    """A bundle path cannot be mapped to plugin bytes."""


class DependencyResolutionError(PluginBundleError):
    """Dependencies of one bundled plugin could not be read."""


class InstallIOError(PluginBundleError):
    """Copying or renaming a plugin file failed."""


class PolicyError(PluginBundleError):
    """Invalid install policy file."""
