"""Plugin file naming helpers.

Plugins ship with either the current ``.jpi`` suffix or the legacy ``.hpi``
one. On disk only the current suffix is kept, and the artifact ID (the file
name without suffix) is the key used for policy lookups.
"""

from urllib.parse import unquote
from urllib.parse import urlsplit

from .schema import SourceLocator

CURRENT_SUFFIX = ".jpi"
LEGACY_SUFFIX = ".hpi"
PLUGIN_SUFFIXES = (CURRENT_SUFFIX, LEGACY_SUFFIX)


def canonical_file_name(raw_name: str) -> str:
    """Normalize a plugin file name to the current suffix.

    Examples:
        >>> canonical_file_name("git.hpi")
        'git.jpi'
        >>> canonical_file_name("git.jpi")
        'git.jpi'
        >>> canonical_file_name("README.txt")
        'README.txt'
    """
    if raw_name.endswith(LEGACY_SUFFIX):
        return raw_name[: -len(LEGACY_SUFFIX)] + CURRENT_SUFFIX
    return raw_name


def legacy_file_name(file_name: str) -> str:
    """Name a canonical plugin file had under the legacy suffix."""
    if file_name.endswith(CURRENT_SUFFIX):
        return file_name[: -len(CURRENT_SUFFIX)] + LEGACY_SUFFIX
    return file_name


def artifact_id(file_name: str) -> str:
    """Strip either recognized suffix from a plugin file name.

    Returns an empty string for an empty name; callers must treat that as an
    unusable plugin.

    Examples:
        >>> artifact_id("credentials.hpi")
        'credentials'
        >>> artifact_id("credentials.jpi")
        'credentials'
    """
    for suffix in PLUGIN_SUFFIXES:
        if file_name.endswith(suffix):
            return file_name[: -len(suffix)]
    return file_name


def is_plugin_archive(file_name: str) -> bool:
    """Check if a file name carries one of the plugin suffixes."""
    return any(file_name.endswith(suffix) and len(file_name) > len(suffix) for suffix in PLUGIN_SUFFIXES)


def file_name_from_locator(locator: SourceLocator) -> str:
    """Last path segment of a locator URI.

    Some containers hand out directory URIs for plugin paths; those end in a
    slash and yield an empty name here. Percent-escapes are decoded, so the
    name matches the file name in the bundle.
    """
    return unquote(urlsplit(locator.uri).path.rsplit("/", 1)[-1])
