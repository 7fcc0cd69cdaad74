"""Protocols for the collaborators a bundled plugin install pass consumes.

The library doesn't know WHERE plugins are bundled or HOW their manifests are
read. Hosts provide implementations (servlet context, directory, archive, ...);
the library only requires these interfaces.
"""

from pathlib import Path
from typing import BinaryIO
from typing import Protocol
from typing import runtime_checkable

from .schema import Classification
from .schema import CopyOutcome
from .schema import SourceLocator


@runtime_checkable
class BundleSourceProtocol(Protocol):
    """Read-only bundle holding plugin archives.

    Example implementations:
    - DirectoryBundleSource: an exploded bundle on the local filesystem
    - A servlet-context or zip-backed source provided by the host
    """

    def enumerate_candidates(self, prefix: str) -> list[str]:
        """List raw resource paths directly under prefix.

        Returns an empty list for an empty or missing prefix.
        """
        ...

    def resolve_locator(self, raw_path: str) -> SourceLocator:
        """Map a raw resource path to a locator.

        Raises:
            UnresolvableLocationError: If the path cannot be mapped to bytes
        """
        ...

    def last_modified(self, locator: SourceLocator) -> int:
        """Modification time of the resource in epoch milliseconds."""
        ...

    def copy_to(self, locator: SourceLocator, target: Path) -> None:
        """Write the resource bytes to target.

        Raises:
            OSError: If reading or writing fails
        """
        ...

    def open(self, locator: SourceLocator) -> BinaryIO:
        """Open the resource for binary reading."""
        ...


@runtime_checkable
class DependencyReaderProtocol(Protocol):
    """Discovers which bundled plugins a plugin depends on."""

    def discover_dependencies(self, locator: SourceLocator, prefix: str) -> list[SourceLocator]:
        """Locators of the direct dependencies of a plugin, relative to prefix.

        Raises:
            DependencyResolutionError: If the plugin's dependency list is unreadable
        """
        ...


class NotRequiredPluginHook(Protocol):
    """Decides the fate of a bundled plugin the policy does not require.

    Return a CopyOutcome to take over handling of the plugin, or None to let
    the manager install it.
    """

    def __call__(
        self,
        locator: SourceLocator,
        file_name: str,
        classification: Classification,
    ) -> CopyOutcome | None: ...
