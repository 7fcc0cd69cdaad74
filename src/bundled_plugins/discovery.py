"""Directory-backed bundle source.

Serves an exploded application bundle from the local filesystem. Resource
paths are bundle-relative and slash-separated, like servlet resource paths:

    /WEB-INF/plugins/git.jpi

Hosts with other bundle formats (servlet context, zip, ...) provide their own
BundleSourceProtocol implementation.
"""

import logging
import shutil
from pathlib import Path
from typing import BinaryIO
from urllib.parse import urlsplit
from urllib.request import url2pathname

from .exceptions import UnresolvableLocationError
from .schema import SourceLocator

logger = logging.getLogger(__name__)


class DirectoryBundleSource:
    """
    Bundle source over a directory (with injected bundle root).

    Example:
        >>> source = DirectoryBundleSource(Path("/opt/app/war"))
        >>> source.enumerate_candidates("/WEB-INF/plugins")
        ['/WEB-INF/plugins/credentials.hpi', '/WEB-INF/plugins/git.jpi']
    """

    def __init__(self, bundle_root: Path):
        """Initialize source with app-provided bundle root.

        Args:
            bundle_root: Directory holding the exploded bundle
        """
        self.bundle_root = bundle_root

    def enumerate_candidates(self, prefix: str) -> list[str]:
        """
        List resource paths directly under prefix.

        Directories are listed with a trailing slash. Order is by name.

        Args:
            prefix: Bundle-relative directory (e.g., "/WEB-INF/plugins")

        Returns:
            Bundle-relative resource paths, empty if prefix doesn't exist
        """
        directory = self.bundle_root / prefix.strip("/")
        if not directory.exists() or not directory.is_dir():
            logger.debug(f"No bundled resources under {prefix}")
            return []

        base = "/" + prefix.strip("/") if prefix.strip("/") else ""
        paths = []
        for item in sorted(directory.iterdir(), key=lambda p: p.name):
            suffix = "/" if item.is_dir() else ""
            paths.append(f"{base}/{item.name}{suffix}")
        return paths

    def resolve_locator(self, raw_path: str) -> SourceLocator:
        """
        Map a bundle-relative path to a locator.

        Paths are resolved (symlinks followed), so two paths naming the same
        file yield equal locators.

        Raises:
            UnresolvableLocationError: If the path is empty, escapes the bundle
                root, or doesn't exist
        """
        if not raw_path.strip("/"):
            raise UnresolvableLocationError(
                f"Empty bundle resource path: {raw_path!r}", context={"raw_path": raw_path}
            )

        root = self.bundle_root.resolve()
        path = (root / raw_path.lstrip("/")).resolve()

        if not path.is_relative_to(root):
            raise UnresolvableLocationError(
                f"Bundle resource path escapes bundle root: {raw_path}",
                context={"raw_path": raw_path, "bundle_root": str(root)},
            )
        if not path.exists():
            raise UnresolvableLocationError(
                f"Bundle resource not found: {raw_path}",
                context={"raw_path": raw_path, "bundle_root": str(root)},
            )

        uri = path.as_uri()
        if path.is_dir():
            uri += "/"
        return SourceLocator(uri=uri)

    def last_modified(self, locator: SourceLocator) -> int:
        return self._path(locator).stat().st_mtime_ns // 1_000_000

    def copy_to(self, locator: SourceLocator, target: Path) -> None:
        shutil.copyfile(self._path(locator), target)

    def open(self, locator: SourceLocator) -> BinaryIO:
        return open(self._path(locator), "rb")

    def _path(self, locator: SourceLocator) -> Path:
        parts = urlsplit(locator.uri)
        if parts.scheme != "file":
            raise FileNotFoundError(f"Not a file locator: {locator.uri}")
        return Path(url2pathname(parts.path))
