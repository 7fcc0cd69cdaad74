"""Bundled plugin file installation (copy mechanism).

Copies one plugin archive from the bundle into the plugins directory with an
up-to-date check. The modification time of the installed file is set to the
bundled one and acts as the version marker on the next startup:

- missing on disk -> copy
- version enforced and timestamps differ -> copy (upgrade or downgrade)
- not enforced and bundled file is newer -> copy (upgrade only)
- otherwise -> keep the installed file

The bundle and the plugins directory are injected by the host.
"""

import logging
import os
from pathlib import Path

from .exceptions import InstallIOError
from .protocols import BundleSourceProtocol
from .schema import Policy
from .schema import SourceLocator
from .utils import artifact_id
from .utils import canonical_file_name
from .utils import legacy_file_name

logger = logging.getLogger(__name__)

_NS_PER_MS = 1_000_000


def _mtime_ms(path: Path) -> int:
    return path.stat().st_mtime_ns // _NS_PER_MS


def _set_mtime_ms(path: Path, timestamp_ms: int) -> None:
    ns = timestamp_ms * _NS_PER_MS
    os.utime(path, ns=(ns, ns))


def _rename_legacy(legacy_file: Path, new_file: Path) -> None:
    """Rename a legacy-suffixed plugin file to its current name.

    The current file is deleted first when both exist, since renaming onto an
    existing file does not work everywhere.

    Raises:
        InstallIOError: If the existing current file cannot be deleted
    """
    if legacy_file == new_file or not legacy_file.exists():
        return

    if new_file.exists():
        try:
            new_file.unlink()
        except OSError as e:
            raise InstallIOError(
                f"Failed to delete {new_file} before renaming {legacy_file}: {e}",
                context={"legacy_file": str(legacy_file), "new_file": str(new_file)},
            ) from e

    try:
        legacy_file.rename(new_file)
        logger.debug(f"Renamed legacy plugin file {legacy_file} to {new_file}")
    except OSError as e:
        logger.warning(f"Failed to rename {legacy_file} to {new_file}: {e}")


class PluginFileInstaller:
    """
    Copies bundled plugins into the plugins directory (with injected paths).

    Example:
        >>> installer = PluginFileInstaller(source, plugins_dir=Path("/var/lib/app/plugins"))
        >>> installer.copy_bundled_plugin(locator, "git.hpi", policy)
        'git.jpi'
    """

    def __init__(self, source: BundleSourceProtocol, plugins_dir: Path):
        """Initialize installer with app-provided bundle and target directory.

        Args:
            source: Bundle the plugin bytes come from
            plugins_dir: Live plugins directory (app determines location)
        """
        self.source = source
        self.plugins_dir = plugins_dir

    def copy_bundled_plugin(self, locator: SourceLocator, raw_file_name: str, policy: Policy) -> str:
        """
        Copy a bundled plugin to the plugins directory if it is missing or stale.

        Args:
            locator: Bundled plugin to copy
            raw_file_name: File name as found in the bundle (either suffix)
            policy: Install policy, consulted for version enforcement

        Returns:
            Canonical file name of the plugin in the plugins directory, whether
            or not it had to be copied

        Raises:
            InstallIOError: If renaming, reading or copying fails
        """
        file_name = canonical_file_name(raw_file_name)
        target = self.plugins_dir / file_name

        # Normalization first, if the old file exists
        _rename_legacy(self.plugins_dir / legacy_file_name(file_name), target)

        plugin_id = artifact_id(file_name)

        try:
            last_modified = self.source.last_modified(locator)
        except OSError as e:
            raise InstallIOError(
                f"Cannot read modification time of bundled plugin {locator}: {e}",
                context={"locator": locator.uri},
            ) from e

        if not self._should_copy(target, plugin_id, last_modified, policy):
            logger.info(
                f"Plugin {plugin_id} has been already installed and does not need an upgrade/downgrade. Skipping it"
            )
            return file_name

        self._copy(locator, target, last_modified)
        logger.debug(f"Copied bundled plugin {locator} to {target}")
        return file_name

    def _should_copy(self, target: Path, plugin_id: str, last_modified: int, policy: Policy) -> bool:
        if not target.exists():
            return True

        installed_modified = _mtime_ms(target)
        if policy.is_version_enforced(plugin_id):
            if installed_modified != last_modified:
                logger.info(f"Version of bundled plugin {plugin_id} is enforced. The current version will be replaced")
                return True
            return False

        if installed_modified < last_modified:
            logger.info(f"Bundle defines a newer version of the plugin {plugin_id}. It will be upgraded")
            return True
        return False

    def _copy(self, locator: SourceLocator, target: Path, last_modified: int) -> None:
        """Write through a temporary sibling file, then move it into place."""
        partial = target.with_name(f".{target.name}.partial")
        try:
            self.plugins_dir.mkdir(parents=True, exist_ok=True)
            self.source.copy_to(locator, partial)
            _set_mtime_ms(partial, last_modified)
            partial.replace(target)
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise InstallIOError(
                f"Failed to copy bundled plugin {locator} to {target}: {e}",
                context={"locator": locator.uri, "target": str(target)},
            ) from e
