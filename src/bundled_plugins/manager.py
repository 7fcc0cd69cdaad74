"""Bundled plugin manager - decides which bundled plugins get installed.

One install pass runs at host startup:

1. Root pass: every plugin found under the bundle path is either installed
   (required by policy, or the not-required hook declined) or handed to the
   hook. The direct dependencies of each handled root are parked, MANDATORY
   for installed roots and LENIENT for roots the hook left out.
2. Lenient drain: parked dependencies of left-out roots are processed like
   roots, still subject to the hook.
3. Mandatory drain: parked dependencies of installed roots are installed
   unconditionally.

Dependencies of dependencies are never followed; bundled dependency sets are
expected to be flat. Every failure is local to one plugin: it is logged and
the pass carries on, so the host always gets a result.

Policy (what is required/enforced) and collaborators (bundle, manifests,
plugins directory) are injected by the host.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from .exceptions import UnresolvableLocationError
from .hooks import skip_not_required
from .installer import PluginFileInstaller
from .protocols import BundleSourceProtocol
from .protocols import DependencyReaderProtocol
from .protocols import NotRequiredPluginHook
from .resolver import DependencyBuckets
from .resolver import Requirement
from .resolver import collect_dependencies
from .schema import Classification
from .schema import CopyOutcome
from .schema import Policy
from .schema import SourceLocator
from .utils import artifact_id
from .utils import file_name_from_locator

logger = logging.getLogger(__name__)

DEFAULT_BUNDLE_PATH = "/WEB-INF/plugins"


@dataclass
class _InstallPass:
    """State of one install pass, discarded when the pass returns."""

    policy: Policy
    names: set[str] = field(default_factory=set)
    copied: set[SourceLocator] = field(default_factory=set)
    buckets: DependencyBuckets = field(default_factory=DependencyBuckets)


def _classify(policy: Policy, plugin_id: str, should_install: bool, is_dependency: bool) -> Classification:
    if is_dependency:
        return Classification.DEPENDENCY
    if should_install or policy.is_required(plugin_id):
        return Classification.REQUIRED
    return Classification.OPTIONAL


class BundledPluginManager:
    """
    Installs bundled plugins into the live plugins directory.

    Example:
        >>> source = DirectoryBundleSource(Path("/opt/app/war"))
        >>> manager = BundledPluginManager(
        ...     source=source,
        ...     dependency_reader=ManifestDependencyReader(source),
        ...     plugins_dir=Path("/var/lib/app/plugins"),
        ... )
        >>> manager.run_install_pass(Policy(required={"git"}))
        {'git.jpi', 'credentials.jpi'}
    """

    def __init__(
        self,
        source: BundleSourceProtocol,
        dependency_reader: DependencyReaderProtocol,
        plugins_dir: Path,
        not_required_hook: NotRequiredPluginHook = skip_not_required,
        name_filter: Callable[[str], bool] | None = None,
    ):
        """Initialize manager with app-provided collaborators.

        Args:
            source: Bundle holding the plugin archives
            dependency_reader: Reads the direct dependencies of a bundled plugin
            plugins_dir: Live plugins directory (app determines location)
            not_required_hook: Decides the fate of plugins the policy doesn't
                require. Defaults to skipping them.
            name_filter: Optional predicate on root file names; roots it
                rejects are ignored
        """
        self.source = source
        self.dependency_reader = dependency_reader
        self.plugins_dir = plugins_dir
        self.not_required_hook = not_required_hook
        self.name_filter = name_filter
        self.installer = PluginFileInstaller(source, plugins_dir)

    def run_install_pass(self, policy: Policy, from_path: str = DEFAULT_BUNDLE_PATH) -> set[str]:
        """
        Install bundled plugins according to policy.

        Never raises: failures are logged and the plugins processed so far are
        returned.

        Args:
            policy: Required and version-enforced artifact IDs
            from_path: Bundle path holding the plugins

        Returns:
            Canonical file names of plugins installed in the plugins directory,
            including those that were already up to date
        """
        state = _InstallPass(policy=policy)
        try:
            self._install_roots(state, from_path)

            # Not required by policy, the hook decides
            for dependency in state.buckets.drain(Requirement.LENIENT):
                self._copy_if_not_installed(dependency, state, should_install=False, is_dependency=True)

            # Owed to installed plugins, must be installed
            for dependency in state.buckets.drain(Requirement.MANDATORY):
                self._copy_if_not_installed(dependency, state, should_install=True, is_dependency=True)
        except Exception as e:
            logger.error(f"Bundled plugin installation from {from_path} stopped early: {e}", exc_info=True)

        logger.info(f"Bundled plugin installation finished with {len(state.names)} plugins in {self.plugins_dir}")
        return state.names

    def _install_roots(self, state: _InstallPass, from_path: str) -> None:
        candidates = self.source.enumerate_candidates(from_path)
        logger.debug(f"Found {len(candidates)} bundled resources under {from_path}")

        for plugin_path in candidates:
            if self.name_filter is not None and not self.name_filter(plugin_path.rsplit("/", 1)[-1]):
                logger.debug(f"Ignoring bundled resource {plugin_path} rejected by name filter")
                continue

            outcome = self._copy_from_path(plugin_path, state)
            if outcome is None:
                # Not a bundled plugin, no need to process dependencies
                continue

            try:
                dependencies = collect_dependencies(self.dependency_reader, outcome, from_path, state.buckets)
                logger.debug(
                    f"Bundled plugin {outcome.file_name} depends on {len(dependencies)} bundled plugins: "
                    f"{[str(dependency) for dependency in dependencies]}"
                )
            except Exception as e:
                logger.error(
                    f"Failed to resolve dependencies for the bundled plugin {outcome.file_name}: {e}", exc_info=True
                )

    def _copy_from_path(self, plugin_path: str, state: _InstallPass) -> CopyOutcome | None:
        try:
            locator = self.source.resolve_locator(plugin_path)
        except UnresolvableLocationError as e:
            logger.warning(f"Cannot retrieve root plugin location from the plugin path {plugin_path}: {e}")
            return None
        except Exception as e:
            logger.error(f"Failed to resolve the bundled plugin path {plugin_path}: {e}", exc_info=True)
            return None
        return self._copy_if_not_installed(locator, state, should_install=False, is_dependency=False)

    def _copy_if_not_installed(
        self,
        locator: SourceLocator,
        state: _InstallPass,
        should_install: bool,
        is_dependency: bool,
    ) -> CopyOutcome | None:
        """
        Install one bundled plugin unless it was handled already in this pass.

        Plugins the policy doesn't require are passed to the hook first, unless
        should_install forces installation.

        Returns:
            Outcome if the plugin was installed or handled by the hook, None if
            it was rejected, a duplicate, or failed to install
        """
        file_name = file_name_from_locator(locator)
        if not file_name:
            # Some containers return directory names
            logger.warning(f"Got empty plugin file name from the plugin location {locator}. Cannot install")
            return None

        plugin_id = artifact_id(file_name)
        classification = _classify(state.policy, plugin_id, should_install, is_dependency)

        if locator in state.copied:
            logger.info(
                f"Skipping installation of {classification.value} plugin {plugin_id}, "
                "because it has been already installed"
            )
            return None

        if not should_install and not state.policy.is_required(plugin_id):
            try:
                handled = self.not_required_hook(locator, file_name, classification)
            except Exception as e:
                logger.error(
                    f"Failed to handle the not required bundled {classification.value} plugin {file_name}: {e}",
                    exc_info=True,
                )
                return None
            if handled is not None:
                return handled

        logger.info(f"Installing the bundled {classification.value} plugin {plugin_id}")
        try:
            installed_name = self.installer.copy_bundled_plugin(locator, file_name, state.policy)
        except Exception as e:
            logger.error(f"Failed to extract the bundled {classification.value} plugin {file_name}: {e}", exc_info=True)
            return None

        state.names.add(installed_name)
        state.copied.add(locator)
        return CopyOutcome(locator=locator, file_name=installed_name, installed=True)
