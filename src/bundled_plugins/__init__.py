"""bundled-plugins - Startup installation of plugins shipped inside an application bundle.

Public API exports.

This is library mechanism: hosts inject policy (required and version-enforced
plugins) and collaborators (bundle source, dependency reader, plugins directory).
"""

from .discovery import DirectoryBundleSource
from .exceptions import DependencyResolutionError
from .exceptions import InstallIOError
from .exceptions import PluginBundleError
from .exceptions import PolicyError
from .exceptions import UnresolvableLocationError
from .hooks import install_not_required
from .hooks import skip_not_required
from .installer import PluginFileInstaller
from .manager import DEFAULT_BUNDLE_PATH
from .manager import BundledPluginManager
from .manifest import ManifestDependencyReader
from .manifest import PluginDependency
from .manifest import parse_manifest
from .manifest import parse_plugin_dependencies
from .protocols import BundleSourceProtocol
from .protocols import DependencyReaderProtocol
from .protocols import NotRequiredPluginHook
from .resolver import DependencyBuckets
from .resolver import PendingDependency
from .resolver import Requirement
from .resolver import collect_dependencies
from .schema import Classification
from .schema import CopyOutcome
from .schema import Policy
from .schema import SourceLocator
from .utils import artifact_id
from .utils import canonical_file_name
from .utils import file_name_from_locator
from .utils import is_plugin_archive
from .utils import legacy_file_name

__all__ = [
    # Data model
    "Classification",
    "CopyOutcome",
    "Policy",
    "SourceLocator",
    # Install pass
    "BundledPluginManager",
    "DEFAULT_BUNDLE_PATH",
    "PluginFileInstaller",
    # Dependencies
    "DependencyBuckets",
    "PendingDependency",
    "Requirement",
    "collect_dependencies",
    "ManifestDependencyReader",
    "PluginDependency",
    "parse_manifest",
    "parse_plugin_dependencies",
    # Collaborators and hooks
    "BundleSourceProtocol",
    "DependencyReaderProtocol",
    "NotRequiredPluginHook",
    "DirectoryBundleSource",
    "skip_not_required",
    "install_not_required",
    # Exceptions
    "PluginBundleError",
    "DependencyResolutionError",
    "InstallIOError",
    "PolicyError",
    "UnresolvableLocationError",
    # Naming utilities
    "artifact_id",
    "canonical_file_name",
    "file_name_from_locator",
    "is_plugin_archive",
    "legacy_file_name",
]

__version__ = "0.1.0"
