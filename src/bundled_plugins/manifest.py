"""Plugin manifest reading - dependency discovery from META-INF/MANIFEST.MF.

A plugin archive declares what it needs in its manifest main section:

    Plugin-Dependencies: credentials:2.1,scm-api:1.0;resolution:=optional

Only the dependency header is read; versions are kept for logging but never
compared.
"""

import logging
import zipfile

from pydantic import BaseModel
from pydantic import ConfigDict

from .exceptions import DependencyResolutionError
from .exceptions import UnresolvableLocationError
from .protocols import BundleSourceProtocol
from .schema import SourceLocator
from .utils import CURRENT_SUFFIX
from .utils import LEGACY_SUFFIX

logger = logging.getLogger(__name__)

MANIFEST_PATH = "META-INF/MANIFEST.MF"
DEPENDENCIES_HEADER = "Plugin-Dependencies"
OPTIONAL_RESOLUTION = "resolution:=optional"


class PluginDependency(BaseModel):
    """One entry of a Plugin-Dependencies header."""

    model_config = ConfigDict(frozen=True)

    artifact_id: str
    version: str = ""
    optional: bool = False


def parse_manifest(text: str) -> dict[str, str]:
    """
    Parse the main section of a JAR manifest.

    Continuation lines (starting with a single space) are joined to the
    previous header. Parsing stops at the first blank line, which ends the
    main section.

    Args:
        text: Manifest content

    Returns:
        Header name to value mapping
    """
    headers: dict[str, str] = {}
    current: str | None = None

    for line in text.splitlines():
        if not line:
            if headers:
                break
            continue
        if line.startswith(" ") and current is not None:
            headers[current] += line[1:]
            continue
        name, sep, value = line.partition(":")
        if not sep:
            logger.debug(f"Ignoring malformed manifest line: {line!r}")
            current = None
            continue
        current = name.strip()
        headers[current] = value.strip()

    return headers


def parse_plugin_dependencies(value: str) -> list[PluginDependency]:
    """
    Parse a Plugin-Dependencies header value.

    Examples:
        >>> parse_plugin_dependencies("git:4.0;resolution:=optional")
        [PluginDependency(artifact_id='git', version='4.0', optional=True)]
    """
    dependencies = []
    for spec in value.split(","):
        spec = spec.strip()
        if not spec:
            continue
        coordinates, *attributes = spec.split(";")
        artifact, _, version = coordinates.partition(":")
        if not artifact:
            logger.debug(f"Ignoring dependency without artifact ID: {spec!r}")
            continue
        dependencies.append(
            PluginDependency(
                artifact_id=artifact.strip(),
                version=version.strip(),
                optional=any(attribute.strip() == OPTIONAL_RESOLUTION for attribute in attributes),
            )
        )
    return dependencies


class ManifestDependencyReader:
    """
    Dependency reader backed by plugin archive manifests.

    Each declared dependency is looked up in the same bundle directory as the
    plugin declaring it, first under the legacy suffix, then the current one.
    Dependencies that are not bundled are left out. Optional dependencies are
    included like mandatory ones.

    Example:
        >>> reader = ManifestDependencyReader(source)
        >>> reader.discover_dependencies(locator, "/WEB-INF/plugins")
        [SourceLocator(uri='file:///bundle/WEB-INF/plugins/credentials.jpi')]
    """

    def __init__(self, source: BundleSourceProtocol):
        self.source = source

    def read_manifest(self, locator: SourceLocator) -> dict[str, str]:
        """Read the manifest main section of a plugin archive.

        Returns an empty mapping if the archive has no manifest.

        Raises:
            DependencyResolutionError: If the archive or manifest is unreadable
        """
        try:
            with self.source.open(locator) as f, zipfile.ZipFile(f) as archive:
                try:
                    raw = archive.read(MANIFEST_PATH)
                except KeyError:
                    logger.debug(f"No manifest in {locator}")
                    return {}
            return parse_manifest(raw.decode("utf-8"))
        except (OSError, zipfile.BadZipFile, UnicodeDecodeError) as e:
            raise DependencyResolutionError(
                f"Cannot read manifest of {locator}: {e}",
                context={"locator": locator.uri},
            ) from e

    def discover_dependencies(self, locator: SourceLocator, prefix: str) -> list[SourceLocator]:
        manifest = self.read_manifest(locator)
        dependencies = parse_plugin_dependencies(manifest.get(DEPENDENCIES_HEADER, ""))

        locators = []
        for dependency in dependencies:
            found = self._find_bundled(dependency.artifact_id, prefix)
            if found is None:
                logger.debug(f"Dependency {dependency.artifact_id} of {locator} is not bundled")
                continue
            locators.append(found)
        return locators

    def _find_bundled(self, plugin_id: str, prefix: str) -> SourceLocator | None:
        base = prefix.rstrip("/")
        for suffix in (LEGACY_SUFFIX, CURRENT_SUFFIX):
            try:
                return self.source.resolve_locator(f"{base}/{plugin_id}{suffix}")
            except UnresolvableLocationError:
                continue
        return None
