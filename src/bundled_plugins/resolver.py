"""Dependency resolution for bundled plugins.

Dependencies found while processing root plugins are parked in one of two
buckets and drained after all roots are done:

- MANDATORY: owed to a root that was actually installed, must be installed too
- LENIENT: owed to a root that was left out, still subject to the hook

Only direct dependencies of roots are collected. Dependencies of dependencies
are never followed.
"""

from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict

from .protocols import DependencyReaderProtocol
from .schema import CopyOutcome
from .schema import SourceLocator


class Requirement(str, Enum):
    """How strictly a pending dependency has to be installed."""

    MANDATORY = "mandatory"
    LENIENT = "lenient"


class PendingDependency(BaseModel):
    """Dependency waiting to be processed after the root pass."""

    model_config = ConfigDict(frozen=True)

    locator: SourceLocator
    requirement: Requirement


class DependencyBuckets:
    """
    Ordered, de-duplicated dependency buckets for one install pass.

    Example:
        >>> buckets = DependencyBuckets()
        >>> buckets.add(PendingDependency(locator=loc, requirement=Requirement.MANDATORY))
        >>> buckets.drain(Requirement.MANDATORY)
        [SourceLocator(uri=...)]
    """

    def __init__(self):
        self._buckets: dict[Requirement, dict[SourceLocator, None]] = {
            Requirement.LENIENT: {},
            Requirement.MANDATORY: {},
        }

    def add(self, dependency: PendingDependency) -> None:
        self._buckets[dependency.requirement].setdefault(dependency.locator, None)

    def extend(self, locators: list[SourceLocator], requirement: Requirement) -> None:
        for locator in locators:
            self.add(PendingDependency(locator=locator, requirement=requirement))

    def pending(self, requirement: Requirement) -> list[SourceLocator]:
        """Locators currently waiting in a bucket, in insertion order."""
        return list(self._buckets[requirement])

    def drain(self, requirement: Requirement) -> list[SourceLocator]:
        """Empty a bucket and return what it held, in insertion order."""
        locators = list(self._buckets[requirement])
        self._buckets[requirement].clear()
        return locators

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())


def collect_dependencies(
    reader: DependencyReaderProtocol,
    outcome: CopyOutcome,
    prefix: str,
    buckets: DependencyBuckets,
) -> list[SourceLocator]:
    """
    Park the direct dependencies of a processed root plugin.

    Dependencies of an installed root go to the MANDATORY bucket, those of a
    root that was left out go to the LENIENT one.

    Args:
        reader: Dependency reader for bundled plugins
        outcome: Result of handling the root plugin
        prefix: Bundle path the plugins live under
        buckets: Buckets of the current pass

    Returns:
        Locators of the discovered dependencies

    Raises:
        DependencyResolutionError: If the root's dependencies cannot be read
    """
    requirement = Requirement.MANDATORY if outcome.installed else Requirement.LENIENT
    dependencies = reader.discover_dependencies(outcome.locator, prefix)
    buckets.extend(dependencies, requirement)
    return dependencies
