"""Tests for dependency buckets and dependency collection."""

import pytest
from bundled_plugins import CopyOutcome
from bundled_plugins import DependencyBuckets
from bundled_plugins import DependencyResolutionError
from bundled_plugins import PendingDependency
from bundled_plugins import Requirement
from bundled_plugins import SourceLocator
from bundled_plugins import collect_dependencies


def _loc(name: str) -> SourceLocator:
    return SourceLocator(uri=f"file:///war/WEB-INF/plugins/{name}")


class MockReader:
    """Dependency reader returning a fixed graph keyed by locator."""

    def __init__(self, graph: dict[SourceLocator, list[SourceLocator]]):
        self.graph = graph
        self.calls: list[tuple[SourceLocator, str]] = []

    def discover_dependencies(self, locator, prefix):
        self.calls.append((locator, prefix))
        if locator not in self.graph:
            raise DependencyResolutionError(f"No manifest for {locator}")
        return self.graph[locator]


def test_buckets_keep_insertion_order_and_dedup():
    buckets = DependencyBuckets()

    buckets.extend([_loc("b.jpi"), _loc("a.jpi")], Requirement.MANDATORY)
    buckets.add(PendingDependency(locator=_loc("b.jpi"), requirement=Requirement.MANDATORY))

    assert buckets.pending(Requirement.MANDATORY) == [_loc("b.jpi"), _loc("a.jpi")]
    assert len(buckets) == 2


def test_buckets_are_independent():
    """The same locator can be owed both leniently and mandatorily."""
    buckets = DependencyBuckets()

    buckets.extend([_loc("c.jpi")], Requirement.LENIENT)
    buckets.extend([_loc("c.jpi")], Requirement.MANDATORY)

    assert buckets.pending(Requirement.LENIENT) == [_loc("c.jpi")]
    assert buckets.pending(Requirement.MANDATORY) == [_loc("c.jpi")]
    assert len(buckets) == 2


def test_drain_empties_only_that_bucket():
    buckets = DependencyBuckets()
    buckets.extend([_loc("a.jpi")], Requirement.LENIENT)
    buckets.extend([_loc("b.jpi")], Requirement.MANDATORY)

    assert buckets.drain(Requirement.LENIENT) == [_loc("a.jpi")]
    assert buckets.pending(Requirement.LENIENT) == []
    assert buckets.pending(Requirement.MANDATORY) == [_loc("b.jpi")]


def test_collect_dependencies_of_installed_root_are_mandatory():
    reader = MockReader({_loc("a.jpi"): [_loc("c.jpi")]})
    buckets = DependencyBuckets()
    outcome = CopyOutcome(locator=_loc("a.jpi"), file_name="a.jpi", installed=True)

    found = collect_dependencies(reader, outcome, "/WEB-INF/plugins", buckets)

    assert found == [_loc("c.jpi")]
    assert buckets.pending(Requirement.MANDATORY) == [_loc("c.jpi")]
    assert buckets.pending(Requirement.LENIENT) == []
    assert reader.calls == [(_loc("a.jpi"), "/WEB-INF/plugins")]


def test_collect_dependencies_of_skipped_root_are_lenient():
    reader = MockReader({_loc("b.jpi"): [_loc("d.jpi"), _loc("e.jpi")]})
    buckets = DependencyBuckets()
    outcome = CopyOutcome(locator=_loc("b.jpi"), file_name="b.jpi", installed=False)

    collect_dependencies(reader, outcome, "/WEB-INF/plugins", buckets)

    assert buckets.pending(Requirement.LENIENT) == [_loc("d.jpi"), _loc("e.jpi")]
    assert buckets.pending(Requirement.MANDATORY) == []


def test_collect_dependencies_propagates_reader_errors():
    reader = MockReader({})
    buckets = DependencyBuckets()
    outcome = CopyOutcome(locator=_loc("a.jpi"), file_name="a.jpi", installed=True)

    with pytest.raises(DependencyResolutionError):
        collect_dependencies(reader, outcome, "/WEB-INF/plugins", buckets)

    assert len(buckets) == 0
