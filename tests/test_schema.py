"""Tests for install policy loading and data model."""

import pytest
from pydantic import ValidationError
from bundled_plugins import CopyOutcome
from bundled_plugins import Policy
from bundled_plugins import PolicyError
from bundled_plugins import SourceLocator


def test_policy_defaults_to_empty():
    policy = Policy()

    assert policy.required_artifacts() == frozenset()
    assert policy.enforced_version_artifacts() == frozenset()
    assert not policy.is_required("git")


def test_policy_membership():
    policy = Policy(required={"git", "credentials"}, enforced_version=["git"])

    assert policy.is_required("git")
    assert policy.is_required("credentials")
    assert not policy.is_required("mailer")
    assert policy.is_version_enforced("git")
    assert not policy.is_version_enforced("credentials")
    assert isinstance(policy.required_artifacts(), frozenset)


def test_policy_is_immutable():
    policy = Policy(required={"git"})

    with pytest.raises(ValidationError):
        policy.required = frozenset({"other"})  # type: ignore[misc]


def test_policy_from_toml(tmp_path):
    policy_file = tmp_path / "policy.toml"
    policy_file.write_text(
        """
[policy]
required = ["credentials", "git"]
enforced-version = ["git"]
"""
    )

    policy = Policy.from_toml(policy_file)

    assert policy.required_artifacts() == {"credentials", "git"}
    assert policy.enforced_version_artifacts() == {"git"}


def test_policy_from_toml_without_policy_table(tmp_path):
    policy_file = tmp_path / "policy.toml"
    policy_file.write_text("[other]\nkey = 1\n")

    assert Policy.from_toml(policy_file) == Policy()


def test_policy_from_toml_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Policy.from_toml(tmp_path / "nonexistent.toml")


def test_policy_from_toml_invalid_toml(tmp_path):
    policy_file = tmp_path / "policy.toml"
    policy_file.write_text("[policy\nrequired = [")

    with pytest.raises(PolicyError, match="Invalid TOML"):
        Policy.from_toml(policy_file)


def test_policy_from_toml_wrong_value_type(tmp_path):
    policy_file = tmp_path / "policy.toml"
    policy_file.write_text('[policy]\nrequired = "git"\n')

    with pytest.raises(PolicyError, match="Invalid policy") as exc_info:
        Policy.from_toml(policy_file)

    assert exc_info.value.context["path"] == str(policy_file)


def test_source_locator_identity():
    """Locators compare and hash by URI."""
    first = SourceLocator(uri="file:///war/WEB-INF/plugins/git.jpi")
    same = SourceLocator(uri="file:///war/WEB-INF/plugins/git.jpi")
    other = SourceLocator(uri="file:///war/WEB-INF/plugins/git.hpi")

    assert first == same
    assert len({first, same, other}) == 2
    assert str(first) == "file:///war/WEB-INF/plugins/git.jpi"


def test_copy_outcome():
    locator = SourceLocator(uri="file:///war/WEB-INF/plugins/git.jpi")
    outcome = CopyOutcome(locator=locator, file_name="git.jpi", installed=False)

    assert outcome.locator == locator
    assert not outcome.installed
