"""Bundled plugin data model - locators, install policy and copy outcomes.

These are immutable pydantic models: the host builds them (or loads a policy
file) and the manager only reads them.
"""

import tomllib
from enum import Enum
from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError

from .exceptions import PolicyError


class SourceLocator(BaseModel):
    """Reference to one plugin archive inside the bundle.

    Two locators are equal when they point at the same resource URI. Content
    is never compared.
    """

    model_config = ConfigDict(frozen=True)

    uri: str

    def __str__(self) -> str:
        return self.uri


class Classification(str, Enum):
    """Label describing why a plugin is being looked at."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    DEPENDENCY = "dependency"


class CopyOutcome(BaseModel):
    """Result of handling one bundled plugin.

    ``installed`` is False when the plugin was intentionally left out (for
    example by the not-required hook) but is still known, so its dependencies
    can be processed.
    """

    model_config = ConfigDict(frozen=True)

    locator: SourceLocator
    file_name: str
    installed: bool


class Policy(BaseModel):
    """
    Install policy supplied by the host.

    - required: artifact IDs that must be installed at startup
    - enforced_version: artifact IDs whose on-disk version must always match
      the bundled one, even if that means a downgrade
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    required: frozenset[str] = Field(default_factory=frozenset)
    enforced_version: frozenset[str] = Field(default_factory=frozenset, alias="enforced-version")

    def required_artifacts(self) -> frozenset[str]:
        return self.required

    def enforced_version_artifacts(self) -> frozenset[str]:
        return self.enforced_version

    def is_required(self, artifact_id: str) -> bool:
        return artifact_id in self.required

    def is_version_enforced(self, artifact_id: str) -> bool:
        return artifact_id in self.enforced_version

    @classmethod
    def from_toml(cls, policy_path: Path) -> "Policy":
        """
        Load install policy from a TOML file.

        Expected layout:

            [policy]
            required = ["credentials", "git"]
            enforced-version = ["git"]

        A file without a [policy] table yields the empty policy.

        Args:
            policy_path: Path to the policy file

        Returns:
            Policy instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            PolicyError: If the file is not valid TOML or has wrong value types
        """
        if not policy_path.exists():
            raise FileNotFoundError(f"Policy file not found: {policy_path}")

        try:
            with open(policy_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise PolicyError(f"Invalid TOML in {policy_path}: {e}", context={"path": str(policy_path)}) from e

        section = data.get("policy", {})
        if not isinstance(section, dict):
            raise PolicyError(f"[policy] must be a table in {policy_path}", context={"path": str(policy_path)})

        try:
            return cls.model_validate(section)
        except ValidationError as e:
            raise PolicyError(f"Invalid policy in {policy_path}: {e}", context={"path": str(policy_path)}) from e
