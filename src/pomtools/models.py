"""Pydantic models for Maven coordinates and version reports."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Artifact(BaseModel):
    """Maven coordinates (groupId, artifactId, version).

    The version is the remainder after the second colon, so it may itself
    contain colons.
    """

    model_config = ConfigDict(frozen=True)

    group: str
    name: str
    version: str

    @classmethod
    def parse(cls, text: str) -> "Artifact":
        """Parse a `groupId:artifactId:version` string.

        Raises:
            ValueError: If the text has fewer than two colons.
        """
        group, sep, rest = text.partition(":")
        name, sep2, version = rest.partition(":")
        if not sep or not sep2:
            raise ValueError(f"Expected groupId:artifactId:version, got {text!r}")
        return cls(group=group, name=name, version=version)

    @property
    def identity(self) -> str:
        return f"{self.group}:{self.name}"

    def compact(self) -> str:
        """Return a compact string representation.

        Returns:
            A string like `groupId:artifactId:version`.
        """
        return f"{self.group}:{self.name}:{self.version}"

    def __str__(self) -> str:
        return self.compact()


class VersionIssue(BaseModel):
    """A version inconsistency found while cross-checking the tree."""

    project: str
    target: str
    kind: str
    found: str | None = None
    expected: str | None = None

    def label(self) -> str:
        """Return a user-facing description of the issue."""
        if self.kind == "parent-missing":
            return f"{self.project} has parent {self.target} but the parent is not in the tree"
        if self.kind == "parent-no-version":
            return f"{self.target} has no version"
        if self.kind == "parent":
            return (
                f"{self.project} has parent {self.target} version {self.found} "
                f"but the correct version should be {self.expected}"
            )
        return (
            f"{self.project} depends on {self.target} version {self.found} "
            f"but the correct version should be {self.expected}"
        )
