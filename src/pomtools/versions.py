"""Version listing, cross-checking and rewriting across a loaded tree."""

from __future__ import annotations

import logging
from pathlib import Path

from pomtools.models import Artifact, VersionIssue
from pomtools.pom import DependencyRef, Pom
from pomtools.registry import ProjectRegistry

logger = logging.getLogger(__name__)

ANY_VERSION = "*"


def list_versions(root: Pom) -> list[Artifact]:
    """Return the effective coordinates of every module under `root`."""
    return [pom.artifact() for pom in root.subtree()]


def _check_dependencies(
    registry: ProjectRegistry, pom: Pom, deps: list[DependencyRef]
) -> list[VersionIssue]:
    issues: list[VersionIssue] = []
    for dep in deps:
        version = dep.version
        if version is None:
            continue
        target = registry.get(dep.identity)
        if target is not None and target.version != version:
            issues.append(
                VersionIssue(
                    project=pom.identity,
                    target=target.identity,
                    kind="dependency",
                    found=version,
                    expected=target.version,
                )
            )
    return issues


def check_versions(registry: ProjectRegistry) -> list[VersionIssue]:
    """Cross-check every in-tree version reference.

    Reports dependency and dependency-management versions that differ from
    the referenced module's version, and parent references whose version is
    wrong, missing, or which point outside the tree.
    """
    issues: list[VersionIssue] = []
    for pom in registry:
        issues.extend(_check_dependencies(registry, pom, pom.dependencies()))
        issues.extend(_check_dependencies(registry, pom, pom.dependency_management()))

        parent_group, parent_name = pom.parent_ref()
        if parent_group is None or parent_name is None:
            continue
        parent_id = f"{parent_group}:{parent_name}"
        parent = registry.get(parent_id)
        if parent is None:
            issues.append(VersionIssue(project=pom.identity, target=parent_id, kind="parent-missing"))
        elif parent.version is None:
            issues.append(VersionIssue(project=pom.identity, target=parent_id, kind="parent-no-version"))
        elif parent.version != pom.parent_version:
            issues.append(
                VersionIssue(
                    project=pom.identity,
                    target=parent_id,
                    kind="parent",
                    found=pom.parent_version,
                    expected=parent.version,
                )
            )
    return issues


def _matches(dep: DependencyRef, artifact: Artifact) -> bool:
    return dep.group == artifact.group and dep.name == artifact.name


def apply_version(registry: ProjectRegistry, artifact: Artifact) -> bool:
    """Set the version of `artifact` everywhere it is declared or referenced.

    Updates the module's own `<version>`, every in-tree dependency and
    dependency-management entry on it, and every `<parent>` pointing at it.

    Returns:
        True if any descriptor changed.

    Raises:
        PomModelError: If a child's `<parent>` has no `<version>` to update.
    """
    logger.info("Setting the version of %s to %s", artifact.identity, artifact.version)
    changed = False

    target = registry.get(artifact.identity)
    if target is not None and target.set_version(artifact.version):
        changed = True

    for pom in registry:
        for dep in pom.dependencies() + pom.dependency_management():
            if not _matches(dep, artifact):
                continue
            if not dep.has_version:
                logger.warning("Cannot set version of %s in %s", artifact.identity, pom.identity)
                continue
            if dep.set_version(artifact.version):
                changed = True

        if pom.parent_ref() == (artifact.group, artifact.name):
            if pom.set_parent_version(artifact.version):
                changed = True
    return changed


def read_version_file(path: str | Path) -> list[Artifact]:
    """Read one `groupId:artifactId:version` per line; blank lines are skipped."""
    artifacts: list[Artifact] = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line:
            artifacts.append(Artifact.parse(line))
    return artifacts


def _matching_dependencies(pom: Pom, artifact: Artifact) -> list[DependencyRef]:
    return [
        dep
        for dep in pom.dependencies()
        if _matches(dep, artifact)
        and (artifact.version == ANY_VERSION or dep.raw_version == artifact.version)
    ]


def find_dependents(registry: ProjectRegistry, artifact: Artifact) -> list[Pom]:
    """Return modules with a direct dependency on `artifact`.

    A version of `*` matches any declared version.
    """
    return [pom for pom in registry if _matching_dependencies(pom, artifact)]


def remove_dependency(registry: ProjectRegistry, artifact: Artifact) -> list[Pom]:
    """Remove every direct dependency on `artifact`; returns the edited modules."""
    edited: list[Pom] = []
    for pom in registry:
        deps = _matching_dependencies(pom, artifact)
        for dep in deps:
            dep.remove()
        if deps:
            logger.info("Removed %s from %s", artifact.identity, pom.identity)
            edited.append(pom)
    return edited


def write_modified(registry: ProjectRegistry, write_all: bool = False) -> list[Pom]:
    """Write back modified descriptors (or all of them with `write_all`)."""
    written: list[Pom] = []
    for pom in registry:
        if write_all or pom.modified:
            pom.write()
            written.append(pom)
    return written
