"""Compute which root projects must be rebuilt for a given build set.

A project named in the build set pulls in every module of its own subtree.
Then every project that depends on something already in the set is added,
repeatedly, until nothing new turns up. Finally each module is mapped to the
top-level project that builds it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from pomtools.exceptions import UnknownProjectError
from pomtools.manifest import Manifest
from pomtools.pom import DEFAULT_DESCRIPTOR, Pom
from pomtools.registry import ProjectRegistry

logger = logging.getLogger(__name__)


@dataclass
class BuildPlan:
    """Result of closing a build set over reverse dependencies.

    Attributes:
        working_set: Module identities to build, in discovery order
        roots: Top-level projects covering `working_set`, in discovery order
        scans: Number of registry scans the expansion took
        full_build: True when the manifest had no explicit build set
    """

    working_set: list[str] = field(default_factory=list)
    roots: list[Pom] = field(default_factory=list)
    scans: int = 0
    full_build: bool = False


def load_projects(
    manifest: Manifest,
    registry: ProjectRegistry,
    descriptor_name: str = DEFAULT_DESCRIPTOR,
) -> dict[str, Pom]:
    """Load every manifest project (and its modules) into `registry`."""
    loaded: dict[str, Pom] = {}
    for name in manifest.projects:
        loaded[name] = Pom.load(manifest.descriptor_path(name), registry, descriptor_name)
    logger.info("Loaded %d project(s), %d module(s)", len(loaded), len(registry))
    return loaded


def dependency_index(registry: ProjectRegistry) -> dict[str, set[str]]:
    """Map each module identity to the identities it directly depends on."""
    return {pom.identity: set(pom.dependency_identities()) for pom in registry}


def expand_dependents(registry: ProjectRegistry, seed: Iterable[str]) -> tuple[list[str], int]:
    """Grow `seed` with every module that depends on something in it.

    Each scan looks at every module in the registry and marks those with a
    dependency inside the current set; marks are merged after the scan. The
    set only grows, so this stops after at most `len(registry) + 1` scans.

    Returns:
        The closed set in discovery order, and the number of scans made.
    """
    index = dependency_index(registry)
    working: dict[str, None] = dict.fromkeys(seed)
    scans = 0
    while True:
        scans += 1
        marked = [
            identity
            for identity, deps in index.items()
            if identity not in working and not deps.isdisjoint(working)
        ]
        logger.debug("Scan %d marked %s", scans, marked)
        if not marked:
            break
        working.update(dict.fromkeys(marked))
    return list(working), scans


def root_projects(poms: Iterable[Pom]) -> list[Pom]:
    """Map modules to their root projects, keeping first-seen order."""
    roots: dict[str, Pom] = {}
    for pom in poms:
        root = pom.root_project()
        roots.setdefault(root.identity, root)
    return list(roots.values())


def resolve_build_plan(
    manifest: Manifest,
    registry: ProjectRegistry,
    descriptor_name: str = DEFAULT_DESCRIPTOR,
) -> BuildPlan:
    """Resolve the root projects to build for `manifest`.

    Raises:
        UnknownProjectError: If the build set names a project that is not
            in the manifest's module map.
    """
    loaded = load_projects(manifest, registry, descriptor_name)

    if not manifest.build_set:
        roots = root_projects(loaded.values())
        plan = BuildPlan(
            working_set=list(dict.fromkeys(pom.identity for pom in loaded.values())),
            roots=roots,
            full_build=True,
        )
        _log_plan(plan)
        return plan

    seed: dict[str, None] = {}
    for name in manifest.build_set:
        project = loaded.get(name)
        if project is None:
            raise UnknownProjectError(f"POM for {name} not found in manifest")
        seed.update(dict.fromkeys(pom.identity for pom in project.subtree()))

    working_set, scans = expand_dependents(registry, seed)
    roots = root_projects(registry.get(identity) for identity in working_set)
    plan = BuildPlan(working_set=working_set, roots=roots, scans=scans)
    _log_plan(plan)
    return plan


def _log_plan(plan: BuildPlan) -> None:
    logger.info("Build set: %s", ", ".join(plan.working_set))
    logger.info("Build projects: %s", ", ".join(p.identity for p in plan.roots))
