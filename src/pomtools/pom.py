"""Project model: one node per Maven module descriptor."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from lxml import etree

from pomtools.exceptions import BrokenParentChainError, ParentCycleError, PomModelError
from pomtools.models import Artifact
from pomtools.registry import ProjectRegistry
from pomtools.xmlutil import (
    append_element,
    element_text,
    elements,
    first_element,
    local_name,
    parse_xml,
    text_first,
    write_xml,
    xpath_for,
)

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTOR = "pom.xml"

XP_GROUP = xpath_for("project", "groupId")
XP_NAME = xpath_for("project", "artifactId")
XP_VERSION = xpath_for("project", "version")
XP_PARENT_GROUP = xpath_for("project", "parent", "groupId")
XP_PARENT_NAME = xpath_for("project", "parent", "artifactId")
XP_PARENT_VERSION = xpath_for("project", "parent", "version")
XP_PROPERTIES = xpath_for("project", "properties") + "/*"
XP_MODULES = xpath_for("project", "modules")
XP_MODULE = xpath_for("project", "modules", "module")
XP_DEPENDENCY = xpath_for("project", "dependencies", "dependency")
XP_DEPMGMT = xpath_for("project", "dependencyManagement", "dependencies", "dependency")

XP_REL_GROUP = xpath_for("groupId", absolute=False)
XP_REL_NAME = xpath_for("artifactId", absolute=False)
XP_REL_VERSION = xpath_for("version", absolute=False)


class DependencyRef:
    """A mutable handle on one `<dependency>` element of a descriptor.

    Group and name are resolved in the context of the owning node; the
    version is kept as the raw expression so it can be rewritten in place.
    """

    def __init__(self, owner: Pom, element: etree._Element) -> None:
        self.owner = owner
        self.element = element

    @property
    def group(self) -> str | None:
        return self.owner.resolve(text_first(self.element, XP_REL_GROUP))

    @property
    def name(self) -> str | None:
        return self.owner.resolve(text_first(self.element, XP_REL_NAME))

    @property
    def identity(self) -> str:
        return f"{self.group}:{self.name}"

    @property
    def raw_version(self) -> str | None:
        return text_first(self.element, XP_REL_VERSION)

    @property
    def version(self) -> str | None:
        return self.owner.resolve(self.raw_version)

    @property
    def has_version(self) -> bool:
        return first_element(self.element, XP_REL_VERSION) is not None

    def set_version(self, version: str) -> bool:
        """Rewrite the `<version>` text of this dependency.

        Returns:
            True if the text changed.

        Raises:
            PomModelError: If the dependency has no `<version>` element.
        """
        el = first_element(self.element, XP_REL_VERSION)
        if el is None:
            raise PomModelError(f"Dependency {self.identity} in {self.owner.path} has no <version>")
        if element_text(el) == version:
            return False
        el.text = version
        self.owner.mark_modified()
        return True

    def remove(self) -> None:
        """Detach this dependency from its descriptor."""
        parent = self.element.getparent()
        if parent is not None:
            parent.remove(self.element)
            self.owner.mark_modified()

    def __repr__(self) -> str:
        return f"DependencyRef({self.identity}:{self.raw_version})"


class Subtree:
    """Restartable pre-order iteration over a node and its modules."""

    def __init__(self, root: Pom) -> None:
        self.root = root

    def __iter__(self) -> Iterator[Pom]:
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


class Pom:
    """A parsed Maven module descriptor.

    Derived values (group, version, identity) are recomputed from the XML
    tree on every access, so edits are visible immediately.
    """

    def __init__(self, path: Path, tree: etree._ElementTree, registry: ProjectRegistry) -> None:
        self.path = path
        self.tree = tree
        self.registry = registry
        self.children: list[Pom] = []
        self.modified = False

    @classmethod
    def load(
        cls,
        path: str | Path,
        registry: ProjectRegistry,
        descriptor_name: str = DEFAULT_DESCRIPTOR,
    ) -> Pom:
        """Load a descriptor and, recursively, every module it declares.

        Each node is registered before its modules are loaded. A descriptor
        that is already registered under the same path is returned as-is.

        Raises:
            PomNotFoundError: If a descriptor file does not exist.
            PomParseError: If a descriptor is not well-formed XML.
            PomModelError: If required fields are missing or modules loop.
        """
        return cls._load(Path(path).resolve(), registry, descriptor_name, ())

    @classmethod
    def _load(
        cls,
        path: Path,
        registry: ProjectRegistry,
        descriptor_name: str,
        loading: tuple[Path, ...],
    ) -> Pom:
        if path in loading:
            raise PomModelError(f"Module cycle: {path} declares itself through its modules")
        existing = registry.get_by_path(path)
        if existing is not None:
            return existing

        pom = cls(path, parse_xml(path), registry)
        if text_first(pom.root, XP_NAME) is None:
            raise PomModelError(f"Missing required <artifactId> in {path}")
        if pom.group is None:
            raise PomModelError(f"Missing required <groupId> (or parent <groupId>) in {path}")
        registry.register(pom)
        logger.debug("Loaded %s from %s", pom.identity, path)

        for module in pom.module_paths():
            child_path = cls.module_descriptor(path.parent, module, descriptor_name)
            pom.children.append(cls._load(child_path, registry, descriptor_name, (*loading, path)))
        return pom

    @staticmethod
    def module_descriptor(base_dir: Path, module: str, descriptor_name: str = DEFAULT_DESCRIPTOR) -> Path:
        """Map a `<module>` entry to the descriptor file it names."""
        target = base_dir / module
        if target.suffix == ".xml" and target.is_file():
            return target.resolve()
        return (target / descriptor_name).resolve()

    @property
    def root(self) -> etree._Element:
        return self.tree.getroot()

    def resolve(self, value: str | None) -> str | None:
        """Substitute `${...}` placeholders in the context of this node."""
        return self.registry.resolver.resolve(self, value)

    @property
    def name(self) -> str | None:
        return self.resolve(text_first(self.root, XP_NAME))

    @property
    def group(self) -> str | None:
        return self._inherited(XP_GROUP, XP_PARENT_GROUP)

    @property
    def version(self) -> str | None:
        """Own version, else the parent reference's, else the parent node's."""
        return self._inherited(XP_VERSION, XP_PARENT_VERSION)

    def _inherited(self, own_xpath: str, parent_xpath: str) -> str | None:
        node = self
        seen = {node.path}
        while True:
            raw = text_first(node.root, own_xpath) or text_first(node.root, parent_xpath)
            if raw is not None:
                return node.resolve(raw)
            parent = node.parent()
            if parent is None or parent is node:
                return None
            if parent.path in seen:
                raise ParentCycleError(f"Parent cycle through {parent.path}")
            seen.add(parent.path)
            node = parent

    @property
    def identity(self) -> str:
        return f"{self.group}:{self.name}"

    def artifact(self) -> Artifact:
        return Artifact(group=self.group or "", name=self.name or "", version=self.version or "")

    def parent_ref(self) -> tuple[str | None, str | None]:
        """Return the raw `(groupId, artifactId)` of `<parent>`."""
        return text_first(self.root, XP_PARENT_GROUP), text_first(self.root, XP_PARENT_NAME)

    @property
    def parent_version(self) -> str | None:
        return text_first(self.root, XP_PARENT_VERSION)

    def parent(self) -> Pom | None:
        """Look the parent up in the registry; None if undeclared or external."""
        group, name = self.parent_ref()
        if group is None and name is None:
            return None
        return self.registry.get(f"{group}:{name}")

    def root_project(self) -> Pom:
        """Walk up the parent chain to the top-level project.

        Raises:
            ParentCycleError: If the chain loops back on itself.
        """
        node = self
        seen = {node.path}
        while True:
            parent = node.parent()
            if parent is None or parent is node:
                return node
            if parent.path in seen:
                raise ParentCycleError(f"Parent cycle through {parent.path}")
            seen.add(parent.path)
            node = parent

    def properties(self) -> dict[str, str]:
        return {local_name(el): el.text or "" for el in elements(self.root, XP_PROPERTIES)}

    def module_paths(self) -> list[str]:
        return [t for t in (element_text(el) for el in elements(self.root, XP_MODULE)) if t]

    def dependencies(self) -> list[DependencyRef]:
        return [DependencyRef(self, el) for el in elements(self.root, XP_DEPENDENCY)]

    def dependency_identities(self) -> list[str]:
        """Return `groupId:artifactId` of each direct dependency that can be resolved.

        A dependency whose coordinates need a parent outside the tree is
        left out.
        """
        out: list[str] = []
        for dep in self.dependencies():
            try:
                out.append(dep.identity)
            except BrokenParentChainError as exc:
                logger.debug("Skipping dependency of %s: %s", self.path, exc)
        return out

    def dependency_management(self) -> list[DependencyRef]:
        return [DependencyRef(self, el) for el in elements(self.root, XP_DEPMGMT)]

    def subtree(self) -> Subtree:
        return Subtree(self)

    def mark_modified(self) -> None:
        self.modified = True

    def set_version(self, version: str) -> bool:
        """Set `<version>`, creating it just before `<artifactId>` if absent.

        Returns:
            True if the document changed.
        """
        el = first_element(self.root, XP_VERSION)
        if el is None:
            name_el = first_element(self.root, XP_NAME)
            if name_el is None:
                raise PomModelError(f"No <artifactId> to place <version> next to in {self.path}")
            el = self._insert_before(name_el, "version")
        elif element_text(el) == version:
            return False
        el.text = version
        self.mark_modified()
        return True

    def set_parent_version(self, version: str) -> bool:
        """Set `<parent><version>`.

        Raises:
            PomModelError: If the descriptor has no parent version to update.
        """
        el = first_element(self.root, XP_PARENT_VERSION)
        if el is None:
            raise PomModelError(f"No parent version in {self.identity} ({self.path})")
        if element_text(el) == version:
            return False
        el.text = version
        self.mark_modified()
        return True

    def write(self) -> Path:
        """Persist in-place edits to the descriptor file."""
        write_xml(self.tree, self.path)
        self.modified = False
        logger.info("Wrote %s", self.path)
        return self.path

    @staticmethod
    def _insert_before(anchor: etree._Element, tag: str) -> etree._Element:
        parent = anchor.getparent()
        previous = anchor.getprevious()
        indent = parent.text if previous is None else previous.tail
        el = append_element(parent, tag)
        anchor.addprevious(el)
        el.tail = indent
        return el

    def __repr__(self) -> str:
        return f"Pom({self.identity} @ {self.path})"
