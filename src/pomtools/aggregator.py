"""Generate an aggregator pom.xml whose modules are the projects to build."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from lxml import etree

from pomtools.exceptions import PomModelError
from pomtools.pom import XP_MODULES, Pom
from pomtools.xmlutil import append_element, first_element, parse_xml

logger = logging.getLogger(__name__)

SKELETON_FIELDS = (
    ("modelVersion", "4.0.0"),
    ("groupId", "autogen"),
    ("artifactId", "autogen"),
    ("packaging", "pom"),
    ("version", "0"),
)


def skeleton_document() -> etree._ElementTree:
    """Build a minimal aggregator with an empty `<modules>`."""
    root = etree.Element("project")
    root.text = "\n"
    for tag, text in SKELETON_FIELDS:
        append_element(root, tag, text).tail = "\n"
    modules = append_element(root, "modules")
    modules.text = "\n"
    modules.tail = "\n"
    return etree.ElementTree(root)


def module_entry(root: Pom, output_dir: Path) -> str:
    """Directory of `root` relative to the aggregator, with '/' separators."""
    return Path(os.path.relpath(root.path.parent, output_dir.resolve())).as_posix()


def generate_aggregator(
    roots: Sequence[Pom],
    output_path: str | Path,
    skeleton: str | Path | None = None,
) -> etree._ElementTree:
    """Fill the `<modules>` of a skeleton with one entry per root project.

    Everything inside `<modules>` is replaced; the rest of the skeleton is
    left untouched. Entries follow the order of `roots`.

    Raises:
        PomModelError: If the skeleton has no `<modules>` element.
    """
    tree = parse_xml(Path(skeleton)) if skeleton is not None else skeleton_document()
    modules = first_element(tree.getroot(), XP_MODULES)
    if modules is None:
        raise PomModelError("Cannot find <modules> in document")

    for child in list(modules):
        modules.remove(child)
    modules.text = "\n"

    output_dir = Path(output_path).parent
    for pom in roots:
        append_element(modules, "module", module_entry(pom, output_dir)).tail = "\n"
    logger.debug("Aggregator lists %d module(s)", len(roots))
    return tree


def default_output_path(all_manifest: str | Path, build_manifest: str | Path | None = None) -> Path:
    """Derive `<name>.pom.xml` next to the full manifest.

    The name comes from the build manifest if given, else the full manifest,
    with a trailing `.xml` and then `.mf` removed.
    """
    source = Path(build_manifest if build_manifest is not None else all_manifest)
    name = source.name
    if name.lower().endswith(".xml"):
        name = name[:-4]
    if name.lower().endswith(".mf"):
        name = name[:-3]
    return Path(all_manifest).parent / f"{name}.pom.xml"
