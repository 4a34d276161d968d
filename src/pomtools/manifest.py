"""Build manifests: project name -> descriptor path, plus an optional build set."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field

from pomtools.exceptions import ManifestError
from pomtools.xmlutil import element_text, elements, local_name, parse_xml, text_first, xpath_for

logger = logging.getLogger(__name__)

XP_MODULEMAP = xpath_for("manifest", "modulemap") + "/*"
XP_BUILDSET = xpath_for("manifest", "buildset") + "/*"
XP_REL_NAME = xpath_for("name", absolute=False)
XP_REL_POM = xpath_for("pom", absolute=False)


class Manifest(BaseModel):
    """A parsed build manifest.

    An empty `build_set` means "build everything". Names are not checked
    against the project model here; unknown names fail later, when the build
    plan is resolved.
    """

    projects: dict[str, str] = Field(default_factory=dict)
    build_set: list[str] = Field(default_factory=list)
    base_dir: Path = Path(".")

    @classmethod
    def load(cls, path: str | Path) -> "Manifest":
        """Parse a manifest file.

        Raises:
            PomNotFoundError: If the file does not exist.
            PomParseError: If the XML cannot be parsed.
            ManifestError: If the root element is not `<manifest>` or a
                modulemap entry lacks a name or pom.
        """
        manifest_path = Path(path)
        root = parse_xml(manifest_path).getroot()
        if local_name(root) != "manifest":
            raise ManifestError(f"Root element 'manifest' is expected: {manifest_path}")

        projects: dict[str, str] = {}
        for entry in elements(root, XP_MODULEMAP):
            name = text_first(entry, XP_REL_NAME)
            pom = text_first(entry, XP_REL_POM)
            if name is None or pom is None:
                raise ManifestError(f"Module map entry without <name> or <pom> in {manifest_path}")
            projects[name] = pom

        build_set: list[str] = []
        for item in elements(root, XP_BUILDSET):
            name = element_text(item)
            if local_name(item) == "module" and name and name not in build_set:
                build_set.append(name)

        logger.debug("Manifest %s: %d project(s), build set %s", manifest_path, len(projects), build_set)
        return cls(projects=projects, build_set=build_set, base_dir=manifest_path.resolve().parent)

    def merge(self, other: "Manifest") -> "Manifest":
        """Overlay `other` onto this manifest.

        Module map entries from `other` are added (or replace same-named
        ones) and its build set names are appended. Descriptor paths stay
        relative to this manifest's directory.
        """
        build_set = list(self.build_set)
        build_set.extend(n for n in other.build_set if n not in build_set)
        return Manifest(
            projects={**self.projects, **other.projects},
            build_set=build_set,
            base_dir=self.base_dir,
        )

    def descriptor_path(self, project: str) -> Path:
        return self.base_dir / self.projects[project]


def load_manifests(all_manifest: str | Path, build_manifest: str | Path | None = None) -> Manifest:
    """Load the full manifest and, if given, overlay a build manifest on it."""
    manifest = Manifest.load(all_manifest)
    if build_manifest is not None and Path(build_manifest).resolve() != Path(all_manifest).resolve():
        manifest = manifest.merge(Manifest.load(build_manifest))
    return manifest
