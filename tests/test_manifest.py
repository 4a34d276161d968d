from __future__ import annotations

from pathlib import Path

import pytest

from pomtools.exceptions import ManifestError
from pomtools.manifest import Manifest, load_manifests


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_parse_module_map_and_build_set(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "all.mf.xml",
        """<manifest>
  <modulemap>
    <module><name>core</name><pom>core/pom.xml</pom></module>
    <module><name>app</name><pom>app/pom.xml</pom></module>
  </modulemap>
  <buildset>
    <module>core</module>
    <!-- skipped -->
    <other>ignored</other>
    <module>core</module>
  </buildset>
</manifest>
""",
    )
    mf = Manifest.load(path)

    assert mf.projects == {"core": "core/pom.xml", "app": "app/pom.xml"}
    assert list(mf.projects) == ["core", "app"]
    assert mf.build_set == ["core"]
    assert mf.descriptor_path("app") == tmp_path.resolve() / "app/pom.xml"


def test_empty_build_set_means_build_everything(make_manifest) -> None:
    mf = Manifest.load(make_manifest({"core": "core/pom.xml"}))
    assert mf.build_set == []


def test_root_element_must_be_manifest(tmp_path: Path) -> None:
    path = _write(tmp_path, "bad.mf.xml", "<project/>")
    with pytest.raises(ManifestError):
        Manifest.load(path)


def test_entry_without_pom_is_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, "bad.mf.xml", "<manifest><modulemap><module><name>x</name></module></modulemap></manifest>")
    with pytest.raises(ManifestError):
        Manifest.load(path)


def test_build_manifest_overlays_full_manifest(make_manifest) -> None:
    full = make_manifest({"core": "core/pom.xml", "app": "app/pom.xml"})
    build = make_manifest({}, build_set=["app"], name="sub/release.mf.xml")

    mf = load_manifests(full, build)

    assert mf.projects == {"core": "core/pom.xml", "app": "app/pom.xml"}
    assert mf.build_set == ["app"]
    assert mf.base_dir == full.resolve().parent


def test_same_manifest_is_not_merged_twice(make_manifest) -> None:
    full = make_manifest({"core": "core/pom.xml"}, build_set=["core"])
    assert load_manifests(full, full).build_set == ["core"]
