from __future__ import annotations

from pathlib import Path

import pytest

from pomtools.exceptions import PomModelError
from pomtools.models import Artifact
from pomtools.pom import Pom
from pomtools.registry import ProjectRegistry
from pomtools.versions import (
    apply_version,
    check_versions,
    find_dependents,
    list_versions,
    read_version_file,
    remove_dependency,
    write_modified,
)


@pytest.fixture
def tree(make_pom, registry) -> Pom:
    """parent 1.0 managing core at 0.9; app depends on core 1.0 and on an external lib."""
    make_pom("core", "core", group=None, version=None, parent=("com.acme", "parent", "1.0"))
    make_pom(
        "app",
        "app",
        group=None,
        version=None,
        parent=("com.acme", "parent", "0.5"),
        dependencies=[("com.acme", "core", "1.0"), ("org.slf4j", "slf4j-api", "2.0.12")],
    )
    return Pom.load(
        make_pom(
            artifact="parent",
            version="1.0",
            modules=["core", "app"],
            managed=[("com.acme", "core", "0.9")],
        ),
        registry,
    )


def test_list_versions(tree: Pom) -> None:
    assert [a.compact() for a in list_versions(tree)] == [
        "com.acme:parent:1.0",
        "com.acme:core:1.0",
        "com.acme:app:0.5",
    ]


def test_check_versions_reports_mismatches(tree: Pom, registry: ProjectRegistry) -> None:
    issues = check_versions(registry)
    found = {(i.project, i.target, i.kind, i.found, i.expected) for i in issues}

    assert found == {
        ("com.acme:parent", "com.acme:core", "dependency", "0.9", "1.0"),
        ("com.acme:app", "com.acme:parent", "parent", "0.5", "1.0"),
    }


def test_check_versions_reports_parent_outside_tree(make_pom, registry) -> None:
    Pom.load(make_pom(parent=("org.jboss", "jboss-parent", "39")), registry)
    [issue] = check_versions(registry)
    assert issue.kind == "parent-missing"
    assert issue.target == "org.jboss:jboss-parent"


def test_apply_version_fixes_every_reference(tree: Pom, registry: ProjectRegistry) -> None:
    assert apply_version(registry, Artifact.parse("com.acme:core:2.0")) is True

    core = registry.get("com.acme:core")
    app = registry.get("com.acme:app")
    assert core.version == "2.0"
    assert app.dependencies()[0].raw_version == "2.0"
    assert app.dependencies()[1].raw_version == "2.0.12"
    assert tree.dependency_management()[0].raw_version == "2.0"
    assert {p.identity for p in registry if p.modified} == {
        "com.acme:parent",
        "com.acme:core",
        "com.acme:app",
    }


def test_apply_version_updates_parent_references(tree: Pom, registry: ProjectRegistry) -> None:
    assert apply_version(registry, Artifact.parse("com.acme:parent:1.1")) is True

    assert tree.version == "1.1"
    assert registry.get("com.acme:core").parent_version == "1.1"
    assert registry.get("com.acme:core").version == "1.1"
    assert registry.get("com.acme:app").parent_version == "1.1"
    assert check_versions(registry)[0].kind == "dependency"


def test_apply_current_version_changes_nothing(make_pom, registry) -> None:
    Pom.load(make_pom(), registry)
    assert apply_version(registry, Artifact.parse("com.acme:demo:1.0")) is False
    assert write_modified(registry) == []


def test_apply_version_needs_parent_version_element(make_pom, registry) -> None:
    make_pom("child", "child", group=None, version="1.0", parent=("com.acme", "parent", None))
    Pom.load(make_pom(artifact="parent", modules=["child"]), registry)
    with pytest.raises(PomModelError):
        apply_version(registry, Artifact.parse("com.acme:parent:2.0"))


def test_find_dependents(tree: Pom, registry: ProjectRegistry) -> None:
    any_version = find_dependents(registry, Artifact.parse("com.acme:core:*"))
    exact = find_dependents(registry, Artifact.parse("org.slf4j:slf4j-api:2.0.12"))
    other = find_dependents(registry, Artifact.parse("org.slf4j:slf4j-api:1.7"))

    assert [p.identity for p in any_version] == ["com.acme:app"]
    assert [p.identity for p in exact] == ["com.acme:app"]
    assert other == []


def test_remove_dependency_and_write(tree: Pom, registry: ProjectRegistry) -> None:
    edited = remove_dependency(registry, Artifact.parse("org.slf4j:slf4j-api:*"))
    app = registry.get("com.acme:app")

    assert edited == [app]
    assert [d.identity for d in app.dependencies()] == ["com.acme:core"]

    written = write_modified(registry)
    assert written == [app]
    assert app.modified is False
    assert "slf4j" not in app.path.read_text(encoding="utf-8")


def test_write_all(tree: Pom, registry: ProjectRegistry) -> None:
    assert len(write_modified(registry, write_all=True)) == 3


def test_read_version_file(tmp_path: Path) -> None:
    path = tmp_path / "versions.txt"
    path.write_text("com.acme:core:2.0\n\n  com.acme:app:3.0  \n", encoding="utf-8")
    assert [a.compact() for a in read_version_file(path)] == ["com.acme:core:2.0", "com.acme:app:3.0"]


def test_list_versions_accepts_an_empty_artifact_id(make_pom, registry) -> None:
    pom = Pom.load(make_pom(artifact="${n}", properties={"n": ""}), registry)
    assert [a.compact() for a in list_versions(pom)] == ["com.acme::1.0"]
