"""Pytest configuration and fixtures for pom-tools tests."""
from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

import pytest

from pomtools.registry import ProjectRegistry

POM_NS = "http://maven.apache.org/POM/4.0.0"

Coords = tuple[str, str, "str | None"]


def _deps(items: Iterable[Coords], indent: str) -> list[str]:
    lines: list[str] = []
    for g, a, v in items:
        lines.append(f"{indent}<dependency>")
        lines.append(f"{indent}  <groupId>{g}</groupId>")
        lines.append(f"{indent}  <artifactId>{a}</artifactId>")
        if v is not None:
            lines.append(f"{indent}  <version>{v}</version>")
        lines.append(f"{indent}</dependency>")
    return lines


@pytest.fixture
def registry() -> ProjectRegistry:
    return ProjectRegistry()


@pytest.fixture
def make_pom(tmp_path: Path) -> Callable[..., Path]:
    """Write `<directory>/pom.xml` under tmp_path and return its path."""

    def _make(
        directory: str = ".",
        artifact: str = "demo",
        *,
        group: str | None = "com.acme",
        version: str | None = "1.0",
        parent: Coords | None = None,
        modules: Iterable[str] = (),
        dependencies: Iterable[Coords] = (),
        managed: Iterable[Coords] = (),
        properties: Mapping[str, str] | None = None,
        namespace: bool = True,
    ) -> Path:
        lines = ['<?xml version="1.0" encoding="UTF-8"?>']
        lines.append(f'<project xmlns="{POM_NS}">' if namespace else "<project>")
        lines.append("  <modelVersion>4.0.0</modelVersion>")
        if parent is not None:
            pg, pa, pv = parent
            lines.append("  <parent>")
            lines.append(f"    <groupId>{pg}</groupId>")
            lines.append(f"    <artifactId>{pa}</artifactId>")
            if pv is not None:
                lines.append(f"    <version>{pv}</version>")
            lines.append("  </parent>")
        if group is not None:
            lines.append(f"  <groupId>{group}</groupId>")
        lines.append(f"  <artifactId>{artifact}</artifactId>")
        if version is not None:
            lines.append(f"  <version>{version}</version>")
        if properties:
            lines.append("  <properties>")
            lines.extend(f"    <{k}>{v}</{k}>" for k, v in properties.items())
            lines.append("  </properties>")
        modules = list(modules)
        if modules:
            lines.append("  <modules>")
            lines.extend(f"    <module>{m}</module>" for m in modules)
            lines.append("  </modules>")
        managed = list(managed)
        if managed:
            lines.append("  <dependencyManagement>")
            lines.append("    <dependencies>")
            lines.extend(_deps(managed, "      "))
            lines.append("    </dependencies>")
            lines.append("  </dependencyManagement>")
        dependencies = list(dependencies)
        if dependencies:
            lines.append("  <dependencies>")
            lines.extend(_deps(dependencies, "    "))
            lines.append("  </dependencies>")
        lines.append("</project>")

        path = tmp_path / directory / "pom.xml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _make


@pytest.fixture
def make_manifest(tmp_path: Path) -> Callable[..., Path]:
    """Write a build manifest under tmp_path and return its path."""

    def _make(
        projects: Mapping[str, str],
        build_set: Iterable[str] = (),
        name: str = "all.mf.xml",
    ) -> Path:
        lines = ["<manifest>"]
        if projects:
            lines.append("  <modulemap>")
            for project, pom in projects.items():
                lines.append(f"    <module><name>{project}</name><pom>{pom}</pom></module>")
            lines.append("  </modulemap>")
        build_set = list(build_set)
        if build_set:
            lines.append("  <buildset>")
            lines.extend(f"    <module>{n}</module>" for n in build_set)
            lines.append("  </buildset>")
        lines.append("</manifest>")
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _make
