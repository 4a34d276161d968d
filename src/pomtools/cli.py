"""Typer CLI entry point for pom-tools."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.logging import RichHandler
from rich.table import Table

from pomtools.aggregator import default_output_path, generate_aggregator
from pomtools.closure import resolve_build_plan
from pomtools.config import PomToolsConfig
from pomtools.exceptions import PomToolsError
from pomtools.graph import build_graph, reverse_dependencies, transitive_dependents
from pomtools.manifest import load_manifests
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
from pomtools.visualize import build_module_tree, build_plan_table
from pomtools.xmlutil import write_xml

app = typer.Typer(add_completion=False, help="Inspect and rewrite multi-module Maven trees.")
console = Console()

PomArg = Annotated[Path, typer.Argument(help="Path to the top-level pom.xml.")]
ArtifactArg = Annotated[str, typer.Argument(help="Artifact: groupId:artifactId:version")]
WriteAllOpt = Annotated[
    bool, typer.Option("--all", "-a", help="Write every pom, not only the modified ones.")
]


def _fail(exc: Exception) -> typer.Exit:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    return typer.Exit(code=1)


def _load(ctx: typer.Context, pom: Path) -> tuple[ProjectRegistry, Pom]:
    config: PomToolsConfig = ctx.obj
    registry = ProjectRegistry(on_duplicate=config.on_duplicate)
    root = Pom.load(pom, registry, config.descriptor_name)
    return registry, root


def _write(registry: ProjectRegistry, write_all: bool) -> None:
    for pom in write_modified(registry, write_all=write_all):
        console.print(f"{pom.identity} is modified")


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging.")] = False,
    descriptor: Annotated[
        Optional[str], typer.Option("--descriptor", help="Module descriptor file name.")
    ] = None,
    on_duplicate: Annotated[
        Optional[str],
        typer.Option("--on-duplicate", help="Duplicate groupId:artifactId policy: error or replace."),
    ] = None,
) -> None:
    """Configure logging and settings shared by every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    config = PomToolsConfig.from_env().with_overrides(
        descriptor_name=descriptor, on_duplicate=on_duplicate
    )
    try:
        config.validate()
    except ValueError as exc:
        raise _fail(exc) from None
    ctx.obj = config


@app.command()
def versions(ctx: typer.Context, pom: PomArg) -> None:
    """Print groupId:artifactId:version of every module in the tree."""
    try:
        _, root = _load(ctx, pom)
        for artifact in list_versions(root):
            console.print(artifact.compact(), markup=False, highlight=False, soft_wrap=True)
    except PomToolsError as exc:
        raise _fail(exc) from None


@app.command()
def tree(ctx: typer.Context, pom: PomArg) -> None:
    """Print the module tree with effective versions."""
    try:
        _, root = _load(ctx, pom)
        console.print(build_module_tree(root))
    except PomToolsError as exc:
        raise _fail(exc) from None


@app.command()
def check(ctx: typer.Context, pom: PomArg) -> None:
    """Cross-check every version reference in the tree and print inconsistencies."""
    try:
        registry, _ = _load(ctx, pom)
        issues = check_versions(registry)
    except PomToolsError as exc:
        raise _fail(exc) from None

    if not issues:
        console.print("[green]No version inconsistencies found.[/green]")
        return
    for issue in issues:
        console.print(issue.label(), markup=False, highlight=False, soft_wrap=True)


@app.command("set-version")
def set_version(
    ctx: typer.Context,
    pom: PomArg,
    artifact: ArtifactArg,
    write_all: WriteAllOpt = False,
) -> None:
    """Set the version of an artifact and fix every in-tree reference to it."""
    try:
        target = Artifact.parse(artifact)
        registry, _ = _load(ctx, pom)
        if apply_version(registry, target) or write_all:
            _write(registry, write_all)
    except (PomToolsError, ValueError) as exc:
        raise _fail(exc) from None


@app.command("set-versions")
def set_versions(
    ctx: typer.Context,
    pom: PomArg,
    file: Annotated[Path, typer.Argument(help="File with one groupId:artifactId:version per line.")],
    write_all: WriteAllOpt = False,
) -> None:
    """Set the versions of every artifact listed in FILE.

    The output of `versions` can be edited and fed back here.
    """
    try:
        artifacts = read_version_file(file)
        registry, _ = _load(ctx, pom)
        changed = False
        for a in artifacts:
            if apply_version(registry, a):
                changed = True
        if changed or write_all:
            _write(registry, write_all)
    except (PomToolsError, ValueError, OSError) as exc:
        raise _fail(exc) from None


@app.command()
def find(ctx: typer.Context, pom: PomArg, artifact: ArtifactArg) -> None:
    """Print every pom with a direct dependency on ARTIFACT (version may be '*')."""
    try:
        target = Artifact.parse(artifact)
        registry, _ = _load(ctx, pom)
        for found in find_dependents(registry, target):
            console.print(str(found.path), markup=False, highlight=False, soft_wrap=True)
    except (PomToolsError, ValueError) as exc:
        raise _fail(exc) from None


@app.command()
def remove(
    ctx: typer.Context,
    pom: PomArg,
    artifact: ArtifactArg,
    write_all: WriteAllOpt = False,
) -> None:
    """Remove a direct dependency on ARTIFACT from every pom (version may be '*')."""
    try:
        target = Artifact.parse(artifact)
        registry, _ = _load(ctx, pom)
        if remove_dependency(registry, target) or write_all:
            _write(registry, write_all)
    except (PomToolsError, ValueError) as exc:
        raise _fail(exc) from None


@app.command()
def reverse(
    ctx: typer.Context,
    pom: PomArg,
    target: Annotated[str, typer.Argument(help="Target module: groupId:artifactId")],
    transitive: Annotated[
        bool, typer.Option("--transitive", "-t", help="Include indirect dependents too.")
    ] = False,
) -> None:
    """Show which in-tree modules depend on TARGET (directly, unless --transitive)."""
    try:
        registry, _ = _load(ctx, pom)
        g = build_graph(registry)
    except PomToolsError as exc:
        raise _fail(exc) from None

    if transitive:
        preds = sorted(transitive_dependents(g, [target]) - {target})
    else:
        preds = reverse_dependencies(g, target)
    table = Table(title=f"Reverse dependencies (who depends on {target})")
    table.add_column("#", style="dim", width=6)
    table.add_column("Dependent (predecessor)")
    for i, identity in enumerate(preds, start=1):
        table.add_row(str(i), identity)
    console.print(table)
    if not preds:
        console.print("[dim]No reverse dependencies found (or target not in tree).[/dim]")


@app.command("root-pom")
def root_pom(
    ctx: typer.Context,
    build_manifest: Annotated[
        Optional[Path],
        typer.Argument(help="Build manifest naming the projects to build (default: build all)."),
    ] = None,
    manifest: Annotated[
        Optional[Path], typer.Option("--manifest", "-l", help="Full manifest (all.mf.xml).")
    ] = None,
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Output pom path.")] = None,
    skeleton: Annotated[
        Optional[Path], typer.Option("--skeleton", "-s", help="Skeleton pom whose <modules> is replaced.")
    ] = None,
) -> None:
    """Generate a root pom listing the projects that need to be rebuilt."""
    config: PomToolsConfig = ctx.obj
    all_manifest = manifest or config.manifest_path
    try:
        mf = load_manifests(all_manifest, build_manifest)
        registry = ProjectRegistry(on_duplicate=config.on_duplicate)
        plan = resolve_build_plan(mf, registry, config.descriptor_name)
        out_path = out or default_output_path(all_manifest, build_manifest)
        doc = generate_aggregator(plan.roots, out_path, skeleton)
        write_xml(doc, out_path)
    except PomToolsError as exc:
        raise _fail(exc) from None

    console.print(build_plan_table(plan))
    console.print(f"[green]Wrote[/green] {out_path}")


def main() -> None:
    """Console-script entry point."""
    app()
