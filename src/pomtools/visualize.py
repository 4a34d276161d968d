"""Rich rendering utilities for module trees and build plans."""

from __future__ import annotations

from rich.table import Table
from rich.tree import Tree

from pomtools.closure import BuildPlan
from pomtools.pom import Pom


def _label(pom: Pom) -> str:
    return f"{pom.identity}:{pom.version or '[dim]no version[/dim]'}"


def build_module_tree(root: Pom) -> Tree:
    """Build a Rich Tree of the aggregation tree under `root`.

    Args:
        root: Top of the loaded module tree.

    Returns:
        A Rich Tree object for rendering.
    """
    tree = Tree(f"[bold]{_label(root)}[/bold]")

    def _add(branch: Tree, pom: Pom) -> None:
        for child in pom.children:
            _add(branch.add(_label(child)), child)

    _add(tree, root)
    return tree


def build_plan_table(plan: BuildPlan) -> Table:
    title = "Build projects (full build)" if plan.full_build else "Build projects"
    table = Table(title=title)
    table.add_column("#", style="dim", width=6)
    table.add_column("Project")
    table.add_column("Directory")
    for i, pom in enumerate(plan.roots, start=1):
        table.add_row(str(i), pom.identity, str(pom.path.parent))
    return table
