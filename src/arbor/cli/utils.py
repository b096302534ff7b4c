"""
CLI utility helpers — output formatting.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from arbor.data.models import DirNode
from arbor.runtime.runner import SuiteReport

console = Console()
err_console = Console(stderr=True)


def output_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def output_report(report: SuiteReport) -> None:
    """Render a suite report as a table of failures plus a summary line."""
    if report.failed:
        table = Table(title=f"Failures: {report.name}", show_lines=True)
        table.add_column("Leaf", style="bold")
        table.add_column("Phase")
        table.add_column("Error", style="red")
        for result in report.failed:
            for error in result.errors:
                table.add_row(
                    " / ".join(result.path),
                    error.get("phase", ""),
                    f"{error.get('error_type')}: {error.get('message')}",
                )
        console.print(table)

    style = "green" if report.ok else "red"
    duration = report.duration_seconds or 0.0
    console.print(
        f"[{style}]{len(report.passed)} passed, {len(report.failed)} failed[/{style}]"
        f" of {report.total} in {duration:.2f}s"
    )


def output_tree(node: DirNode) -> None:
    """Render a loaded data root as a tree with case counts."""

    def _add(branch: Tree, current: DirNode) -> None:
        for name, child in current.dirs.items():
            label = f"[bold]{name}[/bold] ({child.case_num}) {child.config.summary}"
            _add(branch.add(label), child)
        for name, case in current.files.items():
            branch.add(f"{name}: {case.description} [dim]({len(case.flow)} steps)[/dim]")

    root = Tree(f"[bold]{node.name}[/bold] ({node.case_num}) {node.config.summary}")
    _add(root, node)
    console.print(root)
