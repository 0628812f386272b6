"""
CLI-specific formatting functions for human-readable output.

Results are plain dictionaries; json and yaml dump them as is, table renders
known shapes (projects, workloads, scopes) with Rich.
"""

import json
from typing import Any, Dict, List

import yaml
from rich.console import Console
from rich.table import Table


def format_output(data: Any, format_type: str) -> str:
    """Format data according to the specified format type."""
    if format_type == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    elif format_type == "table":
        return format_table_output(data)
    return json.dumps(data, indent=2, default=str)


def format_table_output(data: Any) -> str:
    """Format data as a table."""
    if isinstance(data, dict) and "projects" in data:
        return format_projects_table(data["projects"])
    elif isinstance(data, dict) and "workloads" in data:
        output = format_workloads_table(data["workloads"])
        if data.get("scope"):
            output = format_mapping_table(data["scope"]) + output
        return output
    elif isinstance(data, dict) and data and all(not isinstance(v, (dict, list)) for v in data.values()):
        return format_mapping_table(data)
    # Fallback to JSON for unknown data structures
    return json.dumps(data, indent=2, default=str)


def format_projects_table(projects: List[str]) -> str:
    if not projects:
        return "No projects found."
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Project", style="cyan")
    for project_id in projects:
        table.add_row(project_id)
    return _render(table)


def format_workloads_table(workloads: List[Dict[str, Any]]) -> str:
    """Render workloads as Type / Identifier / Status / SHA / Tasks."""
    if not workloads:
        return "No workloads found."
    table = Table(show_header=True, header_style="bold magenta", show_lines=True)
    table.add_column("Type", style="blue", width=10)
    table.add_column("Identifier", style="cyan")
    table.add_column("Status", style="green", width=10)
    table.add_column("SHA", style="yellow")
    table.add_column("Tasks", justify="right", width=7)
    for workload in workloads:
        table.add_row(
            str(workload.get("type", "N/A")),
            str(workload.get("identifier", "N/A")),
            str(workload.get("status", "N/A")),
            str(workload.get("sha") or "-")[:12],
            f"{workload.get('running_count', 0)}/{workload.get('desired_count', 0)}",
        )
    return _render(table)


def format_mapping_table(data: Dict[str, Any]) -> str:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(str(key), "-" if value is None else str(value))
    return _render(table)


def _render(table: Table) -> str:
    # Capture Rich output as string
    console = Console(width=120, legacy_windows=False, force_terminal=False)
    with console.capture() as capture:
        console.print(table)
    return capture.get()
