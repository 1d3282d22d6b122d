"""Console rendering of step catalogs and execution reports.

This module provides a ConsoleManager that adapts output to:
- Rich tables and panels for interactive use
- JSON documents on stdout for machine-readable output (CI/CD, scripts)
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime
from typing import Any, Dict, List

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table


class ThreadSafeConsole:
    """Thread-safe wrapper around Rich Console."""

    def __init__(self, console: Console):
        self._console = console
        self._lock = threading.RLock()  # Reentrant lock for nested calls

    def print(self, *args, **kwargs):
        """Thread-safe print method."""
        with self._lock:
            self._console.print(*args, **kwargs)


class ConsoleManager:
    """Renders workflow information with Rich or as JSON."""

    def __init__(self, verbose: bool = False, json_output: bool = False, console: Console | None = None):
        self.verbose = verbose
        self.json_output = json_output

        if self.json_output:
            self.console = None
        else:
            self.console = ThreadSafeConsole(console or Console(stderr=True))

    def setup_logging(self, logger: logging.Logger) -> None:
        """Attach a Rich or plain handler to logger and set its level from `verbose`."""

        def _has_handler_of_type(h_type):
            return any(isinstance(h, h_type) for h in logger.handlers)

        if self.json_output:
            if not _has_handler_of_type(logging.StreamHandler):
                handler = logging.StreamHandler(sys.stderr)
                handler.setFormatter(logging.Formatter("%(message)s"))
                logger.addHandler(handler)
        elif not _has_handler_of_type(RichHandler):
            handler = RichHandler(
                console=self.console._console,
                show_time=True,
                show_path=self.verbose,
                rich_tracebacks=True,
            )
            logger.addHandler(handler)
        logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)

    # ========== Output ==========

    def emit_json(self, kind: str, data: Any) -> None:
        """Write one JSON document to stdout."""
        print(
            json.dumps(
                {"timestamp": self._get_timestamp(), "type": kind, "data": data},
                default=str,
                ensure_ascii=False,
            )
        )

    def print_stage(self, stage: str, status: str = "starting") -> None:
        if self.json_output:
            self.emit_json("stage", {"stage": stage, "status": status})
            return

        status_color = {
            "starting": "blue",
            "complete": "green",
            "error": "red",
            "warning": "yellow",
        }.get(status, "white")
        self.console.print(Panel(f"[bold]{stage}[/bold]", style=status_color, padding=(0, 1)))

    def print_steps(self, steps: Dict[str, Dict[str, Any]]) -> None:
        """Render the step catalog."""
        if self.json_output:
            self.emit_json("steps", list(steps.values()))
            return

        table = Table(title="Available Workflow Steps")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Virtual", justify="center")
        table.add_column("Services", style="magenta")
        table.add_column("Paths", style="magenta")
        table.add_column("Legacy", justify="center")

        for step in steps.values():
            table.add_row(
                step["id"],
                step["name"],
                "yes" if step["external_compatible"] else "[red]no[/red]",
                ", ".join(step["required_services"]) or "-",
                ", ".join(step["required_paths"]) or "-",
                "yes" if step.get("is_legacy") else "",
            )
            if self.verbose:
                table.add_row("", f"[dim]{step['description']}[/dim]", "", "", "", "")

        self.console.print(table)

    def print_report(self, execution: Dict[str, Any], title: str = "Workflow Execution") -> None:
        """Render an execution report (WorkflowResult.to_dict())."""
        if self.json_output:
            self.emit_json("report", execution)
            return

        stats = execution["stats"]
        table = Table(title=title)
        table.add_column("#", justify="right")
        table.add_column("Step", style="cyan")
        table.add_column("Outcome", style="bold")
        table.add_column("Detail")

        rows = []
        for entry in execution["executed"]:
            rows.append((entry["index"], entry["step_id"], "[green]executed[/green]", ""))
        for entry in execution["skipped"]:
            rows.append((entry["index"], entry["step_id"], "[yellow]skipped[/yellow]", entry["reason"] or ""))
        for entry in execution["errors"]:
            rows.append((entry["index"], entry["step_id"], "[red]failed[/red]", entry["message"]))

        for index, step_id, outcome, detail in sorted(rows, key=lambda r: r[0]):
            table.add_row(str(index), step_id, outcome, detail)

        self.console.print(table)
        total = stats["executed"] + stats["skipped"] + stats["errors"]
        color = "green" if execution["success"] else "red"
        self.console.print(
            f"[{color}]{stats['executed']} of {total} steps completed, "
            f"{stats['skipped']} skipped, {stats['errors']} failed[/{color}]"
        )

    def print_validation(self, errors: List[str]) -> None:
        if self.json_output:
            self.emit_json("validation", {"valid": not errors, "errors": errors})
            return

        if not errors:
            self.console.print("[green]Workflow is valid[/green]")
            return
        self.console.print(f"[red]Workflow has {len(errors)} problem(s):[/red]")
        for error in errors:
            self.console.print(f"  - {error}")

    def print_compatibility(self, check: Dict[str, Any]) -> None:
        if self.json_output:
            self.emit_json("compatibility", check)
            return

        if check["compatible"]:
            self.console.print("[green]Workflow can run on payloads (virtual context)[/green]")
            return
        self.console.print("[yellow]Workflow needs a stored record; incompatible steps:[/yellow]")
        for step in check["incompatible_steps"]:
            self.console.print(f"  - step {step['index']}: {step['id']} ({step['name']})")

    def print_document(self, title: str, document: Dict[str, Any]) -> None:
        if self.json_output:
            self.emit_json(title.lower().replace(" ", "_"), document)
            return
        self.console.print(Panel(json.dumps(document, indent=2, ensure_ascii=False, default=str), title=title))

    def print_error(self, message: str) -> None:
        if self.json_output:
            print(
                json.dumps({"timestamp": self._get_timestamp(), "type": "error", "message": message}),
                file=sys.stderr,
            )
        else:
            self.console.print(f"[red]ERROR: {message}[/red]")

    def _get_timestamp(self) -> str:
        """Get ISO timestamp for JSON output."""
        return datetime.now().isoformat()
