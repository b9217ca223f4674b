# src/kubequota/cli/formatter.py
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Initialize the Rich console for high-quality terminal output
console = Console()


class KubeFormatter:
    """
    KubeFormatter: renders validation diagnostics and the final report.
    """

    def __init__(self, output: Console = None):
        self.console = output or console

    def show_errors(self, report: Dict[str, Any]):
        """Prints the diagnostics of one failed template."""
        errors = report.get("errors") or []
        if report.get("success") or not errors:
            return

        title = f"[bold red]{report.get('file_path')}[/bold red]"
        kind = report.get("failure_kind") or report.get("status")
        body = "\n".join(f"• {line}" for line in errors)
        self.console.print(Panel(body, title=title, subtitle=str(kind), border_style="red", expand=False))

    def print_final_table(self, reports: List[Dict[str, Any]]):
        """
        Builds the summary table shown at the very end of a run.
        """
        table = Table(title="KubeQuota Validation Report", show_header=True, header_style="bold magenta")
        table.add_column("File Path", style="cyan")
        table.add_column("Schema")
        table.add_column("Status", style="bold")
        table.add_column("Result", justify="center")

        for r in reports:
            success = r.get("success", False)
            status_color = "green" if success else "yellow" if r.get("status") == "INVALID" else "red"
            table.add_row(
                str(r.get("file_path")),
                str(r.get("schema")),
                f"[{status_color}]{r.get('status')}[/{status_color}]",
                "✅" if success else "❌"
            )

        self.console.print(table)

    def print_summary(self, summary: Dict[str, Any]):
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Total Files:    {summary['total_files']}\n"
            f"Valid:          [green]{summary['valid']}[/green]\n"
            f"Invalid:        [yellow]{summary['invalid']}[/yellow]\n"
            f"System Errors:  [red]{summary['system_errors']}[/red]",
            border_style="dim"
        ))
