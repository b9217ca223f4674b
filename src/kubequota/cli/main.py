#!/usr/bin/env python3
"""
KUBEQUOTA CLI
-------------
Command-line front end for template validation.

Commands:
1. validate  - schema + limits/requests checks for one file or a directory
2. quantity  - show how a single cpu/memory string is parsed
3. schemas   - list the schemas available in the catalog

Author: KubeQuota Team
Date: 2026-01-16
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    BarColumn,
    TaskProgressColumn
)

from kubequota.cli.formatter import KubeFormatter
from kubequota.core.engine import TemplateAuditEngine
from kubequota.core.errors import MalformedQuantity
from kubequota.core.models import ResourceFamily
from kubequota.quantity.parser import parse_quantity
from kubequota.validator.catalog import SchemaCatalog

VERSION = "1.0.0"

# Global console for consistent styling across the application
console = Console()

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


class KubeQuotaCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="kubequota",
            description="KubeQuota - Values template validation for container resources",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = KubeFormatter(console)
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-v", "--version", action="version", version=f"kubequota v{VERSION}")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        validate_parser = subparsers.add_parser("validate", help="🔍 Validate values templates")
        validate_parser.add_argument("path", help="Path to a template file or directory")
        validate_parser.add_argument("--schema", required=True, help="Schema name in the catalog")
        validate_parser.add_argument("--schema-dir", default=None, help="Directory holding <schema>.json files")
        validate_parser.add_argument("--ext", default=".yaml", help="File extension filter (default: .yaml)")
        validate_parser.add_argument("--max-depth", type=int, default=10, help="Maximum directory depth")
        validate_parser.add_argument("--verbose", action="store_true", help="Show engine log messages")

        quantity_parser = subparsers.add_parser("quantity", help="📏 Parse a cpu/memory quantity")
        quantity_parser.add_argument("value", help="Quantity string, e.g. 250m or 1Gi")
        quantity_parser.add_argument("--family", choices=[f.value for f in ResourceFamily], default="cpu")

        schemas_parser = subparsers.add_parser("schemas", help="📚 List catalog schemas")
        schemas_parser.add_argument("--schema-dir", default=None, help="Directory holding <schema>.json files")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(
            f"[bold cyan]KubeQuota v{VERSION}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _configure_logging(self, verbose: bool):
        logging.basicConfig(
            level=logging.INFO if verbose else logging.WARNING,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    def _run_validate(self, args: argparse.Namespace) -> int:
        input_path = Path(args.path).resolve()
        if not input_path.exists():
            console.print(f"[bold red]Error:[/bold red] Path '{args.path}' not found.")
            return EXIT_USAGE

        workspace = input_path if input_path.is_dir() else input_path.parent
        engine = TemplateAuditEngine(workspace, schema_dir=args.schema_dir)

        if input_path.is_file():
            target_files = [input_path]
        else:
            target_files = engine.discover(args.ext, args.max_depth)

        if not target_files:
            console.print("\n[bold yellow]⚠️  No template files found.[/bold yellow]")
            return EXIT_OK

        reports = []
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True
        ) as progress:
            task_id = progress.add_task("Validating templates...", total=len(target_files))
            for file_path in target_files:
                rel_path = str(file_path.relative_to(workspace))
                reports.append(engine.audit_file(rel_path, args.schema))
                progress.update(task_id, advance=1, description=f"Checked: {file_path.name}")

        for report in reports:
            self.formatter.show_errors(report)
        self.formatter.print_final_table(reports)
        self.formatter.print_summary(engine.generate_summary(reports))

        return EXIT_OK if all(r.get("success") for r in reports) else EXIT_INVALID

    def _run_quantity(self, args: argparse.Namespace) -> int:
        try:
            value = parse_quantity(args.value, args.family)
        except MalformedQuantity as e:
            console.print(f"[bold red]Malformed quantity:[/bold red] {e}")
            return EXIT_INVALID

        unit = "cores" if args.family == ResourceFamily.CPU.value else "bytes"
        console.print(f"{args.value} = [bold green]{value:g}[/bold green] {unit}")
        return EXIT_OK

    def _run_schemas(self, args: argparse.Namespace) -> int:
        catalog = SchemaCatalog(args.schema_dir)
        names = catalog.names()
        if not names:
            console.print(f"[bold yellow]No schemas found in {catalog.schema_dir}[/bold yellow]")
            return EXIT_OK
        for name in names:
            console.print(f"• {name}")
        return EXIT_OK

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        argv = sys.argv[1:] if argv is None else argv
        if not argv:
            self.print_header("Template Validator")
            self.parser.print_help()
            return EXIT_OK

        args = self.parser.parse_args(argv)
        self._configure_logging(getattr(args, "verbose", False))

        if args.command == "validate":
            self.print_header("Template Validation")
            return self._run_validate(args)
        if args.command == "quantity":
            return self._run_quantity(args)
        if args.command == "schemas":
            return self._run_schemas(args)

        self.parser.print_help()
        return EXIT_OK


def main(argv: Optional[List[str]] = None):
    """Application entry point with interrupt handling."""
    try:
        code = KubeQuotaCLI().run(argv)
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        code = EXIT_INVALID
    sys.exit(code)


if __name__ == "__main__":
    main()
