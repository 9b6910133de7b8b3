"""Command-line interface for the course catalog reconciler.

This CLI provides three commands:

1. `catalog-reconciler run`: Run the reconciliation pipeline
   - merge: fold per-source files into the district catalog
   - collapse-ab: consolidate A/B semester pairs
   - gpa: re-derive GPA values
   - prerequisites: resolve prerequisite names to course codes
   - all: every stage above, in order (default)

2. `catalog-reconciler ingest`: Turn one school's raw records into its
   per-source file

3. `catalog-reconciler validate`: Check a catalog file against the schema
"""

import argparse
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console

from .config import PipelineConfig
from .exceptions import (
    ConfigError,
    MissingInputError,
    ReconcilerError,
    SchemaViolationError,
)
from .pipeline import STEPS, ingest_raw_records, run_pipeline

console = Console()


def _add_path_arguments(parser: argparse.ArgumentParser) -> None:
    """Add catalog and source location options shared by subcommands.

    Args:
        parser: Subcommand parser to add the options to.
    """
    parser.add_argument(
        "--catalog",
        type=Path,
        help="District catalog file (default: $CATALOG_PATH or output/catalog.json)",
    )

    parser.add_argument(
        "--sources-dir",
        type=Path,
        help="Per-source files directory (default: $CATALOG_SOURCES_DIR or output/schools)",
    )

    parser.add_argument(
        "--district",
        help="District identifier (default: $CATALOG_DISTRICT)",
    )

    parser.add_argument(
        "--url",
        help="Catalog source URL (default: $CATALOG_SOURCE_URL)",
    )


def _create_run_parser(subparsers: argparse._SubParsersAction) -> None:
    """Create the run subcommand parser.

    Args:
        subparsers: Subparsers action to add the command to.
    """
    run_parser = subparsers.add_parser(
        "run",
        help="Run the reconciliation pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Run the reconciliation pipeline:

  1. merge          Merge per-source files into the district catalog
  2. collapse-ab    Consolidate A/B semester pairs into full-year courses
  3. gpa            Re-derive GPA values from course names and tags
  4. prerequisites  Resolve prerequisite names to course codes

With --step all (default) every stage runs in memory and the catalog is
written once.
        """,
    )

    run_parser.add_argument(
        "--step",
        choices=STEPS,
        default="all",
        help="Pipeline step to run (default: all)",
    )

    _add_path_arguments(run_parser)

    run_parser.add_argument(
        "--report",
        type=Path,
        help="Save a markdown run report to this file",
    )


def _create_ingest_parser(subparsers: argparse._SubParsersAction) -> None:
    """Create the ingest subcommand parser.

    Args:
        subparsers: Subparsers action to add the command to.
    """
    ingest_parser = subparsers.add_parser(
        "ingest",
        help="Write one school's raw records to its per-source file",
    )

    ingest_parser.add_argument(
        "records",
        type=Path,
        help="JSON file of raw course records (list or {courses: [...]})",
    )

    ingest_parser.add_argument(
        "--school",
        required=True,
        help='School display name, e.g. "Seven Lakes High School"',
    )

    _add_path_arguments(ingest_parser)


def _create_validate_parser(subparsers: argparse._SubParsersAction) -> None:
    """Create the validate subcommand parser.

    Args:
        subparsers: Subparsers action to add the command to.
    """
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a catalog file",
    )

    validate_parser.add_argument(
        "--catalog",
        type=Path,
        help="Catalog file to validate (default: $CATALOG_PATH or output/catalog.json)",
    )


def _build_config(args: argparse.Namespace) -> PipelineConfig:
    """Create configuration from the environment, overridden by flags."""
    config = PipelineConfig.from_env()

    if getattr(args, "catalog", None):
        config.catalog_path = args.catalog
    if getattr(args, "sources_dir", None):
        config.sources_dir = args.sources_dir
    if getattr(args, "district", None):
        config.district = args.district
    if getattr(args, "url", None):
        config.source_url = args.url
    if getattr(args, "report", None):
        config.report_path = args.report

    return config


def _run_command(args: argparse.Namespace) -> None:
    """Run the run subcommand.

    Args:
        args: Parsed command-line arguments.
    """
    config = _build_config(args)

    console.print("[bold cyan]Course Catalog Reconciliation[/]")
    console.print(f"Step: {args.step}")
    console.print(f"Catalog: {config.catalog_path}")
    if args.step in ("all", "merge"):
        console.print(f"Sources: {config.sources_dir}")
    console.print()

    run_pipeline(config, step=args.step)


def _ingest_command(args: argparse.Namespace) -> None:
    """Run the ingest subcommand.

    Args:
        args: Parsed command-line arguments.
    """
    config = _build_config(args)

    console.print(f"[bold cyan]Ingesting records for {args.school}[/]")
    target, stats = ingest_raw_records(args.records, args.school, config)
    console.print(f"  Records read: {stats.rows_seen}")
    if stats.rows_without_code:
        console.print(f"  [yellow]Skipped {stats.rows_without_code} records without courseCode[/]")
    console.print(f"  Output file: {target}")


def _validate_command(args: argparse.Namespace) -> None:
    """Run the validate subcommand.

    Args:
        args: Parsed command-line arguments.
    """
    from .catalog_io import load_catalog

    config = _build_config(args)

    console.print(f"Validating {config.catalog_path}...")
    catalog = load_catalog(config.catalog_path)

    schools = {school for course in catalog.courses for school in course.schools}
    console.print("[green]✓ Validation passed[/]")
    console.print(f"  District: {catalog.source.district}")
    console.print(f"  Courses: {len(catalog.courses)}")
    console.print(f"  Schools: {len(schools)}")


COMMANDS = {
    "run": _run_command,
    "ingest": _ingest_command,
    "validate": _validate_command,
}


def main(argv: list[str] | None = None) -> None:
    """Run the catalog reconciler CLI.

    Args:
        argv: Command-line arguments (default: ``sys.argv[1:]``).
    """
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="catalog-reconciler",
        description="Reconcile per-school course extractions into one district catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  run        Run the reconciliation pipeline (default: all steps)
  ingest     Write one school's raw records to its per-source file
  validate   Validate a catalog file

Examples:
  catalog-reconciler run                          # merge → collapse-ab → gpa → prerequisites
  catalog-reconciler run --step prerequisites     # re-resolve prerequisites only
  catalog-reconciler ingest rows.json --school "Seven Lakes High School"
  catalog-reconciler validate --catalog output/catalog.json

Environment variables:
  CATALOG_DISTRICT     - District identifier written to the catalog
  CATALOG_SOURCE_URL   - URL the catalog was extracted from
  CATALOG_PATH         - District catalog file
  CATALOG_SOURCES_DIR  - Per-source files directory
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    _create_run_parser(subparsers)
    _create_ingest_parser(subparsers)
    _create_validate_parser(subparsers)

    args = parser.parse_args(argv)

    # Default to a full run if no command given
    if args.command is None:
        args = parser.parse_args(["run"])

    try:
        COMMANDS[args.command](args)
    except ConfigError as e:
        console.print(f"\n[red]Error: {e}[/]")
        console.print("Set: [cyan]CATALOG_DISTRICT, CATALOG_SOURCE_URL[/] or pass --district/--url")
        raise SystemExit(1) from None
    except MissingInputError as e:
        console.print(f"\n[red]Error: {e}[/]")
        raise SystemExit(1) from None
    except SchemaViolationError as e:
        console.print(f"\n[red]✗ Validation failed with {len(e.issues)} issue(s)[/]")
        for issue in e.issues[:20]:
            console.print(f"  - {issue}")
        if len(e.issues) > 20:
            console.print(f"  ... and {len(e.issues) - 20} more")
        console.print("[red]Nothing was written.[/]")
        raise SystemExit(1) from None
    except ReconcilerError as e:
        console.print(f"\n[red]Error: {e}[/]")
        raise SystemExit(1) from None
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/]")
        raise SystemExit(1) from None


if __name__ == "__main__":
    main()
