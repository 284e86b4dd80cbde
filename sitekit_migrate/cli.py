"""Click CLI with scan, migrate and faq-paths subcommands."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import click

from sitekit_migrate import __version__
from sitekit_migrate.config import load_options
from sitekit_migrate.migrator import migrate_file, migrate_files
from sitekit_migrate.models import Category, MigrationResult, ScanResult
from sitekit_migrate.scanner import scan_codebase, scan_for_managed_faq_paths

_CATEGORY_CHOICES = [c.value for c in Category]

_CATEGORY_COLORS = {
    Category.FORM: "green",
    Category.METADATA: "cyan",
    Category.WIDGET: "magenta",
    Category.SCHEMA: "yellow",
    Category.FAQ: "blue",
    Category.SITEMAP: "bright_blue",
    Category.ANALYTICS: "bright_magenta",
    Category.IMAGE: "white",
}


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log per-file detail")
def cli(verbose: bool):
    """sitekit-migrate: Move hand-written site concerns onto Site-Kit."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _describe(detection) -> str:
    for attr in ("component_name", "schema_type", "tracking_id", "generator", "src"):
        value = getattr(detection, attr, None)
        if value:
            return str(value)
    kind = getattr(detection, "type", None) or getattr(detection, "widget_type", None)
    return kind.value if kind is not None else ""


def _print_report(scan: ScanResult, categories: list[Category]) -> None:
    for category in categories:
        detections = scan.bucket(category)
        if not detections:
            continue
        color = _CATEGORY_COLORS[category]
        click.echo(click.style(f"{category.value} ({len(detections)})", fg=color, bold=True))
        for d in detections:
            kind = getattr(d, "type", None) or getattr(d, "widget_type", None)
            where = f"L{d.start_line}" if d.start_line else "text match"
            click.echo(
                f"  {d.file_path}  "
                f"{click.style(kind.value if kind is not None else '', fg=color)}  "
                f"{_describe(d)}  "
                f"{click.style(where, dim=True)}"
            )
        click.echo()

    if scan.parse_errors:
        click.echo(click.style(f"Unparsable files ({len(scan.parse_errors)})", fg="red"))
        for failure in scan.parse_errors:
            click.echo(f"  {failure.file_path}: {failure.message}")
        click.echo()

    click.echo("Summary:")
    for category in categories:
        click.echo(f"  {category.value}: {len(scan.bucket(category))}")


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
@click.option("--only", "-o", "only", multiple=True, type=click.Choice(_CATEGORY_CHOICES), help="Limit to a category")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def scan(root: Path, only: tuple[str, ...], as_json: bool):
    """Scan a project and report what can be migrated."""
    result = scan_codebase(root)
    categories = [Category(c) for c in only] if only else list(Category)

    if as_json:
        report = result.to_dict()
        if only:
            report = {k: v for k, v in report.items() if k in only or k == "parse_errors"}
        click.echo(json.dumps(report, indent=2))
        return

    if not any(result.bucket(c) for c in categories):
        click.echo("Nothing to migrate.")
        return
    _print_report(result, categories)


def _print_results(results: list[MigrationResult]) -> None:
    for r in results:
        status = click.style("ok", fg="green") if r.success else click.style("failed", fg="red")
        click.echo(f"{status}  {r.file_path}")
        for change in r.changes:
            click.echo(f"      {change}")
        if r.error:
            click.echo(click.style(f"      {r.error}", fg="red"))

    failed = sum(1 for r in results if not r.success)
    click.echo(f"\n{len(results) - failed} succeeded, {failed} failed")


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
@click.option("--dry-run", is_flag=True, help="Report changes without writing files or calling the registry")
@click.option("--file", "single_file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Migrate one file")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.option("--strict", is_flag=True, help="Fail a migration when its registry call fails")
def migrate(root: Path, dry_run: bool, single_file: Path | None, yes: bool, strict: bool):
    """Rewrite detected code to use Site-Kit."""
    options = load_options(root.resolve(), dry_run=dry_run, strict_remote=strict)
    if not dry_run and not options.is_configured:
        raise click.ClickException(
            "Missing project ID or API key. Set NEXT_PUBLIC_UPTRADE_PROJECT_ID and "
            "UPTRADE_API_KEY, or add them to .uptrade/config.json"
        )

    if single_file is not None:
        results = asyncio.run(migrate_file(single_file, options))
        _print_results(results)
        return

    result = scan_codebase(root)
    if not result.migratable:
        click.echo("Nothing to migrate.")
        return

    click.echo(f"Found {result.migratable} migratable item(s) in {root}")
    if not dry_run and not yes:
        click.confirm("Rewrite files now? Forms are backed up to .backup files", abort=True)

    results = asyncio.run(migrate_files(result, options))
    _print_results(results)


@cli.command("faq-paths")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
def faq_paths(root: Path):
    """List the page paths rendered through ManagedFAQ."""
    paths = scan_for_managed_faq_paths(root)
    if not paths:
        click.echo("No ManagedFAQ paths found.")
        return
    for path in paths:
        click.echo(path)


if __name__ == "__main__":
    cli()
