"""
walaw CLI - Washington Law Mirror Command Line Interface
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Load environment variables
load_dotenv()

from walaw import __version__  # noqa: E402
from walaw.config import get_settings  # noqa: E402
from walaw.models import Family, RuleSet  # noqa: E402
from walaw.storage import DocumentStore, StoreUnavailableError  # noqa: E402

console = Console()

FAMILY_CHOICES = click.Choice(["rcw", "wac"], case_sensitive=False)
CRAWL_CHOICES = click.Choice(["rcw", "wac", "rules"], case_sensitive=False)
RULE_SET_CHOICES = click.Choice([s.value for s in RuleSet], case_sensitive=False)


def _db_option(func):
    return click.option(
        "--db-path", "-d",
        default=None,
        help="SQLite store path (default: WALAW_DB_PATH or ./data/washington-laws.db)"
    )(func)


def _open_store(db_path: Optional[str], read_only: bool) -> DocumentStore:
    path = Path(db_path) if db_path else get_settings().db_path
    try:
        return DocumentStore.open(path, read_only=read_only)
    except StoreUnavailableError as e:
        raise click.ClickException(f"{e}. Run 'walaw init-db' and a crawl first.")


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """walaw - Offline Washington State Law Mirror (RCW, WAC, court rules)"""
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@cli.command("init-db")
@_db_option
def init_db(db_path: Optional[str]):
    """Create the store schema and stamp its metadata."""
    with _open_store(db_path, read_only=False) as store:
        store.init_schema()
        if store.get_metadata("last_update") is None:
            store.stamp_last_update()
        console.print(f"[green]✓[/green] Store ready: {store.path}")


async def _run_crawl(store, strategy, limit, show_progress):
    from walaw.crawl import CrawlOrchestrator
    from walaw.sources import SourceClient

    settings = get_settings()
    async with SourceClient(settings) as client:
        orchestrator = CrawlOrchestrator(store, client, settings, show_progress=show_progress)
        return await orchestrator.run(strategy, limit=limit)


@cli.command()
@click.argument("family", type=CRAWL_CHOICES)
@click.option("--title", "-t", "titles", multiple=True, help="Only crawl these titles (RCW/WAC)")
@click.option("--rule-set", "-r", "rule_sets", multiple=True, type=RULE_SET_CHOICES, help="Only crawl these rule sets")
@click.option("--limit", "-n", type=int, default=None, help="Stop after this many items")
@click.option("--progress/--no-progress", default=True, help="Show per-group progress bars")
@_db_option
def crawl(family: str, titles: tuple, rule_sets: tuple, limit: Optional[int], progress: bool, db_path: Optional[str]):
    """Crawl one family (rcw, wac or rules) into the store."""
    from walaw.crawl import RuleSetFamily, StatuteFamily

    settings = get_settings()
    family = family.lower()
    if family == "rules":
        strategy = RuleSetFamily(settings, rule_sets=rule_sets or None)
        scope = ", ".join(s.value for s in strategy.rule_sets)
    else:
        strategy = StatuteFamily(Family(family.upper()), settings, titles=titles or None)
        scope = ", ".join(titles) if titles else "all titles"

    console.print(Panel.fit(
        f"[bold blue]{strategy.family.value} crawl[/bold blue]\n"
        f"Scope: {scope}\n"
        f"Concurrency: {settings.max_concurrency}, delay: {settings.request_delay_s}s",
        title="🕸️ Crawling"
    ))

    with _open_store(db_path, read_only=False) as store:
        store.init_schema()
        report = asyncio.run(_run_crawl(store, strategy, limit, progress))
        store.stamp_last_update()

    table = Table(title="Crawl Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Groups", str(report.groups))
    table.add_row("Groups failed", str(report.groups_failed))
    table.add_row("Stored", str(report.stored))
    table.add_row("Failed", str(report.failed))
    table.add_row("Near-empty warnings", str(report.warnings))
    console.print(table)

    if report.errors:
        console.print(f"\n[yellow]{len(report.errors)} errors (first 5):[/yellow]")
        for error in report.errors[:5]:
            console.print(f"  • {error}")


@cli.command()
@click.argument("family", type=FAMILY_CHOICES)
@click.argument("citation")
@_db_option
def get(family: str, citation: str, db_path: Optional[str]):
    """Print one RCW or WAC section."""
    from walaw.retrieval import QueryEngine

    fam = Family(family.upper())
    with _open_store(db_path, read_only=True) as store:
        section = QueryEngine(store).get_section(fam, citation)

    if section is None:
        console.print(f"[red]{fam.value} {citation} not found[/red]")
        raise SystemExit(1)

    heading = f"{fam.value} {section.citation}"
    if section.section_name:
        heading += f": {section.section_name}"
    console.print(Panel(
        section.full_text,
        title=heading,
        subtitle=f"Title {section.title_num}: {section.title_name or 'Unknown'} | "
                 f"Chapter {section.chapter_num}: {section.chapter_name or 'Unknown'}",
    ))
    if section.effective_date:
        console.print(f"[dim]{section.effective_date}[/dim]")


@cli.command()
@click.argument("rule_set", type=RULE_SET_CHOICES)
@click.argument("number")
@_db_option
def rule(rule_set: str, number: str, db_path: Optional[str]):
    """Print one court rule (e.g. 'walaw rule CRLJ 60')."""
    from walaw.retrieval import QueryEngine

    with _open_store(db_path, read_only=True) as store:
        doc = QueryEngine(store).get_rule(rule_set, number)

    if doc is None:
        console.print(f"[red]{rule_set.upper()} {number} not found[/red]")
        raise SystemExit(1)

    console.print(Panel(doc.full_text, title=f"{doc.citation}: {doc.rule_name or ''}"))


@cli.command()
@click.argument("query")
@click.option("--limit", "-k", type=int, default=None, help="Number of results to return")
@_db_option
def search(query: str, limit: Optional[int], db_path: Optional[str]):
    """Full-text search across RCW, WAC and court rules."""
    from walaw.retrieval import QueryEngine

    limit = limit or get_settings().search_default_limit
    with _open_store(db_path, read_only=True) as store:
        results = QueryEngine(store).search(query, limit=limit)

    if not results:
        console.print("[yellow]No results.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold", title=f"Results for '{query}'")
    table.add_column("Family", style="cyan")
    table.add_column("Citation", style="green")
    table.add_column("Name")
    table.add_column("Excerpt", max_width=70)
    table.add_column("Score", justify="right")

    for r in results:
        excerpt = r.snippet.replace("<b>", "[bold]").replace("</b>", "[/bold]")
        table.add_row(r.family, r.citation, r.section_name or "", excerpt, f"{r.score:.2f}")

    console.print(table)


@cli.command()
@_db_option
def stats(db_path: Optional[str]):
    """Show corpus statistics."""
    from walaw.retrieval import QueryEngine

    with _open_store(db_path, read_only=True) as store:
        statistics = QueryEngine(store).get_statistics()
        progress = store.get_progress()

    console.print(Panel.fit(
        "[bold blue]Corpus Statistics[/bold blue]",
        title="📊 Stats"
    ))

    table = Table()
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("RCW sections", str(statistics.rcw_count))
    table.add_row("WAC sections", str(statistics.wac_count))
    table.add_row("Court rules", str(statistics.court_rules_count))
    for rule_set, count in sorted(statistics.rule_set_counts.items()):
        table.add_row(f"  {rule_set}", str(count))
    table.add_row("Last update", statistics.last_update)
    table.add_row("Schema version", statistics.version or "-")

    failed = [p for p in progress if p.status.value == "error"]
    table.add_row("Crawl groups recorded", str(len(progress)))
    table.add_row("Crawl groups failed", str(len(failed)))

    console.print(table)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", "-p", default=8000, type=int, help="Port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool):
    """Run the HTTP query API."""
    import uvicorn

    uvicorn.run("walaw.server.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
