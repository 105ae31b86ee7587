"""CLI interface for scraperwiki-api using Typer framework."""

import json as jsonlib
from pathlib import Path
from typing import Annotated, Any, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from scraperwiki_api import __description__, __version__
from scraperwiki_api.checks import build_suite, load_check_file
from scraperwiki_api.client import ApiRequestError, ScraperWikiAPI
from scraperwiki_api.config import LogLevel, configure_logging, load_config
from scraperwiki_api.matchers.suite import ValidationResult

app = typer.Typer(
    name="scraperwiki-api",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"scraperwiki-api version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
    apikey: Annotated[
        Optional[str],
        typer.Option("--apikey", envvar="SCRAPERWIKI_APIKEY", help="API key for private scrapers")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .scraperwiki.json)")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log requests and checks")
    ] = False,
) -> None:
    """scraperwiki-api - query the ScraperWiki API and validate scrapers."""
    try:
        settings = load_config(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    configure_logging(LogLevel.DEBUG if verbose else settings.logging.level)
    ctx.obj = ScraperWikiAPI(apikey, config=settings)


def _print_json(data: Any) -> None:
    console.print(jsonlib.dumps(data, indent=2), markup=False, highlight=False, soft_wrap=True)


def _call(func, *args, **kwargs) -> None:
    """Call an API method and print its JSON response."""
    try:
        data = func(*args, **kwargs)
    except ApiRequestError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    _print_json(data)


@app.command()
def info(
    ctx: typer.Context,
    shortname: Annotated[str, typer.Argument(help="The scraper's shortname")],
    version: Annotated[
        Optional[int],
        typer.Option("--code-version", help="Code version number (-1 for most recent)")
    ] = None,
    history_start_date: Annotated[
        Optional[str],
        typer.Option("--history-start-date", help="Restrict history and runevents to this date or after (YYYY-MM-DD)")
    ] = None,
    quietfields: Annotated[
        Optional[List[str]],
        typer.Option("--quiet-field", "-q", help="Field to leave out: code, runevents, datasummary, userroles or history")
    ] = None,
) -> None:
    """Show a scraper's code, owner, history, etc."""
    client: ScraperWikiAPI = ctx.obj
    _call(client.scraper_getinfo, shortname, version=version,
          history_start_date=history_start_date, quietfields=quietfields)


@app.command()
def runinfo(
    ctx: typer.Context,
    shortname: Annotated[str, typer.Argument(help="The scraper's shortname")],
    runid: Annotated[Optional[str], typer.Option("--runid", help="A run ID")] = None,
) -> None:
    """Show what the scraper did during a run."""
    client: ScraperWikiAPI = ctx.obj
    _call(client.scraper_getruninfo, shortname, runid=runid)


@app.command()
def userinfo(
    ctx: typer.Context,
    username: Annotated[str, typer.Argument(help="A ScraperWiki username")],
) -> None:
    """Show information about a user."""
    client: ScraperWikiAPI = ctx.obj
    _call(client.scraper_getuserinfo, username)


@app.command()
def search(
    ctx: typer.Context,
    query: Annotated[Optional[str], typer.Option("--query", help="Search terms")] = None,
    maxrows: Annotated[Optional[int], typer.Option("--maxrows", help="Number of results to return")] = None,
    requestinguser: Annotated[
        Optional[str],
        typer.Option("--requesting-user", help="Who makes the search (orders the matches)")
    ] = None,
) -> None:
    """Search the titles and descriptions of all the scrapers."""
    client: ScraperWikiAPI = ctx.obj
    _call(client.scraper_search, searchquery=query, maxrows=maxrows, requestinguser=requestinguser)


@app.command()
def usersearch(
    ctx: typer.Context,
    query: Annotated[Optional[str], typer.Option("--query", help="Search terms")] = None,
    maxrows: Annotated[Optional[int], typer.Option("--maxrows", help="Number of results to return")] = None,
    nolist: Annotated[
        Optional[List[str]],
        typer.Option("--exclude", help="Username not to return (repeatable)")
    ] = None,
    requestinguser: Annotated[
        Optional[str],
        typer.Option("--requesting-user", help="Who makes the search (orders the matches)")
    ] = None,
) -> None:
    """Search for a user by name."""
    client: ScraperWikiAPI = ctx.obj
    _call(client.scraper_usersearch, searchquery=query, maxrows=maxrows,
          nolist=nolist or None, requestinguser=requestinguser)


@app.command()
def sqlite(
    ctx: typer.Context,
    shortname: Annotated[str, typer.Argument(help="The scraper's shortname")],
    query: Annotated[str, typer.Argument(help="A SQL query")],
    attach: Annotated[
        Optional[List[str]],
        typer.Option("--attach", help="Datastore of another scraper to attach (repeatable)")
    ] = None,
) -> None:
    """Query a scraper's datastore with SQL."""
    client: ScraperWikiAPI = ctx.obj
    _call(client.datastore_sqlite, shortname, query, format="jsondict", attach=attach or None)


def _output_result_table(result: ValidationResult) -> None:
    status_color = "green" if result.status.value == "pass" else "red"
    console.print(f"[{status_color}]Validation Status: {result.status.value.upper()}[/{status_color}]")
    console.print(f"Exit Code: {result.exit_code}")

    if result.counters:
        console.print("\n[blue]Counters:[/blue]")
        counter_table = Table()
        counter_table.add_column("Metric", style="cyan")
        counter_table.add_column("Count", style="white", justify="right")

        for key, value in sorted(result.counters.items()):
            counter_table.add_row(key.replace("_", " ").title(), str(value))

        console.print(counter_table)

    if result.issues:
        console.print("\n[blue]Failed Checks:[/blue]")
        issues_table = Table()
        issues_table.add_column("Check", style="cyan")
        issues_table.add_column("Explanation", style="white")

        for issue in result.issues:
            issues_table.add_row(Text(issue.check), Text(issue.message))

        console.print(issues_table)
    else:
        console.print("\n[green]All checks passed![/green]")


@app.command()
def validate(
    ctx: typer.Context,
    checkfile: Annotated[Path, typer.Argument(help="Path to a JSON check file")],
    shortname: Annotated[
        Optional[str],
        typer.Option("--shortname", "-s", help="Validate this scraper instead of the one in the check file")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
) -> None:
    """Run the checks in a check file against a scraper."""
    valid_formats = ["table", "json"]
    if format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(1)

    client: ScraperWikiAPI = ctx.obj
    try:
        check_file = load_check_file(checkfile)
        suite = build_suite(check_file, client)
        target = shortname or check_file.shortname
        if format == "table":
            console.print(f"[green]Validating scraper:[/green] {target}")
        result = suite.run(target)
    except (FileNotFoundError, ValueError, ApiRequestError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if format == "json":
        _print_json(result.to_dict())
    else:
        _output_result_table(result)

    raise typer.Exit(result.exit_code)


if __name__ == "__main__":
    app()
