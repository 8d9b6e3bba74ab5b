import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from searchbuilder.config import Config
from searchbuilder.constants import DEFAULT_RESULT_LIMIT
from searchbuilder.database import Database
from searchbuilder.logging import configure_logging
from searchbuilder.query.builder import Query
from searchbuilder.search.builder import SearchBuilder

console = Console()


def build_search(
    table: str,
    terms: str,
    columns: tuple[str, ...],
    weights: tuple[int, ...],
    config: Config,
) -> SearchBuilder:
    """One `LIKE %term%` condition per (term, column) pair."""
    if weights and len(weights) != len(columns):
        raise click.BadParameter("give one --weight per --column", param_hint="--weight")

    builder = SearchBuilder(table, cte_name=config.cte_name, union_alias=config.union_alias)

    def add_term(search: SearchBuilder, term: str) -> None:
        for i, column in enumerate(columns):
            score = weights[i] if weights else None
            search.search(Query.table_(table).select("id").where_like(column, f"%{term}%"), score)

    return builder.split_terms(terms, add_term)


@click.group(invoke_without_command=True)
@click.pass_context
def main(ctx):
    """searchbuilder - weighted multi-condition search over SQLite tables"""
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = Config()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    configure_logging(ctx.obj["config"].log_level)

    if ctx.invoked_subcommand is None:
        console.print("[bold]searchbuilder[/bold] - weighted multi-condition search\n")
        console.print("Use [cyan]searchbuilder --help[/cyan] for all commands.")


@main.command()
@click.pass_context
def status(ctx):
    """Show the resolved configuration."""
    config = ctx.obj["config"]

    console.print("[bold]searchbuilder status[/bold]")
    console.print()
    console.print(f"Database: [cyan]{config.db_path}[/cyan]")
    console.print(f"Log level: {config.log_level}")
    console.print(f"Score CTE: {config.cte_name}")
    console.print(f"Union alias: {config.union_alias}")


@main.command()
@click.argument("table")
@click.argument("terms")
@click.option("-c", "--column", "columns", multiple=True, required=True, help="Column to match terms against")
@click.option("-w", "--weight", "weights", multiple=True, type=int, help="Score per --column, in order")
@click.pass_context
def sql(ctx, table: str, terms: str, columns: tuple[str, ...], weights: tuple[int, ...]):
    """Print the composed SQL without running it."""
    builder = build_search(table, terms, columns, weights, ctx.obj["config"])
    statement, bindings = builder.get_query().compile()

    console.print(statement, markup=False, highlight=False, soft_wrap=True)
    console.print(f"[dim]bindings:[/dim] {escape(str(bindings))}")


@main.command()
@click.argument("table")
@click.argument("terms")
@click.option("-c", "--column", "columns", multiple=True, required=True, help="Column to match terms against")
@click.option("-w", "--weight", "weights", multiple=True, type=int, help="Score per --column, in order")
@click.option("--db", "db_path", type=click.Path(path_type=Path), default=None, help="SQLite database file")
@click.option("--limit", default=DEFAULT_RESULT_LIMIT, help="Maximum rows to show")
@click.pass_context
def search(
    ctx,
    table: str,
    terms: str,
    columns: tuple[str, ...],
    weights: tuple[int, ...],
    db_path: Path | None,
    limit: int,
):
    """Rank rows of TABLE matching TERMS."""
    config = ctx.obj["config"]
    builder = build_search(table, terms, columns, weights, config)
    db = Database(db_path) if db_path is not None else Database.from_config(config)
    rows = asyncio.run(_run_search(builder, db, limit))

    if not rows:
        console.print("[dim]No matches[/dim]")
        return

    result = Table(title=escape(f"{table}: {terms}"))
    for name in rows[0]:
        result.add_column(escape(name))
    for row in rows:
        result.add_row(*(escape(str(v)) for v in row.values()))
    console.print(result)


async def _run_search(builder: SearchBuilder, db: Database, limit: int) -> list[dict]:
    async with db:
        return await builder.get_query().limit(limit).get(db.conn)
