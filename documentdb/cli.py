"""
DocumentDB Command-Line Interface

Small inspection commands over a database account: list databases and
collections, read a resource, run a query, delete a resource.

Author: documentdb-client contributors
Date: 2026-10-19
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import click
from pydantic import ValidationError

from documentdb import __version__
from documentdb.client import DocumentClient
from documentdb.core.config import ConfigManager
from documentdb.core.logging_config import setup_logging
from documentdb.exceptions import DocumentDBError
from documentdb.links import parse
from documentdb.options import FeedOptions, RequestOptions


def _emit(value: Any) -> None:
    click.echo(json.dumps(value, indent=2, sort_keys=True, default=str))


def _run(ctx: click.Context, action: Callable[[DocumentClient], Awaitable[Any]]) -> None:
    """Build a client from the group options, run one action and print its result."""
    settings = ctx.obj
    try:
        config = ConfigManager().load(
            config_file=str(settings["config"]) if settings.get("config") else None,
            overrides={"endpoint": settings.get("endpoint"), "master_key": settings.get("master_key")},
        )
    except (ValidationError, FileNotFoundError, ValueError) as e:
        click.echo(f"[ERROR] Invalid configuration: {e}", err=True)
        sys.exit(2)

    setup_logging(
        level=settings.get("log_level") or config.logging.level,
        format_type=config.logging.format,
        log_file=config.logging.file,
    )

    async def main() -> Any:
        async with DocumentClient.from_config(config) as client:
            return await action(client)

    try:
        result = asyncio.run(main())
    except DocumentDBError as e:
        click.echo(f"[ERROR] {type(e).__name__}: {e}", err=True)
        sys.exit(1)

    if result is not None:
        _emit(result)


@click.group()
@click.version_option(version=__version__, prog_name="documentdb")
@click.option("--endpoint", envvar="DOCUMENTDB_ENDPOINT", help="Account endpoint URL")
@click.option("--master-key", envvar="DOCUMENTDB_MASTER_KEY", help="Account master key")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
@click.pass_context
def cli(ctx, endpoint: Optional[str], master_key: Optional[str], config: Optional[Path], log_level: Optional[str]):
    """
    DocumentDB - inspect a document database account

    Connection settings come from options, DOCUMENTDB_* variables or a
    configuration file, in that order of precedence.
    """
    ctx.ensure_object(dict)
    ctx.obj.update(
        endpoint=endpoint,
        master_key=master_key,
        config=config,
        log_level=log_level.upper() if log_level else None,
    )


@cli.command()
@click.pass_context
def databases(ctx):
    """List database ids."""
    async def action(client: DocumentClient) -> Any:
        return [db["id"] for db in await client.databases.read_all().drain()]

    _run(ctx, action)


@cli.command()
@click.argument("database")
@click.pass_context
def collections(ctx, database: str):
    """
    List collection ids in a database.

    Examples:
        documentdb collections mydb
        documentdb collections dbs/mydb
    """
    link = database if database.startswith("dbs/") else f"dbs/{database}"

    async def action(client: DocumentClient) -> Any:
        return [c["id"] for c in await client.collections.read_all(link).drain()]

    _run(ctx, action)


@cli.command()
@click.argument("link")
@click.option(
    "--consistency",
    type=click.Choice(["Strong", "BoundedStaleness", "Session", "Eventual", "ConsistentPrefix"]),
    help="Consistency level for this read",
)
@click.pass_context
def read(ctx, link: str, consistency: Optional[str]):
    """
    Read one resource by link.

    Examples:
        documentdb read dbs/mydb/colls/orders/docs/1001
    """
    options = RequestOptions(consistency_level=consistency) if consistency else None

    async def action(client: DocumentClient) -> Any:
        table = _table_for(client, link)
        return (await table.read(link, options)).resource

    _run(ctx, action)


@cli.command()
@click.argument("collection")
@click.argument("sql")
@click.option("--max-items", type=int, default=None, help="Page size requested from the server")
@click.option("--limit", type=int, default=None, help="Stop after this many results")
@click.pass_context
def query(ctx, collection: str, sql: str, max_items: Optional[int], limit: Optional[int]):
    """
    Query documents in a collection.

    Examples:
        documentdb query dbs/mydb/colls/orders "SELECT * FROM c WHERE c.total > 10"
    """
    options = FeedOptions(max_item_count=max_items)

    async def action(client: DocumentClient) -> Any:
        results = []
        async for item in client.documents.query(collection, sql, options):
            results.append(item)
            if limit is not None and len(results) >= limit:
                break
        return results

    _run(ctx, action)


@cli.command()
@click.argument("link")
@click.option("--if-match", default=None, help="Only delete if the resource's etag matches")
@click.pass_context
def delete(ctx, link: str, if_match: Optional[str]):
    """Delete one resource by link."""
    options = RequestOptions.if_match(if_match) if if_match else None

    async def action(client: DocumentClient) -> Any:
        table = _table_for(client, link)
        if not hasattr(table, "delete"):
            raise click.BadParameter(f"{table.resource_type.value} cannot be deleted")
        await table.delete(link, options)
        click.echo(f"[OK] Deleted {link}")
        return None

    _run(ctx, action)


def _table_for(client: DocumentClient, link: str):
    kind = parse(link).resource_type
    tables = {
        table.resource_type: table
        for table in (
            client.databases,
            client.collections,
            client.documents,
            client.attachments,
            client.stored_procedures,
            client.triggers,
            client.user_defined_functions,
            client.users,
            client.permissions,
            client.offers,
            client.conflicts,
        )
    }
    if kind not in tables:
        raise click.BadParameter(f"not a readable resource link: {link}")
    return tables[kind]


def main():
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
