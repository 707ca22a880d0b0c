"""CLI entry points: articles init, articles search, articles list, articles status."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager

import click

from .config import Config


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log lifecycle and query details")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Article Search: a search index over article records in Redis."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    Config().load_env_file()  # Seed os.environ before constructing final config
    config = Config()
    ctx.obj["config"] = config


def _service(ctx: click.Context):
    from .service import ArticleService

    if "service" not in ctx.obj:
        service = ArticleService(ctx.obj["config"])
        ctx.obj["service"] = service
        ctx.call_on_close(service.close)
    return ctx.obj["service"]


@contextmanager
def _backend_errors(action: str) -> Iterator[None]:
    """Turn schema, index and store failures into a one-line CLI error naming the kind."""
    from .search.errors import IndexManagementError, SchemaError
    from .storage import StorageError

    try:
        yield
    except (SchemaError, IndexManagementError, StorageError) as e:
        raise click.ClickException(f"{action} failed ({e.kind}): {e}") from e


def _startup(service, seed: bool = True) -> int:
    with _backend_errors("Startup"):
        return service.startup(seed=seed)


@cli.command()
@click.option("--no-seed", is_flag=True, help="Rebuild the index without seeding sample data")
@click.pass_context
def init(ctx: click.Context, no_seed: bool) -> None:
    """Create the env file, rebuild the search index and seed an empty store."""
    config = ctx.obj["config"]
    if config.ensure_env_file():
        click.echo(f"Created {config.env_file}")

    service = _service(ctx)
    click.echo(f"Rebuilding index {service.definition.name}...")
    seeded = _startup(service, seed=not no_seed)
    click.echo(f"Index ready. Seeded {seeded} article(s).")


@cli.command()
@click.argument("query")
@click.option("--min-price", type=float, default=-1.0, help="Lower price bound (-1 = unset)")
@click.option("--max-price", type=float, default=-1.0, help="Upper price bound (-1 = unset)")
@click.option("--limit", "-n", type=int, default=None, help="Max results to return")
@click.option("--offset", type=int, default=None, help="Results to skip")
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    min_price: float,
    max_price: float,
    limit: int | None,
    offset: int | None,
    as_json: bool,
) -> None:
    """Search article titles, optionally within a price range."""
    from .search.errors import InvalidQueryError, SearchError

    service = _service(ctx)

    with _backend_errors("Index check"):
        ready = service.index_ready()
    if not ready:
        # Build the index on first search
        seeded = _startup(service)
        if not as_json:
            click.echo(f"Built index {service.definition.name} ({seeded} article(s) seeded)")

    try:
        results = service.search(query, min_price, max_price, limit=limit, offset=offset)
    except InvalidQueryError as e:
        raise click.BadParameter(str(e)) from e
    except SearchError as e:
        raise click.ClickException(f"Search failed ({e.kind}): {e}") from e

    if as_json:
        output = {
            "total": results.total,
            "documents": [{"id": d.doc_id, **d.fields} for d in results.documents],
        }
        click.echo(json.dumps(output, indent=2))
    elif results.documents:
        click.echo(f"{results.total} match(es)")
        for rank, doc in enumerate(results.documents, start=(offset or 0) + 1):
            click.echo(f"  [{rank}] {doc.fields.get('title', '')} ({doc.fields.get('price', '?')})")
    else:
        click.echo("No results found.")


@cli.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output articles as JSON")
@click.pass_context
def list_articles(ctx: click.Context, as_json: bool) -> None:
    """List every article in the store."""
    with _backend_errors("Listing articles"):
        articles = _service(ctx).list_articles()

    if as_json:
        output = [
            {"id": a.id, "title": a.title, "price": a.price, "authors": sorted(a.authors)}
            for a in articles
        ]
        click.echo(json.dumps(output, indent=2))
        return
    for a in articles:
        click.echo(f"{a.id}  {a.price:>7.2f}  {a.title}")
    click.echo(f"{len(articles)} article(s)")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show backend, index and store status."""
    config = ctx.obj["config"]
    service = _service(ctx)

    click.echo("Article Search Status")
    click.echo("=" * 40)
    click.echo(f"\nBackend: {config.backend}")
    if config.backend == "redis":
        click.echo(f"  Redis: {config.redis_host}:{config.redis_port}/{config.redis_db}")
    click.echo(f"\nIndex: {service.definition.name}")
    click.echo(f"  Prefix: {service.definition.key_prefix}")
    click.echo(f"  Fields: {', '.join(service.definition.schema.field_names)}")
    with _backend_errors("Status check"):
        exists = service.index_ready()
        n_articles = service.articles.count()
        n_authors = service.authors.count()
    click.echo(f"  Exists: {exists}")
    click.echo(f"\nArticles: {n_articles}")
    click.echo(f"Authors: {n_authors}")
    click.echo(f"\nEnv file: {config.env_file} ({'exists' if config.env_file.exists() else 'not created'})")
