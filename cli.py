#!/usr/bin/env python
"""CLI entry point for the entity flow recommender."""

import asyncio
import json
import logging
import os
from contextlib import asynccontextmanager
from typing import Tuple

import click
from dotenv import load_dotenv

from recommender.config import load_recs_config
from recommender.db.pool import init_pool, close_pool, check_pool_health
from recommender.redis_client import init_redis_pool, close_redis_pool, check_redis_health
from recommender.pipeline.recommendation_flows import RecommendationFlows, default_stores, summarize

load_dotenv()


@asynccontextmanager
async def connected(database: bool = True, redis: bool = True):
    """Open the shared pools for one command and always close them."""
    try:
        if database:
            await init_pool()
        if redis:
            await init_redis_pool()
        yield
    finally:
        if redis:
            await close_redis_pool()
        if database:
            await close_pool()


def _print_entities(entities, fields: Tuple[str, ...]):
    if not entities:
        click.echo("No recommendations.")
        return
    for row in summarize(entities, list(fields)):
        click.echo(json.dumps(row, default=str))


def _run_flow(entry_point: str, seed_ids, config_path, fields):
    async def run():
        config = load_recs_config(config_path)
        async with connected():
            flows = RecommendationFlows(default_stores(), config)
            result = await getattr(flows, entry_point)(list(seed_ids))
        _print_entities(result, fields)

    asyncio.run(run())


@click.group()
@click.option("--log-level", default=lambda: os.getenv("LOG_LEVEL", "INFO"), show_default="$LOG_LEVEL or INFO")
def cli(log_level: str):
    """Entity flow recommender - composable recommendation pipelines."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


config_option = click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
    help="Flow config YAML (default: $RECS_CONFIG_PATH or config/recommendations.yaml)",
)
fields_option = click.option(
    "--field", "fields", multiple=True, help="Attribute to print (repeatable, default: all)",
)


@cli.command("similar-authors")
@click.argument("author_ids", nargs=-1, required=True)
@config_option
@fields_option
def similar_authors(author_ids, config_path, fields):
    """Authors similar to AUTHOR_IDS across all configured neighbor graphs."""
    _run_flow("similar_authors", author_ids, config_path, fields)


@cli.command("user-songs")
@click.argument("user_ids", nargs=-1, required=True, type=int)
@config_option
@fields_option
def user_songs(user_ids, config_path, fields):
    """Songs similar to the users' recent likes and saves."""
    _run_flow("songs_for_user", user_ids, config_path, fields)


@cli.command("user-authors")
@click.argument("user_ids", nargs=-1, required=True, type=int)
@config_option
@fields_option
def user_authors(user_ids, config_path, fields):
    """Newest songs of authors similar to the ones the users recently engaged with."""
    _run_flow("authors_for_user", user_ids, config_path, fields)


@cli.command()
@click.argument("user_ids", nargs=-1, required=True, type=int)
@config_option
@fields_option
def recommend(user_ids, config_path, fields):
    """Song and author recommendations merged, enriched and sorted by length."""
    _run_flow("recommendations_for_user", user_ids, config_path, fields)


@cli.command("populate-index")
@click.argument("index_name")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--append", is_flag=True, help="Append to existing neighbor lists instead of replacing them")
def populate_index(index_name: str, files, append: bool):
    """Load neighbor FILES ("<id> <neighbor> ..." per line) into INDEX_NAME."""
    from recommender.services.similarity_index import SimilarityIndex, read_neighbor_file

    async def run():
        async with connected(database=False):
            index = SimilarityIndex()
            for filename in files:
                click.echo(f"Populating {index_name} from {filename}...")
                written = await index.populate(index_name, read_neighbor_file(filename), replace=not append)
                click.echo(f"  ✓ {written} ids")

    asyncio.run(run())


@cli.command("init-db")
@click.option("--drop", is_flag=True, help="Drop existing tables first")
@click.option("--demo", is_flag=True, help="Insert demo users, catalog and signals")
def init_db(drop: bool, demo: bool):
    """Create the users, catalog and interaction log tables."""
    from recommender.db.schema import (
        create_engine_with_url,
        create_tables,
        drop_tables,
        get_sessionmaker,
        seed_demo_data,
    )

    engine = create_engine_with_url()
    if drop:
        drop_tables(engine)
        click.echo("✓ Dropped tables")
    create_tables(engine)
    click.echo("✓ Created tables")

    if demo:
        Session = get_sessionmaker(engine)
        with Session() as session:
            seed_demo_data(session)
        click.echo("✓ Inserted demo data")


@cli.command()
def status():
    """Show connectivity of the database and the similarity index."""

    async def run():
        try:
            await init_pool()
        except Exception as e:
            click.echo(f"✗ Database unavailable: {e}")
        try:
            await init_redis_pool()
        except Exception as e:
            click.echo(f"✗ Redis unavailable: {e}")

        try:
            db = await check_pool_health()
            redis = await check_redis_health()
            click.echo(f"Database: {db['status']}")
            click.echo(f"Redis: {redis['status']}")
        finally:
            await close_redis_pool()
            await close_pool()

    asyncio.run(run())


if __name__ == "__main__":
    cli()
