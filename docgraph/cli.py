"""
DocGraph CLI

Commands:
    docgraph init-db
    docgraph add-document FILE [--ocr]
    docgraph analyze DOCUMENT_ID
    docgraph show DOCUMENT_ID
"""

import asyncio
import json
import sys
from pathlib import Path
from uuid import UUID

import click

from docgraph import __version__
from docgraph.config import DocGraphConfig
from docgraph.core import DocGraph
from docgraph.exceptions import DocGraphError
from docgraph.logging_config import configure_logging


# ============================================================================
# Helper Functions
# ============================================================================

def run_async(coro):
    """Run async coroutine and return result."""
    return asyncio.run(coro)


def _echo_graph(graph) -> None:
    click.echo(json.dumps(graph.to_dict(), indent=2, ensure_ascii=False))


class UUIDParamType(click.ParamType):
    name = "uuid"

    def convert(self, value, param, ctx):
        if isinstance(value, UUID):
            return value
        try:
            return UUID(value)
        except ValueError:
            self.fail(f"{value!r} is not a valid document id", param, ctx)


DOCUMENT_ID = UUIDParamType()


# ============================================================================
# CLI
# ============================================================================

@click.group()
@click.version_option(version=__version__, prog_name="docgraph")
@click.option("--log-level", default="WARNING", show_default=True, help="Log level")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
@click.pass_context
def cli(ctx, log_level, json_logs):
    """DocGraph - knowledge graph extraction for stored documents."""
    configure_logging(log_level, json_output=json_logs)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("config", DocGraphConfig())


@cli.command("init-db")
@click.pass_context
def init_db_command(ctx):
    """Create the database tables."""
    async def run():
        async with DocGraph(ctx.obj["config"]):
            pass

    try:
        run_async(run())
    except DocGraphError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo("Database initialized")


@cli.command("add-document")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--ocr", is_flag=True, help="Store the file as OCR text instead of content")
@click.pass_context
def add_document(ctx, file: Path, ocr: bool):
    """Store a text FILE as a document and print its id."""
    text = file.read_text(encoding="utf-8")

    async def run():
        async with DocGraph(ctx.obj["config"]) as dg:
            if ocr:
                return await dg.add_document(file.name, ocr_text=text)
            return await dg.add_document(file.name, content=text)

    try:
        document_id = run_async(run())
    except DocGraphError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(str(document_id))


@cli.command()
@click.argument("document_id", type=DOCUMENT_ID)
@click.pass_context
def analyze(ctx, document_id: UUID):
    """Extract and store the graph of DOCUMENT_ID, print it as JSON."""
    async def run():
        async with DocGraph(ctx.obj["config"]) as dg:
            return await dg.analyze(document_id)

    try:
        graph = run_async(run())
    except DocGraphError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _echo_graph(graph)


@cli.command()
@click.argument("document_id", type=DOCUMENT_ID)
@click.pass_context
def show(ctx, document_id: UUID):
    """Print the stored graph of DOCUMENT_ID as JSON."""
    async def run():
        async with DocGraph(ctx.obj["config"]) as dg:
            return await dg.load_graph(document_id)

    try:
        graph = run_async(run())
    except DocGraphError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _echo_graph(graph)


if __name__ == "__main__":
    cli()
