import asyncio
import json
from typing import Optional, Sequence

import click

from doug import __version__
from doug._doug import Doug
from doug.logging import setup_development_logging, setup_production_logging

DEFAULT_RESOURCE_URI = "candidate-info://resume-url"


async def _run(
    transport: str,
    url: Optional[str],
    command: Optional[str],
    args: Optional[str],
    resource_uris: Sequence[str],
    name: Optional[str],
    client_id: Optional[str],
) -> None:
    doug = Doug()
    try:
        if transport == "http":
            await doug.add_http_client(url, name=name, client_id=client_id)
        else:
            await doug.add_stdio_client(command, args, name=name, client_id=client_id)

        capabilities = await doug.get_client_capabilities()
        resources = await doug.get_resource_values(list(resource_uris))
    finally:
        await doug.close()

    click.echo(json.dumps([c.model_dump(mode="json", exclude_none=True) for c in capabilities]))
    click.echo("Resources: " + json.dumps([r.model_dump(mode="json", exclude_none=True) for r in resources]))


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--transport",
    type=click.Choice(["http", "stdio"], case_sensitive=False),
    required=True,
    help="Transport method to use (http or stdio).",
)
@click.option("--url", type=str, default=None, help="URL to connect to. Required if transport is http.")
@click.option("--command", "command_", type=str, default=None, help="Command to execute. Required if transport is stdio.")
@click.option("--args", type=str, default=None, help="Arguments for the command. Required if transport is stdio.")
@click.option(
    "--resource",
    "resource_uris",
    type=str,
    multiple=True,
    default=(DEFAULT_RESOURCE_URI,),
    show_default=True,
    help="URI of a resource to read from the server. May be repeated.",
)
@click.option("--name", type=str, default=None, help="Name the client announces to the server.")
@click.option("--client-id", type=str, default=None, help="ID to register the client under.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show additional command output.")
@click.version_option(__version__, "--version", prog_name="doug", message="%(prog)s version: %(version)s")
def main(
    transport: str,
    url: Optional[str],
    command_: Optional[str],
    args: Optional[str],
    resource_uris: Sequence[str],
    name: Optional[str],
    client_id: Optional[str],
    verbose: bool,
):
    """Connect to an MCP server, print its capabilities and the requested resources."""
    transport = transport.lower()
    if transport == "http" and url is None:
        raise click.UsageError("--url is required when transport is http")
    if transport == "stdio":
        if command_ is None:
            raise click.UsageError("--command is required when transport is stdio")
        if args is None:
            raise click.UsageError("--args is required when transport is stdio")

    if verbose:
        setup_development_logging()
    else:
        setup_production_logging()

    try:
        asyncio.run(_run(transport, url, command_, args, resource_uris, name, client_id))
    except Exception as ex:
        raise click.ClickException(str(ex)) from ex
