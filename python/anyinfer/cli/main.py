"""Command group for the anyinfer client: infer, health, metadata."""

import click

from anyinfer import __version__

from .health import health_command, metadata_command
from .infer import infer_command

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="anyinfer")
@click.pass_context
def cli(ctx):
    """Talk to a KServe v2 / Triton server over gRPC."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


for name, command in (
    ("infer", infer_command),
    ("health", health_command),
    ("metadata", metadata_command),
):
    cli.add_command(command, name=name)


def main():
    cli()
