"""
anyinfer health and metadata commands.

Usage:
    anyinfer health -u localhost:8001
    anyinfer metadata -m simple -x 1
"""

import json
from dataclasses import asdict

import click

from anyinfer.errors import InferenceClientError
from anyinfer.session import open_session

from .common import connection_options, load_config, setup_logging


@click.command()
@connection_options
def health_command(url, timeout, config_path, verbose):
    """Report server liveness and readiness."""
    setup_logging(verbose)
    try:
        cfg = load_config(config_path, url=url, timeout=timeout)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    try:
        with open_session(cfg.url, timeout=cfg.timeout) as session:
            live = session.server_live()
            ready = session.server_ready()
    except InferenceClientError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Health - Live: {live}")
    click.echo(f"Health - Ready: {ready}")


@click.command()
@click.option("-m", "--model-name", default=None, help="Name of model (default: simple)")
@click.option("-x", "--model-version", default=None, help="Version of model (default: latest)")
@connection_options
def metadata_command(model_name, model_version, url, timeout, config_path, verbose):
    """Print model metadata."""
    setup_logging(verbose)
    try:
        cfg = load_config(
            config_path, url=url, timeout=timeout,
            model_name=model_name, model_version=model_version,
        )
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    try:
        with open_session(cfg.url, timeout=cfg.timeout) as session:
            metadata = session.model_metadata(cfg.model_name, cfg.model_version)
    except InferenceClientError as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(metadata.as_dict() or asdict(metadata), indent=2))
