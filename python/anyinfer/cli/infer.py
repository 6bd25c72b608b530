"""
anyinfer infer command - Run one inference against a KServe v2 server.

Usage:
    anyinfer infer -m simple -u localhost:8001
    anyinfer infer -m simple -i hello -i world
    anyinfer infer --config client.yaml
"""

import json
from dataclasses import asdict

import click

from anyinfer.errors import InferenceClientError
from anyinfer.orchestrator import run_inference
from anyinfer.session import open_session

from .common import connection_options, load_config, setup_logging


@click.command()
@click.option("-m", "--model-name", default=None, help="Name of model being served (default: simple)")
@click.option("-x", "--model-version", default=None, help="Version of model (default: latest)")
@click.option("-b", "--batch-size", type=int, default=None, help="Batch size (default: 1)")
@click.option("-i", "--input", "inputs", multiple=True, help="Input string; repeat once per batch element")
@click.option("--output-width", type=int, default=None, help="INT32 elements per batch row in each output (default: 16)")
@connection_options
def infer_command(model_name, model_version, batch_size, inputs, output_width, url, timeout, config_path, verbose):
    """Check health, fetch metadata and run inference.

    Example:
        anyinfer infer -m simple -u localhost:8001 -i test -i test
    """
    setup_logging(verbose)

    try:
        cfg = load_config(
            config_path,
            url=url,
            timeout=timeout,
            model_name=model_name,
            model_version=model_version,
            batch_size=batch_size,
            inputs=inputs,
            output_width=output_width,
        )
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"FLAGS: model={cfg.model_name} version={cfg.model_version or 'latest'} "
               f"batch={cfg.batch_size} url={cfg.url}")

    try:
        with open_session(cfg.url, timeout=cfg.timeout) as session:
            result = run_inference(session, cfg)
    except InferenceClientError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Health - Live: {result.live}")
    click.echo(f"Health - Ready: {result.ready}")
    click.echo(json.dumps(result.metadata.as_dict() or asdict(result.metadata), indent=2))

    click.echo()
    click.echo("Checking Inference Outputs")
    click.echo("--------------------------")
    for name, values in result.outputs.items():
        click.echo(f"{name}: {values}")
