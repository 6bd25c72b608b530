"""
Options and helpers shared by the anyinfer commands.
"""

import logging
from typing import Optional

import click

from anyinfer.config import ClientConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def connection_options(func):
    """Endpoint, deadline, config file and verbosity options."""
    options = [
        click.option("-u", "--url", envvar="ANYINFER_URL", default=None,
                     help="Inference server URL (default: localhost:8001)"),
        click.option("--timeout", type=float, default=None,
                     help="Per-call deadline in seconds (default: 10)"),
        click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
                     default=None, help="YAML config file"),
        click.option("-v", "--verbose", is_flag=True, help="Enable debug logging"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def load_config(config_path: Optional[str], **overrides) -> ClientConfig:
    """
    Build a ClientConfig from an optional YAML file plus command-line values.

    Options left unset on the command line (None or an empty tuple) keep the
    value from the file, or the dataclass default.
    """
    cfg = ClientConfig.from_yaml(config_path) if config_path else ClientConfig()
    for key, value in overrides.items():
        if value is None or value == ():
            continue
        if isinstance(value, tuple):
            value = list(value)
        setattr(cfg, key, value)

    # Inputs given without a batch size define the batch.
    if overrides.get("inputs") and overrides.get("batch_size") is None:
        cfg.batch_size = len(cfg.inputs)

    cfg.validate()
    return cfg
