"""
anyinfer CLI module.

This module provides the command-line interface for anyinfer.
"""

from .main import cli, main

__all__ = ["cli", "main"]
