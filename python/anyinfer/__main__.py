"""
anyinfer - Entry Point

Usage:
    python -m anyinfer infer -m simple
"""

from anyinfer.cli import main

if __name__ == "__main__":
    main()
