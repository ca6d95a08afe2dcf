"""
depcache - Main entry point

Delegates to cli.py so the package runs with ``python -m depcache``.
"""

from .cli import cli

if __name__ == "__main__":
    cli()
