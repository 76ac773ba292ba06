"""
Airtable Manager Package Main Entry Point

This module serves as the main entry point when the package is run as a module
using `python -m airtable_manager`. It delegates to the CLI runner.
"""

from airtable_manager.cli.typer_app import run

if __name__ == "__main__":
    run()
