#!/usr/bin/env python3
"""
notesync CLI.

Entry point when running from a checkout. The installed console script
calls notesync.cli:main directly.

Usage:
    python cli.py --help
    python cli.py --service list --search milk
    python cli.py --service sync --verbose
"""

import sys
from pathlib import Path

import click

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from notesync.cli import main


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


if __name__ == "__main__":
    validate_project_root()
    main()
