#!/usr/bin/env python3
"""
sitescore CLI - command line interface for phosphorylation site localization.
"""

import sys

import click

from . import __version__
from .ascore.cli import main as ascore_main


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    sitescore: Phosphorylation site localization scoring for MS/MS spectra

    Available algorithms:
      ascore      AScore algorithm for phosphorylation site localization

    Examples:
      sitescore ascore -in spectra.mzML -id identifications.idXML -out results.idXML
    """
    pass


cli.add_command(ascore_main, name="ascore")


def main():
    """Main entry point for sitescore CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
