"""Allow `python -m repupdate`."""

from .main import cli

cli()
