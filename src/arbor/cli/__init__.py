"""arbor command line interface."""

from arbor.cli.app import app

__all__ = ["app"]
