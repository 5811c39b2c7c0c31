"""VALUEPLAY Interfaces - command line."""

from valueplay.interfaces.cli_app import cli, main as cli_main

__all__ = [
    "cli",
    "cli_main",
]
