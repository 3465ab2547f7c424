"""
CLI module for CmdSense.

This module contains the command-line interface: argument parsing and the
handlers that drive the suggestion engine.
"""

from .commands import create_parser, parse_args
from .handlers import handle_cli_command

__all__ = ["create_parser", "parse_args", "handle_cli_command"]
