"""
Command-line argument parser for CmdSense.

This module defines all CLI subcommands and arguments, kept apart from the
handlers that implement them.
"""

import argparse

from .. import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cmdsense",
        description="CmdSense - command suggestions, corrections and explanations for the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cmdsense suggest "giit status"            # Typo, danger and completion suggestions
  cmdsense explain "git rebase -i HEAD~3"   # Explain a command
  cmdsense patterns --history ~/.bash_history
  cmdsense search "docker" --history ~/.bash_history
  cmdsense complete "cd sr"                 # Complete the last token
  cmdsense interactive                      # Debounced suggestions per line typed
        """
    )

    # Basic options
    parser.add_argument(
        "--version",
        action="version",
        version=f"CmdSense {__version__}"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--offline",
        action="store_true",
        help="Never call the remote inference service"
    )

    parser.add_argument(
        "--cwd",
        type=str,
        metavar="DIR",
        help="Directory used as terminal context (default: current directory)"
    )

    parser.add_argument(
        "--history",
        type=str,
        metavar="PATH",
        help="Shell history file, oldest command first (e.g. ~/.bash_history)"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    suggest = subparsers.add_parser("suggest", help="Suggest completions and corrections for a command")
    suggest.add_argument("text", help="Partially typed command")
    suggest.add_argument("--last-error", type=str, metavar="TEXT", help="Error output of the previous command")

    explain = subparsers.add_parser("explain", help="Explain a command")
    explain.add_argument("text", help="Command to explain")

    subparsers.add_parser("patterns", help="Analyze usage patterns in the command history")

    search = subparsers.add_parser("search", help="Search the command history")
    search.add_argument("query", help="Free-text query")

    complete = subparsers.add_parser("complete", help="Complete the last token of a command")
    complete.add_argument("text", help="Partially typed command")

    subparsers.add_parser("interactive", help="Read lines from stdin and show debounced suggestions")

    return parser


def parse_args(args=None):
    """Parse command line arguments."""
    parser = create_parser()
    return parser.parse_args(args)
