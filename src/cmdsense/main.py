"""
CmdSense console entry point.
"""

import sys

from .cli import parse_args, handle_cli_command


def main() -> int:
    """Main entry point for CmdSense."""
    try:
        args = parse_args()
        return handle_cli_command(args)

    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        return 0


if __name__ == "__main__":
    sys.exit(main())
