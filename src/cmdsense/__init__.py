"""
CmdSense - real-time command suggestions for the terminal.

Typo, danger and syntax corrections, history-driven workflow suggestions
and optional remote inference, behind a debounced suggestion loop.
"""

__version__ = "0.1.0"
