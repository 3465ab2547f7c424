"""
CLI command handlers for CmdSense.

This module contains the actual implementation of CLI commands,
separated from the argument parsing logic.
"""

import asyncio
import json
import os
import sys
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, List

from ..config import load_config, ConfigurationError
from ..core.context import LocalContextProvider
from ..core.suggestions import SuggestionEngine, SuggestionSession, SuggestionContext, StructuredExplanation
from ..utils import setup_logging, get_logger, log_config_info

HISTORY_LIMIT = 500


def handle_cli_command(args) -> int:
    """
    Handle CLI commands based on parsed arguments.

    Returns:
        int: Exit code (0 for success, non-zero for error)
    """
    try:
        config = load_config(args.config)
        if args.offline:
            config.engine.offline_mode = True
        setup_logging(config, verbose=args.verbose)
        log_config_info(config)

        history = _read_history(args.history) if args.history else []
        context = SuggestionContext(
            current_directory=args.cwd or os.getcwd(),
            recent_commands=history,
            last_error=getattr(args, "last_error", None),
        )

        return asyncio.run(_dispatch(config, args, context))

    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"❌ Cannot read history: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        return 1


async def _dispatch(config, args, context: SuggestionContext) -> int:
    handlers = {
        "suggest": _handle_suggest,
        "explain": _handle_explain,
        "patterns": _handle_patterns,
        "search": _handle_search,
        "complete": _handle_complete,
        "interactive": _handle_interactive,
    }
    handler = handlers.get(args.command, _handle_interactive)

    async with SuggestionEngine(config=config, context_provider=LocalContextProvider()) as engine:
        return await handler(engine, args, context)


def _read_history(path: str) -> List[str]:
    """Read a shell history file and return it most recent first."""
    commands = []
    with open(Path(path).expanduser(), 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            line = line.rstrip('\n')
            # zsh extended history: ": <timestamp>:<duration>;<command>"
            if line.startswith(': ') and ';' in line:
                line = line.split(';', 1)[1]
            if line.strip():
                commands.append(line.strip())

    commands.reverse()
    return commands[:HISTORY_LIMIT]


def _to_jsonable(value: Any) -> Any:
    if is_dataclass(value):
        return json.loads(json.dumps(asdict(value), default=str))
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


def _print_json(value: Any) -> None:
    print(json.dumps(_to_jsonable(value), indent=2, default=str))


def _print_suggestions(suggestions, has_warning: bool = False) -> None:
    if not suggestions:
        print("  No suggestions")
        return
    if has_warning:
        print("🚨 Warning")
    for suggestion in suggestions:
        source = suggestion.source.value if suggestion.source else "-"
        print(f"  {suggestion.command:<40} [{source}] {suggestion.description}")


async def _handle_suggest(engine: SuggestionEngine, args, context: SuggestionContext) -> int:
    """Suggest completions and corrections."""
    result = await engine.analyze(args.text, context)
    if args.json:
        _print_json({"suggestions": [s.to_dict() for s in result.suggestions],
                     "has_warning": result.has_warning})
        return 0

    print(f"💡 Suggestions for: {args.text}")
    _print_suggestions(result.suggestions, result.has_warning)
    return 0


async def _handle_explain(engine: SuggestionEngine, args, context: SuggestionContext) -> int:
    """Explain a command."""
    explanation = await engine.explain(args.text)
    if explanation is None:
        print("❌ Nothing to explain", file=sys.stderr)
        return 1

    if args.json:
        _print_json(explanation if is_dataclass(explanation) else {"explanation": explanation})
        return 0

    print(f"📖 {args.text}")
    if isinstance(explanation, StructuredExplanation):
        print(f"  {explanation.purpose}")
        if explanation.options:
            print("  Options:")
            for option, description in explanation.options.items():
                print(f"    {option:<12} {description}")
        if explanation.examples:
            print("  Examples:")
            for example in explanation.examples:
                suffix = f"  # {example.description}" if example.description else ""
                print(f"    {example.command}{suffix}")
    else:
        print(f"  {explanation}")
    return 0


async def _handle_patterns(engine: SuggestionEngine, args, context: SuggestionContext) -> int:
    """Analyze history patterns."""
    if not context.recent_commands:
        print("❌ No history to analyze; pass --history PATH", file=sys.stderr)
        return 1

    analysis = await engine.discover_patterns(context.recent_commands, context)
    if args.json:
        _print_json(analysis)
        return 0

    if analysis.insights:
        print("🤖 Suggested by the model:")
        for insight in analysis.insights:
            print(f"  {insight.suggestion:<40} [{insight.pattern}] {insight.description}")

    print("📊 Most used commands:")
    for frequency in analysis.command_frequency:
        print(f"  {frequency.command:<20} {frequency.count}")

    if analysis.command_sequences:
        print("🔁 Recurring sequences:")
        for sequence in analysis.command_sequences:
            print(f"  {' -> '.join(sequence.commands)}  ({sequence.count}x)")

    if analysis.recognized_patterns:
        print("🧩 Workflow patterns:")
        for pattern in analysis.recognized_patterns:
            print(f"  {pattern.description:<24} {pattern.count}")

    if analysis.optimizations:
        print("⚡ Optimizations:")
        for optimization in analysis.optimizations:
            print(f"  {optimization.original}  =>  {optimization.optimized}")
            print(f"    {optimization.explanation}")
    return 0


async def _handle_search(engine: SuggestionEngine, args, context: SuggestionContext) -> int:
    """Search history."""
    result = await engine.semantic_search(args.query, context.recent_commands, context)
    if args.json:
        _print_json(result)
        return 0

    print(f"🔍 Results for: {args.query}")
    if not result.results:
        print("  No matches")
    for match in result.results:
        print(f"  {match.score:.2f}  {match.command:<40} {match.reason}")
    return 0


async def _handle_complete(engine: SuggestionEngine, args, context: SuggestionContext) -> int:
    """Complete the last token."""
    completions = engine.complete(args.text, context)
    if args.json:
        _print_json([c.to_dict() for c in completions])
        return 0

    _print_suggestions(completions)
    return 0


async def _handle_interactive(engine: SuggestionEngine, args, context: SuggestionContext) -> int:
    """Feed stdin lines through a debounced session and print what it shows."""
    logger = get_logger(__name__)

    def show(suggestions, has_warning):
        _print_suggestions(suggestions, has_warning)

    session = SuggestionSession(engine, on_result=show, context_factory=lambda: context)
    print("⌨️  Type a command and press Enter (Ctrl-D to quit). Commands are never executed.")

    loop = asyncio.get_running_loop()
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            await session.on_input(line.rstrip('\n'))
            await session.flush()
    except KeyboardInterrupt:
        logger.debug("Interactive session interrupted")
    finally:
        await session.aclose()

    print("\n👋 Goodbye!")
    return 0
