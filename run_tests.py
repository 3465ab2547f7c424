#!/usr/bin/env python3
"""
Test runner script for CmdSense.

This script provides various ways to run the test suite with different
marker selections and reporting options.
"""

import argparse
import subprocess
import sys
from pathlib import Path


def run_tests(args):
    """Run the test suite with specified options."""

    # Base pytest command
    cmd = ["python", "-m", "pytest"]

    # Add test path
    test_path = Path("src/cmdsense/tests")
    if args.module:
        test_path = test_path / f"test_{args.module}.py"
    cmd.append(str(test_path))

    # Add verbosity
    if args.verbose:
        cmd.extend(["-v", "-s", "--capture=no"])
    else:
        cmd.append("-v")

    # Marker selection; slow tests are excluded unless requested
    markers = []
    if args.unit:
        markers.append("unit")
    elif args.integration:
        markers.append("integration")
    if not args.include_slow:
        markers.append("not slow")
    if markers:
        cmd.extend(["-m", " and ".join(markers)])

    # Add coverage reporting
    if args.coverage:
        cmd.extend([
            "--cov=src/cmdsense",
            "--cov-report=html",
            "--cov-report=term-missing"
        ])

    # Add any additional pytest args
    if args.pytest_args:
        cmd.extend(args.pytest_args.split())

    print(f"Running command: {' '.join(cmd)}")
    print("-" * 60)

    try:
        result = subprocess.run(cmd, cwd=Path(__file__).parent)
        return result.returncode
    except KeyboardInterrupt:
        print("\nTest run interrupted by user")
        return 1
    except OSError as e:
        print(f"Error running tests: {e}")
        return 1


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run the CmdSense test suite",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_tests.py                    # Run all tests except slow ones
  python run_tests.py --verbose          # Run with verbose output
  python run_tests.py --module engine    # Run src/cmdsense/tests/test_engine.py
  python run_tests.py --coverage         # Run with coverage reporting
  python run_tests.py --include-slow     # Also run timer-driven tests
        """
    )

    # Test categories
    parser.add_argument(
        "--unit",
        action="store_true",
        help="Run only tests marked unit"
    )
    parser.add_argument(
        "--integration",
        action="store_true",
        help="Run only tests marked integration"
    )
    parser.add_argument(
        "--module",
        type=str,
        help="Run a single test module, e.g. 'engine' or 'cache'"
    )

    # Test options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Run tests with verbose output"
    )
    parser.add_argument(
        "--coverage",
        action="store_true",
        help="Generate coverage report"
    )
    parser.add_argument(
        "--include-slow",
        action="store_true",
        help="Include slow tests in the run"
    )
    parser.add_argument(
        "--pytest-args",
        type=str,
        help="Additional arguments to pass to pytest"
    )

    args = parser.parse_args()

    # Check if pytest is available
    try:
        subprocess.run(
            ["python", "-m", "pytest", "--version"],
            capture_output=True,
            check=True
        )
    except subprocess.CalledProcessError:
        print("❌ pytest is not installed or not available")
        print("💡 Install with: pip install -e '.[dev]'")
        return 1

    return run_tests(args)


if __name__ == "__main__":
    sys.exit(main())
