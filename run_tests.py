#!/usr/bin/env python3
"""
Test Runner for tar-gist
========================

Runs the unit and integration suites with a few common pytest options.
"""

import sys
import subprocess
import argparse
from pathlib import Path

COVERED_MODULES = ['pipeline', 'tar_gist', 'gist_cli', 'gist_configs',
                   'gist_errors', 'gist_store', 'base_classes']


def run_tests(args):
    """Run pytest with specified options"""
    suite = f"tests/{args.suite}" if args.suite else "tests/"
    cmd = [sys.executable, "-m", "pytest", suite]

    if args.verbose:
        cmd.append("-v")

    if args.coverage:
        for module in COVERED_MODULES:
            cmd.append(f"--cov={module}")
        cmd.append("--cov-report=term-missing")

    if args.test:
        cmd.extend(["-k", args.test])

    if args.show_output:
        cmd.append("-s")

    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=Path(__file__).parent)

    return result.returncode


def main():
    parser = argparse.ArgumentParser(description="Run tests for tar-gist")

    parser.add_argument("suite", nargs="?", choices=["unit", "integration"],
                        help="Run only one suite")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Verbose test output")
    parser.add_argument("-c", "--coverage", action="store_true",
                        help="Report coverage")
    parser.add_argument("-t", "--test", type=str,
                        help="Run specific test by name pattern")
    parser.add_argument("-s", "--show-output", action="store_true",
                        help="Show print statements during tests")

    args = parser.parse_args()
    sys.exit(run_tests(args))


if __name__ == "__main__":
    main()
