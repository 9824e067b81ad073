import argparse
from typing import List, Optional


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Configures and parses command line arguments for the application.

    Args:
        argv: Arguments to parse. Defaults to sys.argv[1:].

    Returns:
        argparse.Namespace: An object containing the parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="xcode-log-parser",
        description="Structured reports from xcodebuild console output",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML configuration file (default: config/application.yml when present)."
    )
    parser.add_argument(
        "--project-root",
        default=".",
        help="Workspace root. Relative config paths and the warning filter use it."
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override the configured log level."
    )
    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="Available commands"
    )

    # --- Parse Command Arguments ---
    parser_parse = subparsers.add_parser(
        "parse",
        help="Parse a captured xcodebuild log into a JSON report.",
        description="Reads the output of 'xcodebuild build' or 'xcodebuild test', extracts test "
                    "results, build errors, warnings and diagnostics, and writes them as JSON."
    )
    parser_parse.add_argument(
        "logfile",
        help="Path to the captured log, or '-' to read standard input."
    )
    parser_parse.add_argument(
        "-o", "--output",
        default=None,
        help="Write the JSON report to this file instead of standard output."
    )
    parser_parse.add_argument(
        "--target-matching",
        action="store_true",
        help="Group tests by 'Target:Class' and match test files against their target."
    )
    parser_parse.add_argument(
        "--no-output-lines",
        action="store_true",
        help="Leave the verbatim log lines out of the JSON report."
    )
    parser_parse.add_argument(
        "--quiet",
        action="store_true",
        help="Do not render the summary table."
    )

    return parser.parse_args(argv)
