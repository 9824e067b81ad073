import argparse
import json
import logging
import sys
from typing import Dict, Any, List

from xcode_log_parser.cli.adapter_factory import (
    create_file_system_adapter,
    create_log_parser,
    create_source_locator,
    create_ui_service,
)
from xcode_log_parser.domain.models.report import Report
from xcode_log_parser.domain.ports.file_system import FileSystemPort
from xcode_log_parser.domain.ports.ui_service import LogLevel, UIServicePort

logger = logging.getLogger(__name__)

STDIN_MARKER = "-"


def read_log_lines(logfile: str, file_system: FileSystemPort) -> List[str]:
    """
    Reads the captured log, from standard input when `logfile` is '-'.

    Bytes that are not valid UTF-8 (simulator and tool output can contain
    them) are replaced with U+FFFD instead of failing the run.
    """
    if logfile == STDIN_MARKER:
        stream = getattr(sys.stdin, 'buffer', None)
        if stream is not None:
            content = stream.read().decode('utf-8', errors='replace')
        else:
            content = sys.stdin.read()
    else:
        content = file_system.read_file(logfile, errors='replace')
    return content.splitlines()


def render_summary(ui: UIServicePort, report: Report):
    """Prints the tests table and a totals panel."""
    tests = report.all_tests()
    if tests:
        table = ui.table(["Test", "Result", "Time", "Location"], title="Tests")
        for result in tests:
            location = f"{result.filename}:{result.line_number}" if result.filename else "-"
            table.add_row(
                f"{result.class_name}.{result.name}",
                result.test_result or "-",
                result.time or "-",
                location,
            )
        table.render()

    for error in report.build_errors:
        where = f"{error.filepath}:{error.line_number}" if error.filepath else (error.source or "build")
        ui.log(f"error: {where}: {' '.join(error.message)}", LogLevel.ERROR)

    summary = (
        f"Tests: {report.tests_count}  Failed: {report.failed_tests_count}\n"
        f"Build errors: {len(report.build_errors)}  Warnings: {len(report.build_warnings)}  "
        f"Diagnostics: {len(report.diagnostics)}"
    )
    if report.result_bundle_path:
        summary += f"\nResult bundle: {report.result_bundle_path}"

    failed = report.failed_tests_count > 0 or bool(report.build_errors)
    ui.panel(summary, "Summary", border_style="red" if failed else "green")


def handle_parse(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Handles the 'parse' command logic. Returns the process exit status."""
    output_config = config.get('output', {})
    report_file = args.output or output_config.get('report_file')
    include_output = output_config.get('include_output', True) and not args.no_output_lines

    file_system = create_file_system_adapter()
    # Report on stdout: the summary goes to stderr.
    ui = create_ui_service(config, stderr=not report_file)

    try:
        lines = read_log_lines(args.logfile, file_system)
    except OSError as e:
        ui.log(f"Could not read log {args.logfile}: {e}", LogLevel.ERROR)
        logger.critical(f"Could not read log {args.logfile}: {e}")
        return 1

    logger.info(f"Parsing {len(lines)} lines from {args.logfile if args.logfile != STDIN_MARKER else 'stdin'}")
    parser = create_log_parser(config, source_locator=create_source_locator(config, file_system))
    report = parser.parse_logs(lines)
    logger.info(
        f"Parsed {report.tests_count} tests ({report.failed_tests_count} failed), "
        f"{len(report.build_errors)} build errors, {len(report.build_warnings)} warnings"
    )

    data = report.to_dict(include_output=include_output)
    if report_file:
        try:
            file_system.write_json(report_file, data)
        except OSError as e:
            logger.critical(f"Could not write report to {report_file}: {e}")
            return 1
        logger.info(f"Report written to {report_file}")
    else:
        print(json.dumps(data, indent=2, default=str))

    if not args.quiet:
        render_summary(ui, report)
    return 0
