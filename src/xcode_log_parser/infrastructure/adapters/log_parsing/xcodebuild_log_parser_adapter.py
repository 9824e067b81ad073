"""
State machine turning xcodebuild console output into a Report.
"""
import dataclasses
import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from xcode_log_parser.application.services.report_aggregator import ReportAggregator
from xcode_log_parser.domain.models.parse_state import ParseContext, ParseState
from xcode_log_parser.domain.models.report import (
    Report, TestResult, BuildError, BuildWarning, Diagnostic
)
from xcode_log_parser.domain.ports.log_parser import LogParserPort
from xcode_log_parser.domain.ports.source_locator import SourceLocatorPort
from xcode_log_parser.domain.ports.test_status_notifier import TestStatusNotifierPort
from xcode_log_parser.infrastructure.adapters.log_parsing.line_classifier import (
    Annotation, Blank, ErrorLine, FinishedFormat, FinishedTest, NoteOrLint, Plain,
    ResultBundlePath, StartedTest, WarningLine, classify_line, is_xctest_log,
    parse_located_error, parse_located_warning, parse_sourced_error, sanitize,
)

logger = logging.getLogger(__name__)

FAILED_PLACEHOLDER = "Failed"


def get_filename(filepath: Optional[str]) -> Optional[str]:
    """Returns the file name without extension, e.g. 'MyTests' for '/a/MyTests.swift'."""
    if not filepath:
        return None
    return Path(filepath).stem or None


class XcodebuildLogParserAdapter(LogParserPort):
    """
    Parses xcodebuild build and test output line by line.

    Possible paths through the state machine:
        BEGIN -> BUILD_ERROR -> BEGIN
        BEGIN -> BUILD_WARNING -> BEGIN
        BEGIN -> TEST_START -> (passed) -> BEGIN
        BEGIN -> TEST_START -> TEST_ERROR -> (failed) -> BEGIN

    Records still open when the input ends are not flushed.
    """

    def __init__(
        self,
        source_locator: SourceLocatorPort,
        status_notifier: Optional[TestStatusNotifierPort] = None,
        project_root: Optional[str] = None,
        target_matching: bool = False,
    ):
        """
        Initializes the adapter.

        Args:
            source_locator: Resolves test classes and methods to files and lines.
            status_notifier: Observer told about every completed test. Optional.
            project_root: Only warnings from files under this path are kept.
                Defaults to the current working directory.
            target_matching: Group tests by 'Target:Class' instead of 'Class'
                and pass the reported target to the source locator.
        """
        self.source_locator = source_locator
        self.project_root = project_root or os.getcwd()
        self.target_matching = target_matching
        self.aggregator = ReportAggregator(status_notifier, target_matching)
        self.context = ParseContext()

    def clear(self) -> None:
        self.context = ParseContext()
        self.aggregator.clear()

    def parse_logs(self, lines: Iterable[str]) -> Report:
        count = 0
        for line in lines:
            self.process_line(line)
            count += 1

        report = self.aggregator.snapshot()
        logger.debug(
            f"Processed {count} lines: {report.tests_count} tests, {report.failed_tests_count} failed, "
            f"{len(report.build_errors)} errors, {len(report.build_warnings)} warnings."
        )
        return report

    def process_line(self, line: str) -> None:
        self.aggregator.add_output(line)
        classification = classify_line(line)

        if isinstance(classification, StartedTest):
            self._parse_test_started(classification)
        elif isinstance(classification, FinishedTest):
            self._parse_test_finished(classification)
        elif isinstance(classification, ErrorLine):
            self._parse_error(line)
        elif isinstance(classification, WarningLine):
            self._flush()
            self._parse_warning(line)
        elif isinstance(classification, (Annotation, Plain)):
            self._append_continuation(line)
        elif isinstance(classification, (Blank, NoteOrLint)):
            self._flush()
        elif isinstance(classification, ResultBundlePath):
            if classification.path:
                self.aggregator.set_result_bundle_path(classification.path)

    # --- Flushing ---

    def _flush(self) -> None:
        ctx = self.context
        if ctx.state == ParseState.BUILD_ERROR:
            self.aggregator.add_build_error(ctx.record)
            ctx.reset_record()
        elif ctx.state == ParseState.BUILD_WARNING:
            self.aggregator.add_build_warning(ctx.record)
            ctx.reset_record()
        elif ctx.state == ParseState.TEST_ERROR:
            self._flush_test(ctx.record)

    def _flush_test(self, result: TestResult) -> None:
        ctx = self.context
        self.aggregator.add_test(result, replaces=ctx.superseded)
        ctx.superseded = None
        ctx.last_test = result
        ctx.reset_record()

    def _append_continuation(self, line: str) -> None:
        if self.context.has_open_message:
            self.context.record.message.append(line)

    # --- Tests ---

    def _parse_test_started(self, started: StartedTest) -> None:
        if not started.class_name or not started.name:
            logger.debug(f"Ignoring malformed test start line: {started.line}")
            return

        lookup_target = started.target if self.target_matching else None
        filepath = self.source_locator.find_file_path(lookup_target, started.class_name)

        self.aggregator.count_test()
        ctx = self.context
        ctx.remembered_failure = None
        ctx.last_test = None
        ctx.superseded = None
        ctx.state = ParseState.TEST_START
        ctx.record = TestResult(
            target=started.target,
            class_name=started.class_name,
            name=started.name,
            filepath=filepath,
            filename=get_filename(filepath),
        )

    def _parse_test_finished(self, finished: FinishedTest) -> None:
        if finished.format == FinishedFormat.INTERACTIVE:
            self._finish_interactive(finished)
        else:
            self._finish_autogenerated(finished)

    def _finish_interactive(self, finished: FinishedTest) -> None:
        if not finished.result:
            logger.debug(f"Ignoring malformed test finish line: {finished.line}")
            return

        ctx = self.context
        ctx.remembered_failure = None
        success = finished.result == "passed"

        # Failure already flushed by a blank line: complete it in place.
        if ctx.last_test:
            ctx.last_test.time = finished.time
            ctx.last_test.test_result = finished.result
            ctx.last_test.success = success
            ctx.last_test = None
            ctx.reset_record()
            return

        if not isinstance(ctx.record, TestResult):
            logger.debug(f"Test finished without a running test: {finished.line}")
            return

        result = ctx.record
        result.time = finished.time
        result.test_result = finished.result
        result.success = success
        if not success and not result.message:
            result.message = [FAILED_PLACEHOLDER]
            self.aggregator.count_failure()
        self._flush_test(result)

    def _finish_autogenerated(self, finished: FinishedTest) -> None:
        if not finished.class_name or not finished.name or not finished.result:
            logger.debug(f"Ignoring malformed test finish line: {finished.line}")
            return

        locator = self.source_locator
        filepath = locator.find_file_path(None, finished.class_name)
        success = finished.result == "passed"

        result = TestResult(
            target=locator.find_target_for_file(filepath) if filepath else None,
            class_name=finished.class_name,
            name=finished.name,
            filepath=filepath,
            filename=get_filename(filepath),
            line_number=locator.find_declaration_line(filepath, finished.name) if filepath else None,
            time=finished.time,
            test_result=finished.result,
            success=success,
        )

        self.context.remembered_failure = None
        self.aggregator.count_test()
        if not success:
            result.message = [FAILED_PLACEHOLDER]
            self.aggregator.count_failure()

        self.context.record = result
        self._flush_test(result)

    # --- Errors ---

    def _parse_error(self, line: str) -> None:
        self._flush()
        ctx = self.context
        tests_started = self.aggregator.tests_count > 0

        if tests_started and ctx.state == ParseState.BEGIN and ctx.remembered_failure:
            # Another assert failed in the same test after a blank line flushed
            # the first one. Once flushed, the new failure replaces that entry.
            flushed = ctx.last_test
            ctx.record = dataclasses.replace(ctx.remembered_failure, message=[])
            ctx.state = ParseState.TEST_START
            self._parse_test_error(line)
            if ctx.state == ParseState.TEST_ERROR:
                ctx.superseded = flushed
                ctx.last_test = None
            else:
                # Line dropped: keep waiting for the next assert or the finish marker.
                ctx.reset_record()
        elif ctx.state == ParseState.TEST_START:
            self._parse_test_error(line)
        elif not tests_started and ctx.state == ParseState.BEGIN:
            self._parse_build_error(line)
        else:
            logger.debug(f"Ignoring error line outside of a test: {line}")

    def _parse_test_error(self, line: str) -> None:
        if is_xctest_log(line):
            return

        located = parse_located_error(line)
        if not located:
            logger.debug(f"Ignoring test error without location: {line}")
            return

        ctx = self.context
        result = ctx.record

        # Only the first error of a test counts as a failure.
        if ctx.remembered_failure is None:
            self.aggregator.count_failure()
            ctx.remembered_failure = dataclasses.replace(result, message=list(result.message))

        ctx.state = ParseState.TEST_ERROR
        result.message = [sanitize(located.message)]
        result.test_result = "failed"
        result.success = False

        # Failure reported in another file (e.g. a test helper): point the test
        # at its own declaration and keep the real site as a diagnostic.
        filename = get_filename(located.filepath)
        if filename != result.filename:
            result.line_number = (
                self.source_locator.find_declaration_line(result.filepath, result.name)
                if result.filepath else None
            )
            # Shares the message list so continuation lines reach both.
            self.aggregator.add_diagnostic(Diagnostic(
                filepath=located.filepath,
                filename=filename,
                line_number=located.line_number,
                message=result.message,
            ))
        else:
            result.line_number = located.line_number

    def _parse_build_error(self, line: str) -> None:
        if is_xctest_log(line):
            return

        ctx = self.context
        located = parse_located_error(line)
        if located:
            ctx.state = ParseState.BUILD_ERROR
            ctx.record = BuildError(
                filepath=located.filepath,
                filename=get_filename(located.filepath),
                line_number=located.line_number,
                column_number=located.column_number,
                message=[located.message],
            )
            return

        sourced = parse_sourced_error(line)
        if sourced:
            ctx.state = ParseState.BUILD_ERROR
            ctx.record = BuildError(source=sourced.source, message=[sourced.message])

    # --- Warnings ---

    def _parse_warning(self, line: str) -> None:
        ctx = self.context
        if ctx.state == ParseState.TEST_START:
            logger.debug(f"Ignoring warning while a test is running: {line}")
            return
        if is_xctest_log(line):
            return

        located = parse_located_warning(line)
        root = self.project_root.rstrip(os.sep) + os.sep
        if not located or not located.filepath.startswith(root):
            return

        ctx.state = ParseState.BUILD_WARNING
        ctx.record = BuildWarning(
            filepath=located.filepath,
            filename=get_filename(located.filepath),
            line_number=located.line_number,
            column_number=located.column_number,
            message=[located.message],
        )
