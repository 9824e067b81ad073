# src/xcode_log_parser/domain/models/parse_state.py
"""
State carried by the xcodebuild log parser between lines.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from xcode_log_parser.domain.models.report import TestResult, BuildError, BuildWarning


class ParseState(Enum):
    """States of the log parsing state machine."""
    BEGIN = "BEGIN"                  # idle, nothing open
    TEST_START = "TEST_START"        # a test is running, no failure yet
    TEST_ERROR = "TEST_ERROR"        # collecting a failing test's message
    BUILD_ERROR = "BUILD_ERROR"      # collecting a build error's message
    BUILD_WARNING = "BUILD_WARNING"  # collecting a build warning's message


OpenRecord = Union[TestResult, BuildError, BuildWarning]


@dataclass
class ParseContext:
    """
    Mutable state of a single parse run.

    Attributes:
        state: Current state of the machine.
        record: Record being built. A TestResult in TEST_START/TEST_ERROR,
            a BuildError in BUILD_ERROR, a BuildWarning in BUILD_WARNING.
        last_test: Most recently flushed test, updated in place by an
            interactive finish marker. Cleared by that marker or a new test start.
        remembered_failure: Copy of the running test taken on its first error,
            restored when another error arrives after the blank line that
            flushed the first one. Cleared by any finish marker or a new test start.
        superseded: Stored entry of the running test that the restored failure
            replaces when it is flushed.
    """
    state: ParseState = ParseState.BEGIN
    record: Optional[OpenRecord] = None
    last_test: Optional[TestResult] = None
    remembered_failure: Optional[TestResult] = None
    superseded: Optional[TestResult] = None

    def reset_record(self) -> None:
        self.state = ParseState.BEGIN
        self.record = None

    @property
    def has_open_message(self) -> bool:
        return self.state in (ParseState.TEST_ERROR, ParseState.BUILD_ERROR, ParseState.BUILD_WARNING)
