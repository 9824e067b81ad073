"""
Accumulates completed records of a parse run into a Report.
"""
import copy
import logging
from typing import Dict, List, Optional, Sequence, Union

from xcode_log_parser.domain.models.report import (
    Report, TestResult, BuildError, BuildWarning, Diagnostic
)
from xcode_log_parser.domain.ports.test_status_notifier import TestStatusNotifierPort

logger = logging.getLogger(__name__)

Located = Union[BuildError, BuildWarning, Diagnostic]


def get_test_key(target: Optional[str], class_name: Optional[str], target_matching: bool = False) -> Optional[str]:
    """
    Builds the key test results are grouped under.

    Returns 'Target:Class' when target matching is enabled and the target is
    known, the bare class name otherwise, and None without a class.
    """
    if not class_name:
        return None
    if target_matching and target:
        return f"{target}:{class_name}"
    return class_name


def _is_duplicate(items: Sequence[Located], candidate: Located) -> bool:
    first_line = candidate.message[0] if candidate.message else None
    for item in items:
        if (
            item.filepath == candidate.filepath
            and item.line_number == candidate.line_number
            and (item.message[0] if item.message else None) == first_line
        ):
            return True
    return False


class ReportAggregator:
    """
    Owns the collections and totals of a parse run.

    The status notifier is told about every stored test; it is a side channel
    and does not affect the returned Report.
    """

    def __init__(self, status_notifier: Optional[TestStatusNotifierPort] = None, target_matching: bool = False):
        self.status_notifier = status_notifier
        self.target_matching = target_matching
        self.clear()

    def clear(self) -> None:
        self.output: List[str] = []
        self.tests: Dict[str, List[TestResult]] = {}
        self.tests_count = 0
        self.failed_tests_count = 0
        self.build_errors: List[BuildError] = []
        self.build_warnings: List[BuildWarning] = []
        self.diagnostics: List[Diagnostic] = []
        self.result_bundle_path: Optional[str] = None

    def add_output(self, line: str) -> None:
        self.output.append(line)

    def count_test(self) -> None:
        self.tests_count += 1

    def count_failure(self) -> None:
        self.failed_tests_count += 1

    def set_result_bundle_path(self, path: str) -> None:
        logger.debug(f"Result bundle detected: {path}")
        self.result_bundle_path = path

    def add_test(self, result: TestResult, replaces: Optional[TestResult] = None) -> None:
        """
        Stores a completed test under its key and notifies the status observer.

        Args:
            result: The completed test.
            replaces: A previously stored result (matched by identity) that
                `result` takes the place of. Appended when not found.
                A replacement does not notify again: the observer hears
                about each test once.
        """
        replaced = False
        key = get_test_key(result.target, result.class_name, self.target_matching)
        if key:
            results = self.tests.setdefault(key, [])
            index = next((i for i, item in enumerate(results) if item is replaces), None)
            if replaces is not None and index is not None:
                results[index] = result
                replaced = True
            else:
                results.append(result)

        status = "passed" if result.success else "failed"
        logger.debug(f"Test {result.test_id} {status}")
        if self.status_notifier and not replaced:
            self.status_notifier.on_test_status_changed(result.test_id, status)

    def add_build_error(self, error: BuildError) -> bool:
        return self._append_unique(self.build_errors, error, "build error")

    def add_build_warning(self, warning: BuildWarning) -> bool:
        return self._append_unique(self.build_warnings, warning, "build warning")

    def add_diagnostic(self, diagnostic: Diagnostic) -> bool:
        return self._append_unique(self.diagnostics, diagnostic, "diagnostic")

    def _append_unique(self, items: List, candidate: Located, kind: str) -> bool:
        if _is_duplicate(items, candidate):
            logger.debug(f"Skipping duplicate {kind} at {candidate.filepath}:{candidate.line_number}")
            return False
        items.append(candidate)
        return True

    def snapshot(self) -> Report:
        """Returns an independent copy of the current state."""
        return Report(
            output=list(self.output),
            tests=copy.deepcopy(self.tests),
            tests_count=self.tests_count,
            failed_tests_count=self.failed_tests_count,
            build_errors=copy.deepcopy(self.build_errors),
            build_warnings=copy.deepcopy(self.build_warnings),
            diagnostics=copy.deepcopy(self.diagnostics),
            result_bundle_path=self.result_bundle_path,
        )
