# src/xcode_log_parser/domain/models/report.py
"""
Domain models for the structured report produced from xcodebuild output.
"""
import dataclasses
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional


@dataclass
class TestResult:
    """Result of a single XCTest test case."""
    __test__ = False  # not a pytest test class

    class_name: str
    name: str
    target: Optional[str] = None
    filepath: Optional[str] = None
    filename: Optional[str] = None  # file stem, e.g. 'MyTests'
    line_number: Optional[int] = None
    time: Optional[str] = None  # as printed by the tool, e.g. '0.001 seconds'
    test_result: Optional[str] = None  # 'passed' or 'failed'
    success: bool = False
    message: List[str] = field(default_factory=list)

    @property
    def test_id(self) -> str:
        return f"{self.target or ''}/{self.class_name}/{self.name}"


@dataclass
class BuildError:
    """A compiler or build system error, with a file location or a free-form source."""
    message: List[str]
    filepath: Optional[str] = None
    filename: Optional[str] = None
    line_number: Optional[int] = None
    column_number: Optional[int] = None
    source: Optional[str] = None


@dataclass
class BuildWarning:
    """A compiler warning located in one of the project files."""
    message: List[str]
    filepath: Optional[str] = None
    filename: Optional[str] = None
    line_number: Optional[int] = None
    column_number: Optional[int] = None
    source: Optional[str] = None


@dataclass
class Diagnostic:
    """Failure site of a test whose error was reported outside of the test file."""
    filepath: str
    filename: Optional[str]
    line_number: Optional[int]
    message: List[str]


@dataclass(frozen=True)
class Report:
    """Snapshot of a parse run."""
    output: List[str] = field(default_factory=list)
    tests: Dict[str, List[TestResult]] = field(default_factory=dict)
    tests_count: int = 0
    failed_tests_count: int = 0
    build_errors: List[BuildError] = field(default_factory=list)
    build_warnings: List[BuildWarning] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    result_bundle_path: Optional[str] = None

    def all_tests(self) -> List[TestResult]:
        """Returns every test result, grouped by key in insertion order."""
        return [result for results in self.tests.values() for result in results]

    def to_dict(self, include_output: bool = True) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        if not include_output:
            data.pop("output")
        return data
