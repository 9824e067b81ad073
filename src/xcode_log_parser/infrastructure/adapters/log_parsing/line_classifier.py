"""
Pattern library and line classifier for xcodebuild console output.

Each line is matched against an ordered table of (predicate, extractor)
pairs; the first predicate that matches decides the tag. Extractors never
fail: fields they cannot recover are left as None.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

# Source file reference, e.g. '/Users/me/App/Sources/View.swift'
SOURCE_FILE_PATTERN = r"[^:]+\.[A-Za-z0-9_+]+"

# Per-process log marker printed by XCTest itself, e.g. ' xctest[4821:97310]'
XCTEST_LOG_REGEX = re.compile(r"\s+\w+\[\d+:\d+\]")

TEST_STARTED_REGEX = re.compile(r"^Test Case.*started\.")
TEST_STARTED_DETAILS_REGEX = re.compile(r"^Test Case .*-\[(?P<target>\w+)\.(?P<class_name>\w+) (?P<name>\S+)\]")

TEST_FINISHED_REGEX = re.compile(r"^Test [Cc]ase.*(?:passed|failed)")
INTERACTIVE_FINISHED_REGEX = re.compile(r"^Test Case .*-\[")
INTERACTIVE_FINISHED_DETAILS_REGEX = re.compile(
    r"^Test Case .*-\[\w+\.\w+ \S+\]. (?P<result>\w+) \((?P<time>.*)\)\."
)
AUTOGENERATED_FINISHED_DETAILS_REGEX = re.compile(
    r"^Test case '(?P<class_name>\w+)\.(?P<name>\S+)\(.*' (?P<result>\w+) .* \((?P<time>[^)]*)\)$"
)

ERROR_MARKER = "error:"
WARNING_MARKER = "warning:"

LOCATED_ERROR_REGEX = re.compile(
    rf"(?P<filepath>{SOURCE_FILE_PATTERN}):(?P<line>\d+):(?P<column>\d*):? \w*\s*error: (?P<message>.*)"
)
SOURCED_ERROR_REGEX = re.compile(r"(?P<source>.*): \w*\s*error: (?P<message>.*)")
BARE_ERROR_REGEX = re.compile(r"error: (?P<message>.*)")
LOCATED_WARNING_REGEX = re.compile(
    rf"(?P<filepath>{SOURCE_FILE_PATTERN}):(?P<line>\d+):(?P<column>\d*):? \w*\s*warning: (?P<message>.*)"
)

ANNOTATION_REGEX = re.compile(r"^[ \t]*[~^][ \t~^]*$")
BLANK_REGEX = re.compile(r"^\s*$")
NOTE_OR_LINT_REGEX = re.compile(r"^(?:Linting|note:)")
RESULT_BUNDLE_REGEX = re.compile(r"\.xcresult$")
RESULT_BUNDLE_PATH_REGEX = re.compile(r"^\s*(?P<path>.*[^./]+\.xcresult)$")

SANITIZE_REGEX = re.compile(r"-\[\w+\.\w+ \S+\] : (?P<message>.*)")


class FinishedFormat(Enum):
    """Wire formats of a test finished line."""
    INTERACTIVE = "interactive"        # Test Case '-[Target.Class test]' passed (0.001 seconds).
    AUTOGENERATED = "autogenerated"    # Test case 'Class.test()' passed on 'Mac' (0.001 seconds)


@dataclass(frozen=True)
class StartedTest:
    line: str
    target: Optional[str] = None
    class_name: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class FinishedTest:
    line: str
    format: FinishedFormat
    result: Optional[str] = None
    time: Optional[str] = None
    class_name: Optional[str] = None  # autogenerated format only
    name: Optional[str] = None        # autogenerated format only


@dataclass(frozen=True)
class ErrorLine:
    line: str


@dataclass(frozen=True)
class WarningLine:
    line: str


@dataclass(frozen=True)
class Annotation:
    line: str


@dataclass(frozen=True)
class Blank:
    line: str


@dataclass(frozen=True)
class NoteOrLint:
    line: str


@dataclass(frozen=True)
class ResultBundlePath:
    line: str
    path: Optional[str] = None


@dataclass(frozen=True)
class Plain:
    line: str


Classification = Union[
    StartedTest, FinishedTest, ErrorLine, WarningLine, Annotation, Blank, NoteOrLint, ResultBundlePath, Plain
]


@dataclass(frozen=True)
class LocatedMessage:
    """An error or warning that points at a file."""
    filepath: str
    line_number: int
    column_number: int
    message: str


@dataclass(frozen=True)
class SourcedMessage:
    """An error without a file location, optionally labelled with its source."""
    message: str
    source: Optional[str] = None


def _extract_started(line: str) -> StartedTest:
    match = TEST_STARTED_DETAILS_REGEX.match(line)
    if not match:
        return StartedTest(line)
    return StartedTest(line, **match.groupdict())


def _extract_finished(line: str) -> FinishedTest:
    if INTERACTIVE_FINISHED_REGEX.match(line):
        match = INTERACTIVE_FINISHED_DETAILS_REGEX.match(line)
        if not match:
            return FinishedTest(line, FinishedFormat.INTERACTIVE)
        return FinishedTest(line, FinishedFormat.INTERACTIVE, result=match.group("result"), time=match.group("time"))

    match = AUTOGENERATED_FINISHED_DETAILS_REGEX.match(line)
    if not match:
        return FinishedTest(line, FinishedFormat.AUTOGENERATED)
    return FinishedTest(line, FinishedFormat.AUTOGENERATED, **match.groupdict())


def _extract_result_bundle(line: str) -> ResultBundlePath:
    match = RESULT_BUNDLE_PATH_REGEX.match(line)
    return ResultBundlePath(line, path=match.group("path") if match else None)


# Order matters: the first matching predicate wins.
CLASSIFIERS: List[Tuple[Callable[[str], bool], Callable[[str], Classification]]] = [
    (lambda line: bool(TEST_STARTED_REGEX.match(line)), _extract_started),
    (lambda line: bool(TEST_FINISHED_REGEX.match(line)), _extract_finished),
    (lambda line: ERROR_MARKER in line, ErrorLine),
    (lambda line: WARNING_MARKER in line, WarningLine),
    (lambda line: bool(ANNOTATION_REGEX.match(line)), Annotation),
    (lambda line: bool(BLANK_REGEX.match(line)), Blank),
    (lambda line: bool(NOTE_OR_LINT_REGEX.match(line)), NoteOrLint),
    (lambda line: bool(RESULT_BUNDLE_REGEX.search(line)), _extract_result_bundle),
]


def classify_line(line: str) -> Classification:
    """Classifies one line of output. Pure and stateless."""
    for predicate, extractor in CLASSIFIERS:
        if predicate(line):
            return extractor(line)
    return Plain(line)


def is_xctest_log(line: str) -> bool:
    """True for XCTest's own annotations, which contain 'error:' but are not user errors."""
    return bool(XCTEST_LOG_REGEX.search(line))


def _match_located(pattern: re.Pattern, line: str) -> Optional[LocatedMessage]:
    match = pattern.search(line)
    if not match:
        return None
    column = match.group("column")
    return LocatedMessage(
        filepath=match.group("filepath"),
        line_number=int(match.group("line")),
        column_number=int(column) if column else 0,
        message=match.group("message"),
    )


def parse_located_error(line: str) -> Optional[LocatedMessage]:
    """Parses 'path:line:col: error: message'. The column is optional."""
    return _match_located(LOCATED_ERROR_REGEX, line)


def parse_located_warning(line: str) -> Optional[LocatedMessage]:
    """Parses 'path:line:col: warning: message'. The column is optional."""
    return _match_located(LOCATED_WARNING_REGEX, line)


def parse_sourced_error(line: str) -> Optional[SourcedMessage]:
    """Parses 'label: error: message', falling back to a bare 'error: message'."""
    match = SOURCED_ERROR_REGEX.search(line)
    if match:
        return SourcedMessage(message=match.group("message"), source=match.group("source"))

    match = BARE_ERROR_REGEX.search(line)
    if match:
        return SourcedMessage(message=match.group("message"))
    return None


def sanitize(message: str) -> str:
    """Strips the '-[Module.Class testName] : ' prefix XCTest puts in front of assertion messages."""
    match = SANITIZE_REGEX.search(message)
    return match.group("message") if match else message
