"""Shared fixtures: stub collaborators for the log parser."""

import pytest

from xcode_log_parser.domain.ports.source_locator import SourceLocatorPort
from xcode_log_parser.domain.ports.test_status_notifier import TestStatusNotifierPort
from xcode_log_parser.infrastructure.adapters.log_parsing.xcodebuild_log_parser_adapter import (
    XcodebuildLogParserAdapter,
)

PROJECT_ROOT = "/Users/dev/App"
TESTS_FILE = f"{PROJECT_ROOT}/AppTests/MyTests.swift"


class StubSourceLocator(SourceLocatorPort):
    """Answers lookups from plain dictionaries and records the calls."""

    def __init__(self):
        self.files = {"MyTests": TESTS_FILE}
        self.lines = {(TESTS_FILE, "testA"): 7, (TESTS_FILE, "testB"): 15}
        self.targets = {TESTS_FILE: "AppTests"}
        self.file_lookups = []

    def find_file_path(self, target, class_name):
        self.file_lookups.append((target, class_name))
        return self.files.get(class_name)

    def find_declaration_line(self, file_path, method_name):
        return self.lines.get((file_path, method_name))

    def find_target_for_file(self, file_path):
        return self.targets.get(file_path)


class RecordingNotifier(TestStatusNotifierPort):
    """Keeps every status notification in order."""

    def __init__(self):
        self.events = []

    def on_test_status_changed(self, test_id, status):
        self.events.append((test_id, status))


@pytest.fixture
def locator():
    return StubSourceLocator()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def parser(locator, notifier):
    return XcodebuildLogParserAdapter(locator, notifier, project_root=PROJECT_ROOT)


@pytest.fixture
def make_parser(locator, notifier):
    """Factory for parsers with non-default options."""

    def _make(**kwargs):
        kwargs.setdefault("project_root", PROJECT_ROOT)
        return XcodebuildLogParserAdapter(locator, notifier, **kwargs)

    return _make
