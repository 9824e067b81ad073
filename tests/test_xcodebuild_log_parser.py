"""Tests for the xcodebuild log parsing state machine."""

import json

PROJECT_ROOT = "/Users/dev/App"
TESTS_FILE = f"{PROJECT_ROOT}/AppTests/MyTests.swift"

STARTED_A = "Test Case '-[AppTests.MyTests testA]' started."
PASSED_A = "Test Case '-[AppTests.MyTests testA]' passed (0.001 seconds)."
FAILED_A = "Test Case '-[AppTests.MyTests testA]' failed (0.002 seconds)."
STARTED_B = "Test Case '-[AppTests.MyTests testB]' started."
PASSED_B = "Test Case '-[AppTests.MyTests testB]' passed (0.003 seconds)."
ASSERT_A = f"{TESTS_FILE}:12: error: -[AppTests.MyTests testA] : XCTAssertTrue failed"
SECOND_ASSERT_A = f"{TESTS_FILE}:14: error: -[AppTests.MyTests testA] : XCTAssertEqual failed: (\"1\") is not equal to (\"2\")"


# --- Build output ---

def test_single_build_error(parser):
    report = parser.parse_logs(["foo.swift:10:5: error: missing return", "", ""])

    assert report.tests_count == 0
    assert len(report.build_errors) == 1
    error = report.build_errors[0]
    assert error.filepath == "foo.swift"
    assert error.filename == "foo"
    assert error.line_number == 10
    assert error.column_number == 5
    assert error.message == ["missing return"]


def test_build_error_collects_continuation_and_caret_lines(parser):
    report = parser.parse_logs([
        "foo.swift:10:5: error: cannot convert value",
        "    let x: Int = \"a\"",
        "                 ^~~",
        "",
    ])

    assert report.build_errors[0].message == [
        "cannot convert value",
        "    let x: Int = \"a\"",
        "                 ^~~",
    ]


def test_duplicate_build_errors_are_recorded_once(parser):
    line = "foo.swift:10:5: error: missing return"

    report = parser.parse_logs([line, "", line, ""])

    assert len(report.build_errors) == 1


def test_build_errors_without_location(parser):
    report = parser.parse_logs([
        "ld: error: symbol(s) not found for architecture arm64",
        "",
        "error: Signing for \"App\" requires a development team.",
        "",
    ])

    assert [(e.source, e.message) for e in report.build_errors] == [
        ("ld", ["symbol(s) not found for architecture arm64"]),
        (None, ["Signing for \"App\" requires a development team."]),
    ]
    assert report.build_errors[0].filepath is None


def test_note_line_closes_open_build_error(parser):
    report = parser.parse_logs([
        "foo.swift:10:5: error: invalid redeclaration of 'x'",
        "note: 'x' previously declared here",
        "unrelated output",
    ])

    assert report.build_errors[0].message == ["invalid redeclaration of 'x'"]


def test_open_record_is_not_flushed_at_end_of_input(parser):
    report = parser.parse_logs(["foo.swift:10:5: error: missing return"])

    assert report.build_errors == []


def test_warnings_outside_project_root_are_dropped(parser):
    report = parser.parse_logs([
        f"{PROJECT_ROOT}/App/View.swift:3:9: warning: variable 'x' was never used",
        "",
        "/Users/dev/Pods/Lib/Lib.swift:1:1: warning: deprecated",
        "",
    ])

    assert len(report.build_warnings) == 1
    warning = report.build_warnings[0]
    assert warning.filename == "View"
    assert (warning.line_number, warning.column_number) == (3, 9)
    assert warning.message == ["variable 'x' was never used"]


def test_result_bundle_path_is_recorded(parser):
    report = parser.parse_logs([
        "Test session results, code coverage, and logs:",
        "    /Users/dev/DerivedData/App/Logs/Test/Test-App.xcresult",
    ])

    assert report.result_bundle_path == "/Users/dev/DerivedData/App/Logs/Test/Test-App.xcresult"


# --- Tests (interactive format) ---

def test_passing_test(parser, notifier):
    report = parser.parse_logs([STARTED_A, PASSED_A])

    assert list(report.tests) == ["MyTests"]
    result = report.tests["MyTests"][0]
    assert result.success is True
    assert result.test_result == "passed"
    assert result.time == "0.001 seconds"
    assert result.message == []
    assert result.filepath == TESTS_FILE
    assert result.target == "AppTests"
    assert report.tests_count == 1
    assert report.failed_tests_count == 0
    assert notifier.events == [("AppTests/MyTests/testA", "passed")]


def test_failing_test_with_one_assertion(parser, notifier):
    report = parser.parse_logs([STARTED_A, ASSERT_A, "", FAILED_A])

    results = report.tests["MyTests"]
    assert len(results) == 1
    result = results[0]
    assert result.success is False
    assert result.test_result == "failed"
    assert result.message == ["XCTAssertTrue failed"]
    assert result.line_number == 12
    assert result.time == "0.002 seconds"
    assert report.failed_tests_count == 1
    assert report.diagnostics == []
    assert notifier.events == [("AppTests/MyTests/testA", "failed")]


def test_failure_in_another_file_records_a_diagnostic(parser):
    report = parser.parse_logs([
        STARTED_A,
        f"{PROJECT_ROOT}/AppTests/Helpers.swift:3: error: -[AppTests.MyTests testA] : helper failed",
        "",
        FAILED_A,
    ])

    result = report.tests["MyTests"][0]
    assert result.line_number == 7
    assert len(report.diagnostics) == 1
    diagnostic = report.diagnostics[0]
    assert diagnostic.filepath == f"{PROJECT_ROOT}/AppTests/Helpers.swift"
    assert diagnostic.filename == "Helpers"
    assert diagnostic.line_number == 3
    assert diagnostic.message == ["helper failed"]


def test_two_failing_asserts_count_once_and_keep_latest_message(parser):
    report = parser.parse_logs([STARTED_A, ASSERT_A, "", SECOND_ASSERT_A, "", FAILED_A])

    results = report.tests["MyTests"]
    assert report.failed_tests_count == 1
    assert len(results) == 1
    assert results[0].message == ["XCTAssertEqual failed: (\"1\") is not equal to (\"2\")"]
    assert results[0].line_number == 14
    assert results[0].time == "0.002 seconds"


def test_failure_message_collects_continuation_lines(parser):
    report = parser.parse_logs([STARTED_A, ASSERT_A, "extra detail", "", FAILED_A])

    assert report.tests["MyTests"][0].message == ["XCTAssertTrue failed", "extra detail"]


def test_failed_finish_without_error_uses_placeholder(parser):
    report = parser.parse_logs([STARTED_A, FAILED_A])

    result = report.tests["MyTests"][0]
    assert result.message == ["Failed"]
    assert result.success is False
    assert report.failed_tests_count == 1


def test_finish_marker_flushes_failure_without_blank_line(parser):
    report = parser.parse_logs([STARTED_A, ASSERT_A, FAILED_A])

    result = report.tests["MyTests"][0]
    assert result.message == ["XCTAssertTrue failed"]
    assert result.time == "0.002 seconds"
    assert report.failed_tests_count == 1


def test_xctest_log_lines_inside_a_test_are_ignored(parser):
    report = parser.parse_logs([
        STARTED_A,
        "2024-01-01 10:00:00.000 xctest[4821:97310] error: simulator hiccup",
        PASSED_A,
    ])

    assert report.tests["MyTests"][0].success is True
    assert report.failed_tests_count == 0


def test_warning_while_test_runs_is_ignored(parser):
    report = parser.parse_logs([
        STARTED_A,
        f"{PROJECT_ROOT}/AppTests/MyTests.swift:9:5: warning: will never be executed",
        "",
        PASSED_A,
    ])

    assert report.build_warnings == []
    assert report.tests["MyTests"][0].success is True


def test_error_lines_after_tests_started_are_not_build_errors(parser):
    report = parser.parse_logs([STARTED_A, PASSED_A, "foo.swift:1:1: error: late", ""])

    assert report.build_errors == []


def test_unknown_class_leaves_location_empty(parser):
    report = parser.parse_logs([
        "Test Case '-[AppTests.OtherTests testX]' started.",
        "Test Case '-[AppTests.OtherTests testX]' passed (0.001 seconds).",
    ])

    result = report.tests["OtherTests"][0]
    assert result.filepath is None
    assert result.filename is None


def test_several_tests_are_grouped_by_class(parser):
    report = parser.parse_logs([STARTED_A, ASSERT_A, "", FAILED_A, STARTED_B, PASSED_B])

    assert [r.name for r in report.tests["MyTests"]] == ["testA", "testB"]
    assert report.tests_count == 2
    assert report.failed_tests_count == 1


def test_target_matching_groups_by_target_and_class(make_parser, locator):
    parser = make_parser(target_matching=True)

    report = parser.parse_logs([STARTED_A, PASSED_A])

    assert list(report.tests) == ["AppTests:MyTests"]
    assert locator.file_lookups == [("AppTests", "MyTests")]


def test_without_target_matching_lookups_ignore_target(parser, locator):
    parser.parse_logs([STARTED_A, PASSED_A])

    assert locator.file_lookups == [(None, "MyTests")]


# --- Tests (autogenerated format) ---

def test_autogenerated_passed_test(parser):
    report = parser.parse_logs(["Test case 'MyTests.testB()' passed on 'My Mac - xctest (12345)' (0.004 seconds)"])

    result = report.tests["MyTests"][0]
    assert result.success is True
    assert result.target == "AppTests"
    assert result.line_number == 15
    assert result.time == "0.004 seconds"
    assert report.tests_count == 1
    assert report.failed_tests_count == 0


def test_autogenerated_failed_test(parser, notifier):
    report = parser.parse_logs(["Test case 'MyTests.testA()' failed on 'My Mac - xctest (12345)' (0.002 seconds)"])

    result = report.tests["MyTests"][0]
    assert result.success is False
    assert result.message == ["Failed"]
    assert result.line_number == 7
    assert report.failed_tests_count == 1
    assert notifier.events == [("AppTests/MyTests/testA", "failed")]


# --- Report and lifecycle ---

def test_output_keeps_every_line_in_order(parser):
    lines = [STARTED_A, ASSERT_A, "", FAILED_A, "** TEST FAILED **"]

    report = parser.parse_logs(lines)

    assert report.output == lines


def test_failed_count_never_exceeds_tests_count(parser):
    report = parser.parse_logs([
        STARTED_A, ASSERT_A, "", SECOND_ASSERT_A, "", FAILED_A,
        STARTED_B, PASSED_B,
        "Test case 'MyTests.testA()' failed on 'My Mac - xctest (1)' (0.002 seconds)",
    ])

    assert report.failed_tests_count <= report.tests_count
    assert sum(len(results) for results in report.tests.values()) <= report.tests_count


def test_report_serializes_to_json(parser):
    report = parser.parse_logs([STARTED_A, ASSERT_A, "", FAILED_A])

    data = json.loads(json.dumps(report.to_dict()))

    assert data == report.to_dict()
    assert data["tests"]["MyTests"][0]["message"] == ["XCTAssertTrue failed"]
    assert "output" not in report.to_dict(include_output=False)


def test_incremental_feeding_matches_batch_parse(parser, make_parser):
    lines = [STARTED_A, ASSERT_A, "", FAILED_A, STARTED_B, PASSED_B]
    batch = make_parser().parse_logs(lines)

    for line in lines:
        parser.process_line(line)

    assert parser.parse_logs([]) == batch


def test_clear_resets_the_run(parser):
    parser.parse_logs([STARTED_A, ASSERT_A, "", FAILED_A, "foo.swift:1:1: error: x"])

    parser.clear()
    report = parser.parse_logs([])

    assert report.tests == {}
    assert report.output == []
    assert (report.tests_count, report.failed_tests_count) == (0, 0)
    assert report.build_errors == []


def test_returned_report_is_independent_of_later_lines(parser):
    first = parser.parse_logs([STARTED_A, PASSED_A])

    parser.parse_logs([STARTED_B, PASSED_B])

    assert first.tests_count == 1
    assert len(first.tests["MyTests"]) == 1


def test_dropped_error_between_asserts_keeps_one_entry(parser, notifier):
    report = parser.parse_logs([
        STARTED_A, ASSERT_A, "",
        "error: -[AppTests.MyTests testA] : no location",
        "2024-01-01 10:00:00.000 xctest[4821:97310] error: simulator hiccup",
        SECOND_ASSERT_A, "",
        FAILED_A,
    ])

    results = report.tests["MyTests"]
    assert len(results) == 1
    assert results[0].line_number == 14
    assert results[0].time == "0.002 seconds"
    assert report.failed_tests_count == 1
    assert notifier.events == [("AppTests/MyTests/testA", "failed")]


def test_dropped_error_before_finish_keeps_first_failure(parser):
    report = parser.parse_logs([STARTED_A, ASSERT_A, "", "error: -[AppTests.MyTests testA] : no location", FAILED_A])

    results = report.tests["MyTests"]
    assert [r.message for r in results] == [["XCTAssertTrue failed"]]
    assert results[0].time == "0.002 seconds"
    assert report.failed_tests_count == 1


def test_two_failing_asserts_notify_once(parser, notifier):
    parser.parse_logs([STARTED_A, ASSERT_A, "", SECOND_ASSERT_A, "", FAILED_A])

    assert notifier.events == [("AppTests/MyTests/testA", "failed")]


def test_warnings_from_sibling_directory_sharing_root_prefix_are_dropped(parser):
    report = parser.parse_logs([
        "/Users/dev/AppKit/Sources/Kit.swift:1:1: warning: deprecated",
        "",
    ])

    assert report.build_warnings == []
