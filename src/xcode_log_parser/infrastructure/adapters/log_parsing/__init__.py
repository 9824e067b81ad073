# src/xcode_log_parser/infrastructure/adapters/log_parsing/__init__.py
"""
Log parsing package for xcode-log-parser.
This package contains the line classifier and the xcodebuild state machine.
"""

# Classifier
from xcode_log_parser.infrastructure.adapters.log_parsing.line_classifier import (
    Classification,
    FinishedFormat,
    classify_line,
    sanitize,
)

# Parser
from xcode_log_parser.infrastructure.adapters.log_parsing.xcodebuild_log_parser_adapter import (
    XcodebuildLogParserAdapter,
    get_filename,
)

__all__ = [
    # Classifier
    'Classification',
    'FinishedFormat',
    'classify_line',
    'sanitize',

    # Parser
    'XcodebuildLogParserAdapter',
    'get_filename',
]
