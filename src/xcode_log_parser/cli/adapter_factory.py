import logging
from typing import Dict, Any, Optional

from rich.console import Console

# Import necessary adapters
from xcode_log_parser.infrastructure.adapters.file_system_adapter import FileSystemAdapter
from xcode_log_parser.infrastructure.adapters.log_parsing.xcodebuild_log_parser_adapter import XcodebuildLogParserAdapter
from xcode_log_parser.infrastructure.adapters.notifications.status_notifier_adapters import (
    LoggingTestStatusNotifier, NullTestStatusNotifier
)
from xcode_log_parser.infrastructure.adapters.source_locator.workspace_source_locator_adapter import (
    WorkspaceSourceLocatorAdapter
)
from xcode_log_parser.infrastructure.adapters.ui.rich_ui_adapter import RichUIAdapter, THEME

# Import necessary ports (for type hinting)
from xcode_log_parser.domain.ports.file_system import FileSystemPort
from xcode_log_parser.domain.ports.log_parser import LogParserPort
from xcode_log_parser.domain.ports.source_locator import SourceLocatorPort
from xcode_log_parser.domain.ports.test_status_notifier import TestStatusNotifierPort
from xcode_log_parser.domain.ports.ui_service import UIServicePort

logger = logging.getLogger(__name__)


def create_file_system_adapter() -> FileSystemPort:
    logger.debug("Creating FileSystemAdapter")
    return FileSystemAdapter()


def create_source_locator(config: Dict[str, Any], file_system: Optional[FileSystemPort] = None) -> SourceLocatorPort:
    logger.debug("Creating WorkspaceSourceLocatorAdapter")
    return WorkspaceSourceLocatorAdapter(file_system or create_file_system_adapter(), config)


def create_status_notifier(config: Dict[str, Any]) -> TestStatusNotifierPort:
    if config.get('output', {}).get('log_test_status', True):
        return LoggingTestStatusNotifier()
    return NullTestStatusNotifier()


def create_log_parser(
    config: Dict[str, Any],
    source_locator: Optional[SourceLocatorPort] = None,
    status_notifier: Optional[TestStatusNotifierPort] = None,
) -> LogParserPort:
    """Creates the xcodebuild log parser with collaborators built from the config."""
    logger.debug("Creating XcodebuildLogParserAdapter")
    return XcodebuildLogParserAdapter(
        source_locator=source_locator or create_source_locator(config),
        status_notifier=status_notifier or create_status_notifier(config),
        project_root=config.get('project', {}).get('root_path'),
        target_matching=config.get('test_search', {}).get('target_matching', False),
    )


def create_ui_service(config: Dict[str, Any], stderr: bool = False) -> UIServicePort:
    """Creates the console UI. Use stderr when stdout carries the report."""
    logger.debug("Creating RichUIAdapter")
    return RichUIAdapter(Console(theme=THEME, stderr=stderr))
