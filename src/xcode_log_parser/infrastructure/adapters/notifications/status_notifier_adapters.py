"""
Test status notifier implementations.
"""
import logging
from typing import Dict, List, Tuple

from xcode_log_parser.domain.ports.test_status_notifier import TestStatusNotifierPort

logger = logging.getLogger(__name__)


class NullTestStatusNotifier(TestStatusNotifierPort):
    """Discards every notification."""

    def on_test_status_changed(self, test_id: str, status: str) -> None:
        pass


class LoggingTestStatusNotifier(TestStatusNotifierPort):
    """Logs status changes and keeps the latest status per test."""

    def __init__(self):
        self.statuses: Dict[str, str] = {}
        self.events: List[Tuple[str, str]] = []

    def on_test_status_changed(self, test_id: str, status: str) -> None:
        self.statuses[test_id] = status
        self.events.append((test_id, status))
        if status == "failed":
            logger.warning(f"✗ {test_id}")
        else:
            logger.info(f"✓ {test_id}")
