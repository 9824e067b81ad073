from abc import ABC, abstractmethod
from typing import Iterable

from xcode_log_parser.domain.models.report import Report


class LogParserPort(ABC):
    """Interface for turning build/test console output into a structured report."""

    @abstractmethod
    def process_line(self, line: str) -> None:
        """Consumes a single line of output. State persists between calls."""
        pass

    @abstractmethod
    def parse_logs(self, lines: Iterable[str]) -> Report:
        """
        Consumes lines and returns a snapshot of the report.

        Args:
            lines: Output lines, without trailing newlines.

        Returns:
            The Report accumulated so far, including lines from earlier calls
            made without an intervening clear().
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Resets all parser state before a new run."""
        pass
