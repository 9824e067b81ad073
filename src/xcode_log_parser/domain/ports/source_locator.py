from abc import ABC, abstractmethod
from typing import Optional


class SourceLocatorPort(ABC):
    """Interface for resolving test classes and methods to source locations."""

    @abstractmethod
    def find_file_path(self, target: Optional[str], class_name: str) -> Optional[str]:
        """
        Finds the file declaring a test class.

        Args:
            target: Target name reported by the test runner, or None when unknown.
            class_name: Name of the test class.

        Returns:
            The file path, or None if the class could not be located.
        """
        pass

    @abstractmethod
    def find_declaration_line(self, file_path: str, method_name: str) -> Optional[int]:
        """Returns the 1-based line declaring `method_name` in `file_path`, or None."""
        pass

    @abstractmethod
    def find_target_for_file(self, file_path: str) -> Optional[str]:
        """Returns the name of the target owning `file_path`, or None."""
        pass
