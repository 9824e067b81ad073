from abc import ABC, abstractmethod
from typing import List, Generator
from pathlib import Path


class FileSystemPort(ABC):
    """Interface for interacting with the file system."""

    @abstractmethod
    def walk_directory(self, root_path: str, ignore_patterns: List[str]) -> Generator[Path, None, None]:
        """
        Recursively walks a directory, yielding Path objects for files.
        Skips paths matching the ignore patterns.
        """
        pass

    @abstractmethod
    def read_file(self, file_path: str, errors: str = "strict") -> str:
        """Reads a UTF-8 text file. `errors` is passed to the decoder, e.g. "replace"."""
        pass

    @abstractmethod
    def read_json(self, file_path: str) -> dict:
        """Reads a JSON object from a file. Returns {} if the file does not exist."""
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Checks if a file or directory exists."""
        pass

    @abstractmethod
    def write_json(self, file_path: str, data: dict):
        """Writes data as an indented JSON document."""
        pass
