import os
import json
import fnmatch
import logging
from pathlib import Path
from typing import List, Generator

from xcode_log_parser.domain.ports.file_system import FileSystemPort

logger = logging.getLogger(__name__)


class FileSystemAdapter(FileSystemPort):
    """Concrete implementation of FileSystemPort using standard Python libraries."""

    def walk_directory(self, root_path: str, ignore_patterns: List[str]) -> Generator[Path, None, None]:
        """
        Recursively walks a directory, yielding Path objects for files.
        Skips paths matching any of the ignore patterns (using fnmatch).
        Patterns ending with '/' match directories and everything below them.
        """
        root = Path(root_path).resolve()
        dir_patterns = [p for p in ignore_patterns if p.endswith('/')]
        file_patterns = [p for p in ignore_patterns if not p.endswith('/')]

        for current_dir, dir_names, file_names in os.walk(root):
            current = Path(current_dir)
            # Prune ignored directories in place so os.walk does not descend into them
            dir_names[:] = [
                name for name in sorted(dir_names)
                if not self._is_ignored_dir(current / name, root, dir_patterns)
            ]
            for name in sorted(file_names):
                item = current / name
                relative_path_str = str(item.relative_to(root)).replace(os.sep, '/')  # Normalize slashes for matching
                if any(fnmatch.fnmatch(relative_path_str, p) or fnmatch.fnmatch(name, p) for p in file_patterns):
                    continue
                yield item

    @staticmethod
    def _is_ignored_dir(path: Path, root: Path, dir_patterns: List[str]) -> bool:
        match_path = str(path.relative_to(root)).replace(os.sep, '/') + '/'
        return any(fnmatch.fnmatch(match_path, p) or fnmatch.fnmatch(path.name + '/', p) for p in dir_patterns)

    def read_file(self, file_path: str, errors: str = 'strict') -> str:
        try:
            with open(file_path, 'r', encoding='utf-8', errors=errors) as f:
                return f.read()
        except Exception as e:
            logger.error(f"Error reading file {file_path}: {e}")
            raise

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    # --- JSON Helper Methods ---
    def write_json(self, file_path: str, data: dict):
        """Writes a JSON document, e.g. a parsed report."""
        try:
            path = Path(file_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                # Enums and paths are written as strings
                json.dump(data, f, indent=2, default=str)
        except Exception as e:
            logger.error(f"Error writing JSON file {file_path}: {e}")
            raise

    def read_json(self, file_path: str) -> dict:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            logger.warning(f"JSON file not found: {file_path}")
            return {}
        except Exception as e:
            logger.error(f"Error reading JSON file {file_path}: {e}")
            raise
