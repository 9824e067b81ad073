"""
Source locator backed by a scan of the project workspace.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from xcode_log_parser.domain.ports.file_system import FileSystemPort
from xcode_log_parser.domain.ports.source_locator import SourceLocatorPort

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_EXTENSIONS = [".swift"]
DEFAULT_IGNORE_PATTERNS = [".*/", "build/", "DerivedData/", ".build/", "Pods/"]


class WorkspaceSourceLocatorAdapter(SourceLocatorPort):
    """
    Resolves test classes to files by file name, the way Xcode projects are
    usually laid out (one test class per 'ClassName.swift').

    Every lookup is cached, misses included. Call refresh() after files move.
    """

    def __init__(self, file_system: FileSystemPort, config: Dict[str, Any]):
        """
        Initializes the adapter.

        Args:
            file_system: File system access.
            config: The application configuration dictionary. Uses
                'project.root_path' and the 'test_search' section.
        """
        self.fs = file_system
        search_config = config.get('test_search', {})
        self.root_path = config.get('project', {}).get('root_path', '.')
        self.target_matching = search_config.get('target_matching', False)
        self.source_extensions = set(search_config.get('source_extensions', DEFAULT_SOURCE_EXTENSIONS))
        self.ignore_patterns = search_config.get('ignore_patterns', DEFAULT_IGNORE_PATTERNS)
        self.targets_map_file = search_config.get('targets_map_file')
        self.inline_targets: Dict[str, List[str]] = search_config.get('targets', {}) or {}

        self._files_by_class: Optional[Dict[str, List[str]]] = None
        self._targets_map: Optional[Dict[str, List[str]]] = None
        self._file_cache: Dict[str, Optional[str]] = {}
        self._line_cache: Dict[Tuple[str, str], Optional[int]] = {}

    def refresh(self) -> None:
        """Drops every cache; the workspace is rescanned on the next lookup."""
        self._files_by_class = None
        self._targets_map = None
        self._file_cache.clear()
        self._line_cache.clear()

    def find_file_path(self, target: Optional[str], class_name: str) -> Optional[str]:
        key = f"{target or ''}:{class_name}"
        if key in self._file_cache:
            return self._file_cache[key]

        result = None
        for file_path in self._get_files_by_class().get(class_name, []):
            if not target or not self.target_matching or self.find_target_for_file(file_path) == target:
                result = file_path
                break

        if result is None:
            logger.debug(f"Could not find a file for class '{class_name}' (target: {target or '-'})")
        self._file_cache[key] = result
        return result

    def find_declaration_line(self, file_path: str, method_name: str) -> Optional[int]:
        key = (file_path, method_name)
        if key in self._line_cache:
            return self._line_cache[key]

        result = None
        content = ""
        if self.fs.exists(file_path):
            try:
                content = self.fs.read_file(file_path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read {file_path} to find '{method_name}': {e}")

        declaration = f"func {method_name}("
        for line_number, line in enumerate(content.splitlines(), start=1):
            if declaration in line:
                result = line_number
                break

        self._line_cache[key] = result
        return result

    def find_target_for_file(self, file_path: str) -> Optional[str]:
        for target, files in self._get_targets_map().items():
            if file_path in files:
                return target
        return None

    def _get_files_by_class(self) -> Dict[str, List[str]]:
        if self._files_by_class is None:
            self._files_by_class = self._scan_workspace()
        return self._files_by_class

    def _scan_workspace(self) -> Dict[str, List[str]]:
        files_by_class: Dict[str, List[str]] = {}
        root = Path(self.root_path)
        if not self.fs.exists(str(root)):
            logger.warning(f"Project root does not exist: {root}")
            return files_by_class

        count = 0
        for file_path_obj in self.fs.walk_directory(str(root), self.ignore_patterns):
            if file_path_obj.suffix not in self.source_extensions:
                continue
            files_by_class.setdefault(file_path_obj.stem, []).append(str(file_path_obj))
            count += 1

        logger.info(f"Indexed {count} source files under {root}")
        return files_by_class

    def _get_targets_map(self) -> Dict[str, List[str]]:
        if self._targets_map is None:
            targets: Dict[str, List[str]] = {}
            if self.targets_map_file:
                targets.update(self.fs.read_json(self.targets_map_file))
            for target, files in self.inline_targets.items():
                targets.setdefault(target, []).extend(files)
            # Relative entries are relative to the project root
            root = Path(self.root_path)
            self._targets_map = {
                target: [str((root / f).resolve()) for f in files]
                for target, files in targets.items()
            }
            logger.debug(f"Loaded targets map with {len(targets)} targets")
        return self._targets_map
