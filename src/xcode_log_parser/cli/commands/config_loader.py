import copy
import yaml
from pathlib import Path
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/application.yml"

DEFAULT_CONFIG: Dict[str, Any] = {
    'project': {
        'root_path': '.',
    },
    'test_search': {
        'target_matching': False,
        'source_extensions': ['.swift'],
        'ignore_patterns': ['.*/', 'build/', 'DerivedData/', '.build/', 'Pods/'],
        'targets_map_file': None,
        'targets': {},
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'log_file': None,
    },
    'ui': {
        'enhanced_logging': True,
    },
    'output': {
        'report_file': None,
        'include_output': True,
        'log_test_status': True,
    },
}


class ConfigurationError(Exception):
    """Raised when the configuration file cannot be loaded."""
    pass


def merge_config(base: dict, override: dict) -> dict:
    """Recursively merges `override` into a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_and_resolve_config(project_root: Path, config_path: Optional[str] = None) -> dict:
    """
    Loads YAML configuration on top of the defaults and resolves relative paths.

    Args:
        project_root: Directory relative paths are resolved against.
        config_path: Path of the YAML file, relative to project_root unless
            absolute. When omitted, the default file is used if present.

    Raises:
        ConfigurationError: If an explicitly requested file is missing, or a
            file is empty or not a YAML mapping.
    """
    explicit = config_path is not None
    absolute_config_path = project_root / (config_path or DEFAULT_CONFIG_PATH)
    logger.debug(f"Attempting to load configuration from: {absolute_config_path}")

    if not absolute_config_path.exists():
        if explicit:
            raise ConfigurationError(f"Configuration file not found at {absolute_config_path}")
        logger.debug("No configuration file found, using defaults.")
        config_data = copy.deepcopy(DEFAULT_CONFIG)
    else:
        try:
            with open(absolute_config_path, 'r') as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as err:
            raise ConfigurationError(f"Error loading configuration from {absolute_config_path}: {err}") from err
        if not loaded or not isinstance(loaded, dict):
            raise ConfigurationError("Configuration file is empty or invalid.")
        config_data = merge_config(DEFAULT_CONFIG, loaded)
        logger.info(f"Configuration loaded successfully from {absolute_config_path}")

    # Resolve paths relative to project_root
    resolve_path(config_data, project_root, ['project', 'root_path'], '.')
    resolve_path(config_data, project_root, ['test_search', 'targets_map_file'])
    resolve_path(config_data, project_root, ['logging', 'log_file'])
    resolve_path(config_data, project_root, ['output', 'report_file'])
    return config_data


def resolve_path(config: dict, root: Path, keys: list, default: Optional[str] = None):
    """Helper to get, resolve, and update a path in the config dict."""
    current = config
    for key in keys[:-1]:
        current = current.setdefault(key, {})
        if not isinstance(current, dict):
            logger.warning(f"Config path {'->'.join(keys)} structure invalid. Skipping.")
            return

    last_key = keys[-1]
    relative_path = current.get(last_key) or default

    if relative_path is not None:
        resolved_path = str((root / relative_path).resolve())
        current[last_key] = resolved_path
        logger.debug(f"Resolved config path '{'.'.join(keys)}': {relative_path} -> {resolved_path}")


def ensure_app_directories(config: dict):
    """Creates parent directories of the configured output files."""
    paths_to_ensure = [
        config.get('logging', {}).get('log_file'),
        config.get('output', {}).get('report_file'),
    ]
    for file_path in paths_to_ensure:
        if file_path:
            target_dir = Path(file_path).parent
            try:
                target_dir.mkdir(parents=True, exist_ok=True)
                logger.debug(f"Ensured directory exists: {target_dir}")
            except OSError as e:
                logger.error(f"Failed to create directory {target_dir}: {e}", exc_info=True)
