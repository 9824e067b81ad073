import logging
import sys
from typing import Dict, Any

import colorama

from xcode_log_parser.infrastructure.adapters.ui.rich_ui_adapter import RichLoggingHandler

LEVEL_COLORS = {
    logging.CRITICAL: colorama.Fore.RED + colorama.Style.BRIGHT,
    logging.ERROR: colorama.Fore.RED,
    logging.WARNING: colorama.Fore.YELLOW,
    logging.INFO: colorama.Fore.CYAN,
}


class ColoramaFormatter(logging.Formatter):
    """Formatter coloring the level name with colorama."""

    def format(self, record: logging.LogRecord) -> str:
        color = next((c for level, c in LEVEL_COLORS.items() if record.levelno >= level), "")
        if not color:
            return super().format(record)

        original = record.levelname
        record.levelname = f"{color}{original}{colorama.Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(config: Dict[str, Any]):
    """Configures logging based on the application configuration."""
    log_config = config.get('logging', {})
    level_name = (log_config.get('level') or 'INFO').upper()
    level = getattr(logging, level_name, logging.INFO)
    log_format = log_config.get('format') or '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    log_file = log_config.get('log_file')  # Path is already resolved

    enhanced_logging = config.get('ui', {}).get('enhanced_logging', True)

    if enhanced_logging:
        console_handler = RichLoggingHandler(show_time=True, show_level=True, show_path=False)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        colorama.just_fix_windows_console()
        # stderr keeps stdout free for the JSON report
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ColoramaFormatter(log_format))

    handlers = [console_handler]
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(log_format))
            handlers.append(file_handler)
        except OSError as e:
            print(f"Warning: Could not configure file logging to {log_file}: {e}", file=sys.stderr)

    # Use force=True to allow reconfiguration if called multiple times (e.g., in tests)
    logging.basicConfig(level=level, handlers=handlers, force=True)

    logging.getLogger(__name__).debug(f"Logging configured. Level: {level_name}, File: {log_file or 'None'}")
