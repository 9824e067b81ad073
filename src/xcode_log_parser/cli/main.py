import logging
import sys
from pathlib import Path
from typing import List, Optional

from xcode_log_parser.cli.commands.argument_parser import parse_arguments
from xcode_log_parser.cli.commands.config_loader import (
    ConfigurationError, ensure_app_directories, load_and_resolve_config
)
from xcode_log_parser.cli.commands.parse_command import handle_parse
from xcode_log_parser.cli.logging_setup import setup_logging

logger = logging.getLogger(__name__)

COMMANDS = {
    "parse": handle_parse,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    project_root = Path(args.project_root).resolve()

    try:
        config = load_and_resolve_config(project_root, args.config)
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.critical(str(e))
        return 1

    # Command line flags win over the file
    if args.log_level:
        config['logging']['level'] = args.log_level
    if getattr(args, 'target_matching', False):
        config['test_search']['target_matching'] = True

    setup_logging(config)
    ensure_app_directories(config)
    logger.debug(f"Running command '{args.command}' with project root {project_root}")

    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
