"""Main entry point for gc-summary."""

import sys

from .config.cli_config import CLIConfigManager
from .core.logging import setup_logging, get_logger
from .core.application import Application


def main() -> int:
    """Main entry point for the CLI."""
    cli_manager = CLIConfigManager()
    args = cli_manager.parse_args()

    # Reconfigured from the loaded config once env and YAML are known
    setup_logging(level=args.log_level or "INFO", format_type=args.log_format or "standard")
    logger = get_logger(__name__)

    try:
        logger.info("Starting gc-summary")
        return Application().run(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
