"""Main application logic for gc-summary."""

import argparse

from .factory import ComponentFactory
from .logging import get_logger, setup_logging

logger = get_logger(__name__)


class Application:
    """Main application class that dispatches CLI commands."""

    def _setup_logging(self, config) -> None:
        """Reconfigure logging from the merged config, with file output if configured."""
        setup_logging(
            level=config.log_level,
            format_type=config.log_format,
            log_file=config.log_file,
            max_file_size_mb=config.log_max_file_size_mb,
            backup_count=config.log_backup_count
        )

    def load_config(self, args: argparse.Namespace):
        from ..config import ConfigLoader
        from ..config.cli_config import CLIConfigManager

        cli_config = CLIConfigManager().args_to_config_dict(args)
        return ConfigLoader().load_config(
            config_file=getattr(args, 'config', None),
            cli_args=cli_config
        )

    def run(self, args: argparse.Namespace) -> int:
        """Run the application with parsed arguments.

        Args:
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        if args.command not in ("run", "serve"):
            logger.error(f"Unknown command: {args.command}")
            return 1

        try:
            config = self.load_config(args)
        except (ValueError, TypeError) as e:
            logger.error(f"Configuration error: {e}")
            return 1

        self._setup_logging(config)

        if args.command == "run":
            return self.run_digest_command(config, dry_run=getattr(args, 'dry_run', False))
        return self.run_serve_command(config)

    def run_digest_command(self, config, dry_run: bool = False) -> int:
        """Run one digest pass and deliver it.

        Args:
            config: Configuration object
            dry_run: Print the digest instead of delivering it

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        config.log_config()

        sink = None if dry_run else ComponentFactory.create_sink(config)
        coordinator = ComponentFactory.create_coordinator(config, sink=sink)
        try:
            result = coordinator.run()
        finally:
            coordinator.source.close()

        if not result.success:
            logger.error(f"Digest run failed: {result.error}")
            return 1

        if dry_run:
            print(result.digest or config.empty_digest_message.rstrip("\n"))
            return 0

        if not result.delivery.success:
            logger.error(f"Delivery via {sink.name} failed: {result.delivery.message}")
            return 1

        logger.info(f"Delivery via {sink.name}: {result.delivery.message}")
        return 0

    def run_serve_command(self, config) -> int:
        """Serve digests over HTTP until interrupted."""
        import uvicorn
        from ..api.app import create_app

        config.log_config()
        logger.info(f"Listen in {config.api_host}:{config.api_port}")
        uvicorn.run(create_app(config), host=config.api_host, port=config.api_port)
        return 0
