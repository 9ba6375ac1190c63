"""CLI-specific configuration management."""

import argparse
from typing import Optional, Dict, Any

from .. import __version__
from .config import DELIVERY_CHOICES


class CLIConfigManager:
    """Manages CLI argument parsing and conversion to configuration."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the CLI argument parser."""
        parser = argparse.ArgumentParser(
            prog="gc-summary",
            description="gc-summary - digest of GrooveCoaster play changes since the last run",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  %(prog)s run
  %(prog)s --store /tmp/store.json run --dry-run
  %(prog)s run --delivery post --post-url https://example.com/hook
  %(prog)s --config config.yaml serve --port 8080
            """
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"gc-summary {__version__}"
        )

        parser.add_argument(
            "--config",
            type=str,
            help="Path to YAML configuration file"
        )
        parser.add_argument(
            "--log-level",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set logging level (default: $LOG_LEVEL or INFO)"
        )
        parser.add_argument(
            "--log-format",
            choices=["standard", "json"],
            help="Set log format (default: $LOG_FORMAT or standard)"
        )
        parser.add_argument(
            "--store",
            type=str,
            help="Path to the JSON snapshot store"
        )
        parser.add_argument(
            "--timezone",
            type=str,
            help="Timezone of the source timestamps (default: Asia/Tokyo)"
        )
        parser.add_argument(
            "--base-url",
            type=str,
            help="Base URL of the mypage service"
        )

        subparsers = parser.add_subparsers(dest="command", help="Available commands")
        self._add_run_command(subparsers)
        self._add_serve_command(subparsers)

        return parser

    def _add_run_command(self, subparsers):
        """Add the run subcommand."""
        run_parser = subparsers.add_parser(
            "run",
            help="Run one digest pass and deliver it"
        )

        delivery_group = run_parser.add_argument_group("Delivery")
        delivery_group.add_argument(
            "--delivery",
            choices=DELIVERY_CHOICES,
            help="Where to deliver the digest (default: log)"
        )
        delivery_group.add_argument(
            "--post-url",
            type=str,
            help="Endpoint that receives text posts"
        )
        delivery_group.add_argument(
            "--chunk-length",
            type=int,
            help="Maximum characters per text post (default: 140)"
        )
        delivery_group.add_argument(
            "--dry-run",
            action="store_true",
            help="Print the digest instead of delivering it"
        )

    def _add_serve_command(self, subparsers):
        """Add the serve subcommand."""
        serve_parser = subparsers.add_parser(
            "serve",
            help="Serve digests over HTTP (GET / runs one pass)"
        )
        serve_parser.add_argument(
            "--host",
            type=str,
            help="Interface to bind (default: 0.0.0.0)"
        )
        serve_parser.add_argument(
            "--port",
            type=int,
            help="Port to listen on (default: $PORT or 8080)"
        )

    def parse_args(self, args: Optional[list] = None) -> argparse.Namespace:
        """Parse command line arguments."""
        parsed_args = self.parser.parse_args(args)

        if not parsed_args.command:
            self.parser.error("No command specified. Use 'run' or 'serve'.")

        if parsed_args.command == "run":
            if parsed_args.chunk_length is not None and parsed_args.chunk_length <= 0:
                self.parser.error("--chunk-length must be positive")

        return parsed_args

    def args_to_config_dict(self, args: argparse.Namespace) -> Dict[str, Any]:
        """Convert parsed arguments to dictionary for config loading."""
        config_dict = {}

        for key in ('store', 'timezone', 'base_url', 'delivery', 'post_url',
                    'chunk_length', 'host', 'port'):
            value = getattr(args, key, None)
            if value is not None:
                config_dict[key] = value

        if args.log_level:
            config_dict['log_level'] = args.log_level
        if args.log_format:
            config_dict['log_format'] = args.log_format

        return config_dict
