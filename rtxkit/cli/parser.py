"""
rtxkit CLI argument parser.

This module implements the command-line interface for rtxkit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("rtxkit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """rtxkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="rtxkit",
            description="rtxkit - Install rtx and the tools it manages in CI",
            epilog='Use "rtxkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"rtxkit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./rtxkit.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_setup_command(subparsers)
        self._add_save_command(subparsers)

        return parser

    def _add_setup_command(self, subparsers):
        """Add 'setup' subcommand."""
        parser = subparsers.add_parser(
            "setup",
            help="Install rtx and the declared tools",
            description=(
                "Write .tool-versions, restore the tool cache, download rtx, "
                "run 'rtx install' and publish the tool bin paths"
            ),
        )
        parser.add_argument(
            "--rtx-version",
            metavar="VERSION",
            help="rtx version to install: 'latest' or a release tag (default: latest)",
        )
        parser.add_argument(
            "--tool-versions",
            metavar="TEXT",
            help="Content to write to .tool-versions",
        )
        parser.add_argument(
            "--github-token",
            metavar="TOKEN",
            help="GitHub token for tagged release downloads",
        )
        parser.add_argument(
            "--working-directory",
            metavar="PATH",
            help="Directory holding the tool-version files (default: current directory)",
        )
        parser.add_argument(
            "--cache-dir",
            type=Path,
            metavar="PATH",
            help="Local cache store directory (default: $RTXKIT_CACHE_DIR or ~/.cache/rtxkit)",
        )

    def _add_save_command(self, subparsers):
        """Add 'save' subcommand."""
        parser = subparsers.add_parser(
            "save",
            help="Save the rtx tool cache (post step)",
            description="Save the rtx data directory under the key derived by 'setup'",
        )
        parser.add_argument(
            "--cache-dir",
            type=Path,
            metavar="PATH",
            help="Local cache store directory (default: $RTXKIT_CACHE_DIR or ~/.cache/rtxkit)",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "setup": "rtxkit.cli.commands.setup",
            "save": "rtxkit.cli.commands.save",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
