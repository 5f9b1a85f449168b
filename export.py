#!/usr/bin/env python3
"""
YouTrack Knowledge Base Exporter - Main CLI Entry Point

Downloads every knowledge base article visible to a token, together with its
comments and attachments, into a local markdown tree that mirrors the
article hierarchy.
"""

import argparse
import getpass
import logging
import os
import sys
from typing import Any, Callable, Dict

from config_loader import ConfigLoader, get_nested
from logger import log_config, log_section, setup_logging, shutdown_logging
from orchestrator import ExportOrchestrator
from youtrack_client import AuthenticationError, YouTrackClient, YouTrackError

__version__ = "1.0.0"

DEFAULT_CONFIG_PATH = 'config.yaml'
TOKEN_ENV_VAR = 'YOUTRACK_TOKEN'


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Download a YouTrack knowledge base into a local markdown tree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive: prompts for URL, output path and token
  python export.py

  # Fully specified
  python export.py --base-url https://youtrack.example.com --output ./kb

  # Token from the environment
  YOUTRACK_TOKEN=perm:... python export.py --base-url https://youtrack.example.com --output ./kb

  # Settings from a config file, plus a JSON run report
  python export.py --config config.yaml --report

  # Skip attachment downloads, debug logging
  python export.py --no-attachments -v
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help=f'Path to configuration YAML file (default: {DEFAULT_CONFIG_PATH} if present)'
    )

    parser.add_argument(
        '--base-url',
        type=str,
        help='YouTrack base URL, e.g. https://youtrack.example.com'
    )

    parser.add_argument(
        '--output',
        type=str,
        help='Output directory for the exported tree'
    )

    parser.add_argument(
        '--token',
        type=str,
        help=f'Permanent API token (default: ${TOKEN_ENV_VAR})'
    )

    parser.add_argument(
        '--max-depth',
        type=int,
        help='Deepest sub-article level to export (default: 50)'
    )

    parser.add_argument(
        '--no-attachments',
        action='store_true',
        help='List attachments in README.md without downloading them'
    )

    parser.add_argument(
        '--report',
        action='store_true',
        help='Write export_report.json into the output directory'
    )

    parser.add_argument(
        '--insecure',
        action='store_true',
        help='Disable TLS certificate verification'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'DETAIL', 'INFO', 'SUCCESS', 'WARNING', 'ERROR'],
        help='Explicit log level (overrides -v)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for DEBUG)'
    )

    return parser


def load_config(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Build the run configuration from the optional config file, the
    environment and CLI arguments (CLI takes precedence).

    Raises:
        FileNotFoundError: If an explicitly requested config file is missing
    """
    config_path = args.config
    if config_path is None and os.path.exists(DEFAULT_CONFIG_PATH):
        config_path = DEFAULT_CONFIG_PATH

    config = ConfigLoader.load(config_path) if config_path else ConfigLoader.with_defaults({})

    if not get_nested(config, 'youtrack.token') and os.getenv(TOKEN_ENV_VAR):
        config['youtrack']['token'] = os.getenv(TOKEN_ENV_VAR)

    return ConfigLoader.merge_with_args(config, args)


def prompt_for_missing(
    config: Dict[str, Any],
    input_func: Callable[[str], str] = input,
    secret_func: Callable[[str], str] = getpass.getpass
) -> Dict[str, Any]:
    """
    Ask for base URL, output path and token when they are still unset.

    Raises:
        ValueError: If an answer is empty
    """
    prompts = [
        ('youtrack', 'base_url', "YouTrack URL (e.g. https://youtrack.example.com): ", input_func),
        ('export', 'output_directory', "Output path: ", input_func),
        ('youtrack', 'token', "API token (perm:...): ", secret_func),
    ]

    for section, key, prompt, ask in prompts:
        if config[section].get(key):
            continue
        answer = (ask(prompt) or '').strip()
        if not answer:
            raise ValueError(f"No value given for {section}.{key}")
        config[section][key] = answer

    config['youtrack']['base_url'] = config['youtrack']['base_url'].rstrip('/')
    return config


def run_export(config: Dict[str, Any], logger: logging.Logger, log_path=None) -> int:
    """Execute the export run and map failures to exit codes."""
    client = YouTrackClient.from_config(config, logger=logger)
    try:
        orchestrator = ExportOrchestrator(config, client=client, logger=logger, log_path=log_path)
        orchestrator.run()
        return 0
    except AuthenticationError as e:
        logger.error(f"Error: {e}")
        logger.error("Please check your API token!")
        return 1
    except YouTrackError as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.error("Download interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Download failed: {str(e)}", exc_info=True)
        return 1
    finally:
        client.close()


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        config = load_config(args)
        config = prompt_for_missing(config)
        ConfigLoader.validate(config)
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except (KeyboardInterrupt, EOFError):
        print("\nAborted by user", file=sys.stderr)
        return 130

    try:
        logger, log_path = setup_logging(
            output_dir=get_nested(config, 'export.output_directory'),
            verbosity=args.verbose,
            level=get_nested(config, 'logging.level')
        )
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"ERROR: Cannot create output directory: {e}", file=sys.stderr)
        return 1

    try:
        log_section("YouTrack Knowledge Base Exporter", logger=logger)
        logger.info(f"Version: {__version__}")
        log_config(config, logger=logger)
        logger.info("")

        return run_export(config, logger, log_path)
    finally:
        shutdown_logging(logger)


if __name__ == "__main__":
    sys.exit(main())
