#!/usr/bin/env python3
"""DSH processor and pipeline engine, CLI entrypoint."""

import argparse
import logging
import sys

from trifonius.commands.pipeline import register_pipeline_command
from trifonius.commands.processor import register_processor_command
from trifonius.commands.resource import register_resource_command
from trifonius.errors import TrifoniusError
from trifonius.logging_setup import setup_cli_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="DSH processor and pipeline engine")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_processor_command(subparsers)
    register_resource_command(subparsers)
    register_pipeline_command(subparsers)

    args = parser.parse_args(argv)
    setup_cli_logging(verbose=args.verbose)
    try:
        args.func(args)
    except (TrifoniusError, FileNotFoundError) as e:
        logger.error(f"error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
