"""CLI entry point."""

import os
import shlex
import sys

from cli.parser import ParseError, parse_command
from cli.repl import dispatch_command, repl_loop
from common.logging_config import setup_logging


def main() -> None:
    """
    Entry point for CLI.

    With arguments, runs a single command and exits
    (e.g. ``pagevault-cli search "release notes" --mode metadata``);
    otherwise starts the interactive REPL.
    """
    args = sys.argv[1:]
    debug = '--debug' in args
    if debug:
        args = [a for a in args if a != '--debug']

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)

    if debug:
        logger.info("Debug logging enabled")

    logger.info("CLI starting...")
    try:
        if args:
            try:
                print(dispatch_command(parse_command(shlex.join(args))))
            except ParseError as e:
                print(f"Error: {e}", file=sys.stderr)
                sys.exit(2)
        else:
            repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
