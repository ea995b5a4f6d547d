# =============================================================================
# main.py - Entry Point for the Alfa Documentation MCP Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py                    # start the server on stdio
#   uv run python main.py --key YOUR_KEY     # save key to .env, then start
#   uv run python main.py --setKey YOUR_KEY  # save key to .env and exit
#
# WHAT HAPPENS:
#   1. Parses --key / --setKey / --env-file
#   2. Loads .env from the project root (python-dotenv)
#   3. Persists a command-line API key into .env, if one was given
#   4. Resolves AlfaConfig once from the environment
#   5. Builds the FastMCP server and runs it on stdio
#
# EXIT CODES:
#   0 → normal shutdown, or --setKey saved the key
#   1 → --setKey could not save the key, or any uncaught startup fault
#
# Everything is logged to stderr; stdout belongs to the MCP transport.
# =============================================================================

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from alfa_core.config import API_KEY_VAR, DEFAULT_ENV_PATH, load_config, save_api_key
from alfa_tools.mcp_server import configure_logging, create_server

logger = logging.getLogger("alfa_docs")

_NO_KEY_HELP = """
Warning: No API key provided. API calls may fail.
You can provide an API key using one of these methods:
  1. Command line options:
     - Run with key: python main.py --key YOUR_API_KEY
     - Set key only: python main.py --setKey YOUR_API_KEY
  2. Environment variable: ALFA_API_KEY=YOUR_API_KEY
  3. MCP client configuration:
     "env": {
       "ALFA_API_KEY": "YOUR_API_KEY"
     }
"""


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="alfa-docs-mcp",
        description="Serve Alfa Crawler library documentation over MCP (stdio).",
    )
    key_group = parser.add_mutually_exclusive_group()
    key_group.add_argument(
        "--key",
        metavar="API_KEY",
        help="Use this API key and save it to the .env file.",
    )
    key_group.add_argument(
        "--setKey",
        dest="set_key",
        metavar="API_KEY",
        help="Save this API key to the .env file and exit.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=DEFAULT_ENV_PATH,
        help=f"Path of the .env file to load and update (default: {DEFAULT_ENV_PATH}).",
    )
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    """Bootstrap configuration and serve.  Returns the process exit code."""
    load_dotenv(args.env_file)
    environ = dict(os.environ)

    api_key = args.set_key or args.key
    if api_key:
        environ[API_KEY_VAR] = api_key
        try:
            save_api_key(args.env_file, api_key)
        except OSError as e:
            logger.error(f"Failed to save API key to .env file: {e}")
            if args.set_key:
                return 1
        else:
            logger.info(f"API key saved to {args.env_file}")
            if args.set_key:
                logger.info("API key has been saved. Run 'python main.py' to start the server.")
                return 0

    config = load_config(environ)
    if not config.has_api_key:
        logger.warning(_NO_KEY_HELP)

    server = create_server(config)
    logger.info("Alfa Documentation MCP Server running on stdio")
    server.run()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging()
    try:
        return run(args)
    except Exception:
        logger.exception("Fatal error in main()")
        return 1


# =============================================================================
# Script entry point
# =============================================================================
if __name__ == "__main__":
    sys.exit(main())
