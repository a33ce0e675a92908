"""Entry point for flowport MCP server."""

import argparse
import asyncio
import logging
import sys

from flowport import __version__
from flowport.config import get_settings
from flowport.server import create_server, initialize_services, shutdown_services


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="flowport",
        description="flowport - Export, import and share workflow data via MCP",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args()


async def main() -> None:
    """Main entry point for the MCP server."""
    settings = get_settings()

    # stdout carries the MCP stdio transport, so logs go to stderr
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    await initialize_services(settings)

    mcp = create_server()

    try:
        await mcp.run_stdio_async()
    finally:
        await shutdown_services()


def cli() -> None:
    """CLI entry point."""
    # Parse args first (handles --help and --version)
    parse_args()

    asyncio.run(main())


if __name__ == "__main__":
    cli()
