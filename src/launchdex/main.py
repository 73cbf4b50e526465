"""Main entry point for the launchdex MCP server."""

import argparse
import logging
import sys

from fastmcp import FastMCP

from launchdex.config import Config
from launchdex.resources import register_resources
from launchdex.service import IndexService, index_stats
from launchdex.tools import register_tools

logger = logging.getLogger(__name__)


def create_server(config: Config, service: IndexService | None = None) -> FastMCP:
    """Create and configure the MCP server with all components.

    Loads the index from its snapshot, building it if no usable snapshot
    exists. The watcher is not started here; see main().

    Args:
        config: Configuration instance with all settings.
        service: Optional pre-built index service.
    """
    service = service or IndexService(config)

    mcp = FastMCP(
        name="launchdex",
        instructions=(
            "launchdex indexes application shortcuts and common user files on this "
            "machine. Use get_index to list launchable items and launch_item to open "
            "one; launches are counted so frequently used items can be ranked first."
        ),
    )

    logger.info("Loading index from %s", config.index_path)
    items = service.get_index()
    stats = index_stats(items)
    logger.info(
        "Index ready: %d items (%d applications, %d files)",
        stats["total"],
        stats["applications"],
        stats["files"],
    )

    logger.info("Registering resources...")
    register_resources(mcp, service)

    logger.info("Registering tools...")
    register_tools(mcp, service)

    logger.info("Server configured successfully")
    return mcp


def main() -> None:
    """Main function - starts the MCP server."""
    # Configure logging here to avoid side effects on import
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(
        description="launchdex - index of launchable apps and files"
    )
    parser.add_argument(
        "--rebuild",
        action="store_true",
        help="Force a full rebuild of the index before starting",
    )
    parser.add_argument(
        "--no-watch",
        action="store_true",
        help="Do not watch the filesystem for changes",
    )
    args = parser.parse_args()

    try:
        config = Config.from_env()
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    logger.info("=" * 50)
    logger.info("launchdex starting...")
    logger.info("  INDEX:      %s", config.index_path)
    logger.info("  PORT:       %s", config.port)
    logger.info("  SHORTCUTS:  %s", ", ".join(str(d) for d in config.shortcut_dirs))
    logger.info("  FILES:      %s", ", ".join(str(d) for d in config.file_dirs))
    logger.info("  USAGE:      %s", "preserved" if config.preserve_usage else "reset")
    logger.info("=" * 50)

    service = IndexService(config)
    if args.rebuild:
        logger.info("Forced rebuild requested...")
        service.rebuild()

    try:
        mcp = create_server(config, service)
        if config.watch_enabled and not args.no_watch:
            service.start_watching()
        logger.info("Starting MCP server on %s:%s...", config.host, config.port)
        mcp.run(transport="sse", host=config.host, port=config.port)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Server error")
        sys.exit(1)
    finally:
        service.stop()


if __name__ == "__main__":
    main()
