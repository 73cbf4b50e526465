"""MCP tools for the launchdex server.

This module defines the tools exposed by the MCP server:
- get_index: List indexed items, optionally filtered by kind
- launch_item: Open an item and record the launch
- rebuild_index: Force a full crawl of all roots
"""

from fastmcp import FastMCP

from launchdex.service import IndexService


def register_tools(mcp: FastMCP, service: IndexService) -> None:
    """Register all tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        service: Index service the tools delegate to
    """

    @mcp.tool()
    def get_index(kind: str | None = None) -> list[dict]:
        """List launchable items in the index.

        The index is built on first use if no snapshot exists yet.

        Args:
            kind: Optional filter, "application" or "file"

        Returns:
            List of item records with:
            - name: Display name (file name without extension)
            - file: Absolute path of the item
            - ext: Lower-cased extension
            - type: "application" or "file"
            - launchCount: Number of launches recorded
            - lastUsed: Epoch milliseconds of the last launch (0 if never)
            - size, mtime: Present for items added by the watcher
        """
        items = service.get_index()
        if kind is not None:
            items = [item for item in items if item.kind == kind]
        return [item.to_dict() for item in items]

    @mcp.tool()
    def launch_item(path: str) -> dict:
        """Open an indexed item with the system's default handler.

        On success the item's launch count and last-used time are updated.

        Args:
            path: Absolute path of the item, as returned by get_index

        Returns:
            - ok: Whether the item was started
            - error: Reason for failure, if any
        """
        return service.launch(path).to_dict()

    @mcp.tool()
    def rebuild_index() -> dict:
        """Rescan all configured roots and rebuild the index.

        Returns:
            - ok: Always True
            - count: Number of items in the rebuilt index
        """
        items = service.rebuild()
        return {"ok": True, "count": len(items)}
