"""MCP Resources for launchdex.

Resources expose the index as read-only URIs:
- launchdex://index: the full snapshot as a JSON array
- launchdex://stats: item counts by kind and by extension
"""

import json

from launchdex.service import IndexService, index_stats


def get_index_resource(service: IndexService) -> str:
    """Resource: launchdex://index

    The current index in the durable snapshot record format.
    """
    return json.dumps([item.to_dict() for item in service.get_index()], indent=2)


def get_stats_resource(service: IndexService) -> str:
    """Resource: launchdex://stats"""
    stats = index_stats(service.get_index())
    lines = [
        "# Index Summary",
        "",
        f"- **Total items:** {stats['total']}",
        f"- **Applications:** {stats['applications']}",
        f"- **Files:** {stats['files']}",
    ]
    if stats["by_extension"]:
        lines.extend(["", "## By extension", ""])
        for ext, count in stats["by_extension"].items():
            lines.append(f"- `{ext or '(none)'}`: {count}")
    return "\n".join(lines)


def register_resources(mcp, service: IndexService):
    """Register all resources with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        service: Index service backing the resources
    """

    @mcp.resource("launchdex://index")
    def index():
        """The full launchable-item index as JSON."""
        return get_index_resource(service)

    @mcp.resource("launchdex://stats")
    def stats():
        """Item counts by kind and by extension."""
        return get_stats_resource(service)
