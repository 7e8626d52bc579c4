"""
Reference Tool MCP Server
=========================

This module exposes reference lookup and citation network building
over MCP (stdio), backed by the INSPIRE-HEP API.
"""

import logging
import sys
from typing import Any, Dict, List

import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server

from .config import APP_NAME, APP_VERSION
from .tools import (
    build_network_tool,
    get_references_tool,
    handle_build_network,
    handle_get_references,
)

logger = logging.getLogger("reference-tool")

# Create MCP server
server = Server(APP_NAME)


@server.list_tools()
async def list_tools() -> List[types.Tool]:
    """List available reference tools."""
    return [
        get_references_tool,
        build_network_tool,
    ]


@server.call_tool()
async def call_tool(
    name: str,
    arguments: Dict[str, Any],
) -> List[types.TextContent]:
    """Handle tool calls for reference operations."""
    logger.debug(f"Calling tool {name} with arguments {arguments}")

    try:
        if name == "get_paper_references":
            return await handle_get_references(arguments)
        elif name == "build_citation_network":
            return await handle_build_network(arguments)
        else:
            return [
                types.TextContent(
                    type="text",
                    text=f"Error: Unknown tool '{name}'",
                )
            ]
    except Exception as e:
        logger.error(f"Tool error: {str(e)}")
        return [
            types.TextContent(
                type="text",
                text=f"Error: {str(e)}",
            )
        ]


async def _async_main():
    """Async entry point for the MCP server."""
    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")

    async with stdio_server() as streams:
        await server.run(
            streams[0],
            streams[1],
            InitializationOptions(
                server_name=APP_NAME,
                server_version=APP_VERSION,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


def main():
    """Run the MCP server (synchronous entry point)."""
    import asyncio

    # Configure logging to stderr (stdout is reserved for MCP JSON-RPC)
    logging.basicConfig(
        level=logging.WARNING,
        format="%(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    asyncio.run(_async_main())
