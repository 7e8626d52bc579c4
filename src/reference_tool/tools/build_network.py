"""
MCP Tool: build_citation_network

Builds a citation network around a paper by following references.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from typing import Any

import mcp.types as types

from ..config import load_settings
from ..core import ReferenceService

logger = logging.getLogger("reference-tool")

# Lazy initialization
_service: ReferenceService | None = None


def _get_service() -> ReferenceService:
    """Get or create the reference service."""
    global _service
    if _service is None:
        _service = ReferenceService.from_settings(load_settings())
    return _service


# Tool definition
build_network_tool = types.Tool(
    name="build_citation_network",
    description="""Build a citation network around a paper.

Follows reference lists breadth-first, N levels deep, starting from the
root paper. Useful for:
- Understanding a paper's intellectual lineage
- Finding foundational papers cited across a research area
- Building comprehensive literature reviews

Papers outside the given categories are kept in the network but their
references are not followed. Papers whose lookup fails are kept as
unresolved placeholders.

Warning: Higher depths exponentially increase API calls.
Depth 1 or 2 is recommended for most use cases.""",
    inputSchema={
        "type": "object",
        "properties": {
            "paper_id": {
                "type": "string",
                "description": "arXiv ID of the root paper (e.g., 'hep-th/9711200')",
            },
            "depth": {
                "type": "integer",
                "description": "How many reference levels to follow (default: 1, max: 3)",
                "default": 1,
                "minimum": 0,
                "maximum": 3,
            },
            "categories": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Only expand papers in at least one of these categories",
            },
            "max_nodes": {
                "type": "integer",
                "description": "Stop after this many papers (default: 200)",
                "default": 200,
                "minimum": 1,
                "maximum": 1000,
            },
        },
        "required": ["paper_id"],
    },
)


async def handle_build_network(arguments: dict[str, Any]) -> list[types.TextContent]:
    """Handle the build_citation_network tool call."""
    try:
        service = _get_service()

        paper_id = arguments["paper_id"]
        depth = min(arguments.get("depth", 1), 3)
        categories = arguments.get("categories") or None
        max_nodes = min(arguments.get("max_nodes", 200), 1000)

        logger.info(
            f"Building citation network for {paper_id} "
            f"(depth={depth}, max_nodes={max_nodes})"
        )

        network = await service.build_citation_network(
            paper_id,
            depth=depth,
            categories=categories,
            max_nodes=max_nodes,
        )

        # Most cited papers within the network
        cited_counts = Counter(edge.cited for edge in network.edges)
        top_cited = cited_counts.most_common(5)

        stats = network.get_stats()
        root = network.root

        result = {
            "paper_id": network.root_id,
            "root_title": root.title if root else network.root_id,
            "depth": network.depth,
            "truncated": network.truncated,
            "statistics": stats.model_dump(),
            "most_cited_in_network": [
                {
                    "paper_id": pid,
                    "title": network.nodes[pid].title,
                    "citations_in_network": count,
                }
                for pid, count in top_cited
            ],
            "sample_papers": [
                {
                    "paper_id": p.identifier,
                    "title": p.title[:80] + "..." if len(p.title) > 80 else p.title,
                    "year": p.year,
                    "depth": network.node_depths.get(p.identifier),
                }
                for p in list(network.nodes.values())[:10]
            ],
            "unresolved": network.failed,
        }

        return [types.TextContent(type="text", text=json.dumps(result, indent=2))]

    except Exception as e:
        logger.error(f"Error building network: {e}")
        return [
            types.TextContent(
                type="text",
                text=json.dumps({"error": str(e)}, indent=2),
            )
        ]
