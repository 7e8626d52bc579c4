"""
MCP Tool: get_paper_references

Gets the reference list of a paper from INSPIRE-HEP.
"""

from __future__ import annotations

import json
import logging
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
get_references_tool = types.Tool(
    name="get_paper_references",
    description="""Get papers referenced by a given paper.

Returns the reference list INSPIRE-HEP holds for the paper, useful for:
- Understanding the foundation a paper builds on
- Finding related prior work
- Building literature reviews

References can be filtered by subject category (e.g. 'hep-th').""",
    inputSchema={
        "type": "object",
        "properties": {
            "paper_id": {
                "type": "string",
                "description": "arXiv ID (e.g., 'hep-th/9711200' or '2301.12345') or INSPIRE record ('recid:451647')",
            },
            "categories": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Only keep references in at least one of these categories",
            },
            "limit": {
                "type": "integer",
                "description": "Maximum references to show (default: 50, max: 200)",
                "default": 50,
                "minimum": 1,
                "maximum": 200,
            },
        },
        "required": ["paper_id"],
    },
)


async def handle_get_references(arguments: dict[str, Any]) -> list[types.TextContent]:
    """Handle the get_paper_references tool call."""
    try:
        service = _get_service()

        paper_id = arguments["paper_id"]
        categories = arguments.get("categories") or None
        limit = min(arguments.get("limit", 50), 200)

        logger.info(f"Fetching references for {paper_id} (limit={limit})")

        references = await service.get_references(paper_id, categories=categories)

        result = {
            "paper_id": paper_id,
            "total_references": len(references),
            "references": [
                {
                    "title": r.title,
                    "authors": r.authors[:3],
                    "year": r.year,
                    "arxiv_id": r.arxiv_id,
                    "record_id": r.record_id,
                    "categories": r.categories,
                }
                for r in references[:limit]
            ],
        }

        if len(references) > limit:
            result["note"] = f"Showing {limit} of {len(references)} references."

        return [types.TextContent(type="text", text=json.dumps(result, indent=2))]

    except Exception as e:
        logger.error(f"Error fetching references: {e}")
        return [
            types.TextContent(
                type="text",
                text=json.dumps({"error": str(e)}, indent=2),
            )
        ]
