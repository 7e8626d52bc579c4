"""
MCP Tools for reference operations.

Provides tools for:
- Reference listing: get the references of a paper
- Network building: follow references into a citation network
"""

from .get_references import get_references_tool, handle_get_references
from .build_network import build_network_tool, handle_build_network

__all__ = [
    "get_references_tool",
    "handle_get_references",
    "build_network_tool",
    "handle_build_network",
]
