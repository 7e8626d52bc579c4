"""
Reference Tool
==============

Fetch paper references and build citation networks via the INSPIRE-HEP API.

This package provides:
- core: Pure Python lookup client, retry wrapper and network builder
- output: JSON and BibTeX rendering
- cli: The `reference-tool` command
- tools/server: MCP tools exposing the same operations
"""

from .cli import main

__version__ = "0.1.0"
__all__ = ["main"]
