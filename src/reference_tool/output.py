"""
Rendering of references and citation networks.

JSON and BibTeX output, written to a file with aiofiles or to stdout.
"""

from __future__ import annotations

import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import aiofiles

from .core.models import CitationNetwork, Reference

logger = logging.getLogger("reference-tool")


class OutputFormat(str, Enum):
    """Supported output formats."""

    JSON = "json"
    BIBTEX = "bibtex"


class OutputWriter:
    """
    Writes references or networks in the configured format.

    Output goes to `output_path` when given, otherwise to stdout.
    """

    def __init__(self, format: OutputFormat, output_path: Optional[Path] = None):
        self.format = format
        self.output_path = output_path

    def format_references(self, references: list[Reference]) -> str:
        if self.format is OutputFormat.BIBTEX:
            return "\n".join(ref.to_bibtex() for ref in references)
        return json.dumps(
            [ref.model_dump(mode="json") for ref in references], indent=2
        ) + "\n"

    def format_network(self, network: CitationNetwork) -> str:
        if self.format is OutputFormat.BIBTEX:
            # Placeholder nodes have no metadata worth citing
            return "\n".join(
                node.to_bibtex() for node in network.nodes.values() if node.resolved
            )
        return json.dumps(network.to_graph_dict(), indent=2) + "\n"

    async def write_references(self, references: list[Reference]) -> None:
        """Write references to output."""
        await self._write_content(self.format_references(references))

    async def write_network(self, network: CitationNetwork) -> None:
        """Write citation network to output."""
        await self._write_content(self.format_network(network))

    async def _write_content(self, content: str) -> None:
        """Write content to file or stdout."""
        if self.output_path is None:
            sys.stdout.write(content)
            sys.stdout.flush()
            return

        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.output_path, "w", encoding="utf-8") as f:
            await f.write(content)
        logger.info(f"Output written to: {self.output_path}")
