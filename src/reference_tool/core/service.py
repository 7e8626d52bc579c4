"""
Reference service - main business logic.

This is the core service used by the CLI and the MCP tools.
It has NO MCP dependencies.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from .cancellation import CancelToken
from .client import BASE_URL, InspireClient
from .lookup import ResilientLookup
from .models import CitationNetwork, PaperNode, Reference
from .network import NetworkBuilder

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger("reference-tool")


class ReferenceService:
    """
    Core reference lookup service.

    Provides reference listing and citation network building without
    any MCP dependencies. It can be used directly by:
    - The command line tool
    - MCP tools (via the tools layer)
    - Scripts and notebooks

    Example usage:
        service = ReferenceService()
        network = await service.build_citation_network("hep-th/9711200", depth=2)
        for edge in network.edges:
            print(f"{edge.citing} -> {edge.cited}")
    """

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: int = 30,
        max_retries: int = 3,
        request_delay_ms: int = 100,
    ):
        """
        Initialize the reference service.

        Args:
            base_url: INSPIRE-HEP API root.
            timeout: Per-attempt timeout in seconds.
            max_retries: Retries for transient failures.
            request_delay_ms: Minimum delay between requests.
        """
        self.client = InspireClient(base_url=base_url, timeout=timeout)
        self.timeout = timeout
        self.max_retries = max_retries
        self.request_delay_ms = request_delay_ms
        self._lookup: Optional[ResilientLookup] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> ReferenceService:
        """Create a service configured from the `api` settings section."""
        api = settings.api
        return cls(
            base_url=api.base_url,
            timeout=api.timeout_seconds,
            max_retries=api.max_retries,
            request_delay_ms=api.request_delay_ms,
        )

    def _get_lookup(self) -> ResilientLookup:
        """
        Get or create the resilient wrapper.

        One wrapper serves every call on this service, so consecutive calls
        share its pacing. It is rebuilt if `client` has been replaced.
        """
        if self._lookup is None or self._lookup.client is not self.client:
            self._lookup = ResilientLookup(
                self.client,
                max_retries=self.max_retries,
                request_delay_ms=self.request_delay_ms,
                timeout_seconds=self.timeout,
            )
        return self._lookup

    async def get_paper_info(self, arxiv_id: str) -> PaperNode:
        """
        Get paper metadata from INSPIRE-HEP.

        Args:
            arxiv_id: The arXiv paper ID (e.g., 'hep-th/9711200').

        Raises:
            PaperLookupError: If the paper cannot be fetched.
        """
        result = await self._get_lookup().lookup(arxiv_id)
        return result.node

    async def get_references(
        self,
        arxiv_id: str,
        categories: Optional[Iterable[str]] = None,
    ) -> list[Reference]:
        """
        Get the reference list of a paper.

        Args:
            arxiv_id: The arXiv paper ID.
            categories: Keep only references sharing one of these categories.

        Returns:
            References in the order the paper lists them.
        """
        result = await self._get_lookup().lookup(arxiv_id)
        logger.info(f"Found paper: {result.node.title}")

        references = result.references
        if categories:
            wanted = set(categories)
            references = [r for r in references if wanted.intersection(r.categories)]
            logger.info(
                f"Kept {len(references)} of {len(result.references)} references "
                f"matching {sorted(wanted)}"
            )
        return references

    async def build_citation_network(
        self,
        arxiv_id: str,
        depth: int = 1,
        categories: Optional[Iterable[str]] = None,
        max_nodes: Optional[int] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> CitationNetwork:
        """
        Build a citation network around a paper.

        Follows references breadth-first up to `depth` levels. Higher
        depths grow the number of API calls exponentially.

        Args:
            arxiv_id: The root paper's arXiv ID.
            depth: How many reference levels to follow.
            categories: Papers outside these categories are not expanded.
            max_nodes: Optional cap on the number of papers.
            cancel_token: Aborts the build when fired.

        Returns:
            CitationNetwork containing:
            - root_id: The starting paper
            - nodes: Dict of identifier -> PaperNode
            - edges: List of CitationEdge (citing -> cited)
            - depth: The requested depth
            - truncated: Whether max_nodes cut the traversal short

        Raises:
            NetworkBuildError: If the build fails as a whole.
        """
        builder = NetworkBuilder(self._get_lookup())
        return await builder.build(
            arxiv_id,
            max_depth=depth,
            category_filter=categories,
            max_nodes=max_nodes,
            cancel_token=cancel_token,
        )

    async def close(self) -> None:
        """Clean up resources."""
        await self.client.close()
