"""
Citation network building logic.

Traverses reference lists breadth-first to build bounded,
multi-level citation networks.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable, Optional

from .cancellation import CancelToken
from .errors import (
    BuildErrorKind,
    LookupErrorKind,
    NetworkBuildError,
    OperationCancelled,
    PaperLookupError,
)
from .lookup import ResilientLookup
from .models import CitationEdge, CitationNetwork, PaperNode, normalize_identifier

logger = logging.getLogger("reference-tool")


class NetworkBuilder:
    """
    Builds citation networks by following references breadth-first.

    Lookups are strictly sequential: the next lookup is only issued after
    the previous one, including its retries and pacing, has finished.
    Nodes are first-visit-wins: a paper's depth is the depth at which it
    was first discovered and its metadata is never refreshed.
    """

    def __init__(self, lookup: ResilientLookup):
        """
        Initialize the network builder.

        Args:
            lookup: Resilient lookup wrapper used for every remote call.
        """
        self.lookup = lookup

    async def build(
        self,
        root: str,
        max_depth: int = 1,
        category_filter: Optional[Iterable[str]] = None,
        max_nodes: Optional[int] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> CitationNetwork:
        """
        Build a citation network starting from the root paper.

        Args:
            root: Identifier of the root paper (arXiv ID or 'recid:NNN').
            max_depth: Papers at this depth are looked up but not expanded.
            category_filter: Papers sharing no category with this set are
                recorded but not expanded. Empty or None disables it.
            max_nodes: Stop early once the network holds this many papers.
            cancel_token: Aborts the build when fired.

        Returns:
            CitationNetwork with `depth` set to `max_depth`.

        Raises:
            NetworkBuildError: ROOT_UNREACHABLE, FATAL or CANCELLED.
            ValueError: If `max_depth` or `max_nodes` is out of range.
        """
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if max_nodes is not None and max_nodes < 1:
            raise ValueError("max_nodes must be >= 1")

        try:
            root_id = normalize_identifier(root)
        except PaperLookupError as e:
            raise NetworkBuildError(
                BuildErrorKind.FATAL, f"Invalid root identifier {root!r}", cause=e
            ) from e

        wanted = frozenset(category_filter) if category_filter else None

        nodes: dict[str, PaperNode] = {}
        edges: list[CitationEdge] = []
        seen_edges: set[CitationEdge] = set()
        node_depths: dict[str, int] = {root_id: 0}
        failed: dict[str, str] = {}
        truncated = False

        frontier: deque[tuple[str, int]] = deque([(root_id, 0)])
        visited = {root_id}

        logger.info(f"Starting network build from {root_id} (max depth {max_depth})")

        while frontier:
            paper_id, depth = frontier.popleft()

            if max_nodes is not None and len(nodes) >= max_nodes:
                logger.info(
                    f"Node limit {max_nodes} reached, "
                    f"skipping {len(frontier) + 1} queued papers"
                )
                frontier.clear()
                truncated = True
                break

            logger.debug(f"Processing paper at depth {depth}: {paper_id}")

            try:
                result = await self.lookup.lookup(paper_id, cancel_token=cancel_token)
            except OperationCancelled as e:
                raise NetworkBuildError(
                    BuildErrorKind.CANCELLED, "Network build cancelled", cause=e
                ) from e
            except PaperLookupError as e:
                if paper_id == root_id:
                    raise self._root_failure(root_id, e) from e
                if e.kind is LookupErrorKind.FATAL:
                    raise NetworkBuildError(
                        BuildErrorKind.FATAL,
                        f"Unrecoverable failure looking up {paper_id}",
                        cause=e,
                    ) from e
                logger.warning(f"Skipping {paper_id}: {e}")
                failed[paper_id] = str(e)
                nodes.setdefault(paper_id, PaperNode.placeholder(paper_id))
                continue

            nodes.setdefault(paper_id, result.node)

            if wanted is not None and not result.node.in_categories(wanted):
                logger.debug(f"Not expanding {paper_id}: outside category filter")
                continue

            if depth >= max_depth:
                continue

            for ref_id in result.reference_ids:
                edge = CitationEdge(citing=paper_id, cited=ref_id)
                if edge not in seen_edges:
                    seen_edges.add(edge)
                    edges.append(edge)

                if ref_id not in visited:
                    visited.add(ref_id)
                    node_depths[ref_id] = depth + 1
                    frontier.append((ref_id, depth + 1))

        if truncated:
            # Targets that were queued but never looked up
            edges = [e for e in edges if e.cited in nodes]

        network = CitationNetwork(
            root_id=root_id,
            nodes=nodes,
            edges=edges,
            depth=max_depth,
            truncated=truncated,
            node_depths={pid: d for pid, d in node_depths.items() if pid in nodes},
            failed=failed,
        )

        logger.info(
            f"Network complete: {network.node_count} papers, {network.edge_count} edges, "
            f"{len(failed)} unresolved, depth {max_depth}"
            + (", truncated" if truncated else "")
        )
        return network

    def _root_failure(self, root_id: str, error: PaperLookupError) -> NetworkBuildError:
        """Map a failed root lookup onto the build error taxonomy."""
        if error.kind in (LookupErrorKind.NOT_FOUND, LookupErrorKind.TRANSIENT):
            return NetworkBuildError(
                BuildErrorKind.ROOT_UNREACHABLE,
                f"Root paper {root_id} could not be fetched: {error}",
                cause=error,
            )
        return NetworkBuildError(
            BuildErrorKind.FATAL,
            f"Root paper {root_id} lookup failed: {error}",
            cause=error,
        )
