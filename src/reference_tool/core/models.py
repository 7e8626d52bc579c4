"""
Data models for reference lookup and citation networks.

These models are pure Pydantic with no MCP dependencies,
making them usable by the CLI, the MCP tools and library callers.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import LookupErrorKind, PaperLookupError

# New-style arXiv ids: 2301.12345, 0704.0001v2
_ARXIV_NEW = re.compile(r"^(\d{4}\.\d{4,5})(v\d+)?$")
# Old-style arXiv ids: hep-th/9711200, math.AG/0101001v1
_ARXIV_OLD = re.compile(r"^([a-z]+(?:-[a-z]+)*(?:\.[A-Z]{2})?/\d{7})(v\d+)?$")
# INSPIRE record ids for papers without an arXiv eprint
_RECID = re.compile(r"^recid:(\d+)$")

RECID_PREFIX = "recid:"


def normalize_identifier(raw: str) -> str:
    """
    Normalize a paper identifier into its canonical graph key.

    Handles:
    - arXiv ID: '2301.12345' or '2301.12345v1' -> '2301.12345'
    - arXiv with prefix: 'arXiv:hep-th/9711200' -> 'hep-th/9711200'
    - INSPIRE record: 'recid:451647' -> 'recid:451647'

    Raises:
        PaperLookupError: with kind MALFORMED if the identifier is not
            recognised.
    """
    if not isinstance(raw, str):
        raise PaperLookupError(
            LookupErrorKind.MALFORMED, f"Paper identifier must be a string, got {raw!r}"
        )

    value = raw.strip()
    if value[:6].lower() == "arxiv:":
        value = value[6:].strip()

    for pattern in (_ARXIV_NEW, _ARXIV_OLD):
        match = pattern.match(value)
        if match:
            return match.group(1)

    if _RECID.match(value):
        return value

    raise PaperLookupError(LookupErrorKind.MALFORMED, f"Invalid paper identifier: {raw!r}")


def is_record_identifier(identifier: str) -> bool:
    """Whether a normalized identifier addresses an INSPIRE record directly."""
    return identifier.startswith(RECID_PREFIX)


def _bibtex_key(authors: list[str], year: Optional[int], title: str) -> str:
    """Build a BibTeX key: first author's last name, year, two title words."""
    first_author = "Unknown"
    if authors:
        # INSPIRE writes names as "Last, First"
        surname = authors[0].split(",")[0].split()
        if surname:
            first_author = surname[-1]

    year_part = str(year) if year is not None else "YYYY"
    title_part = "".join(title.split()[:2])

    return "".join(c for c in f"{first_author}{year_part}{title_part}" if c.isalnum())


def _format_bibtex(
    title: str,
    authors: list[str],
    year: Optional[int],
    arxiv_id: Optional[str],
    categories: list[str],
) -> str:
    lines = [f"@article{{{_bibtex_key(authors, year, title)},"]
    lines.append(f"  title = {{{title}}},")
    if authors:
        lines.append(f"  author = {{{' and '.join(authors)}}},")
    if year is not None:
        lines.append(f"  year = {{{year}}},")
    if arxiv_id:
        lines.append(f"  eprint = {{{arxiv_id}}},")
        lines.append("  archivePrefix = {arXiv},")
    if categories:
        lines.append(f"  primaryClass = {{{categories[0]}}},")
    lines.append("}")
    return "\n".join(lines) + "\n"


class PaperNode(BaseModel):
    """
    One paper in a citation network.

    Immutable once created: the builder never re-fetches or updates a
    node already present in a network. Nodes whose lookup failed are kept
    as placeholders with `resolved=False` so that edges pointing at them
    stay valid.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., description="Normalized paper identifier (graph key)")
    title: str = Field(default="Unknown Title", description="Paper title")
    authors: list[str] = Field(default_factory=list, description="Ordered author names")
    year: Optional[int] = Field(default=None, description="Publication year")
    categories: tuple[str, ...] = Field(
        default=(), description="Subject categories, primary category first"
    )
    record_id: Optional[str] = Field(default=None, description="INSPIRE control number")
    arxiv_id: Optional[str] = Field(default=None, description="arXiv identifier")
    resolved: bool = Field(default=True, description="False for placeholder nodes")

    @classmethod
    def placeholder(cls, identifier: str) -> PaperNode:
        """Stand-in node for a paper whose lookup failed."""
        return cls(identifier=identifier, resolved=False)

    def in_categories(self, wanted: frozenset[str]) -> bool:
        return not wanted.isdisjoint(self.categories)

    def to_bibtex(self) -> str:
        """Generate a BibTeX entry for this paper."""
        return _format_bibtex(
            self.title, self.authors, self.year, self.arxiv_id, list(self.categories)
        )


class Reference(BaseModel):
    """
    A single entry from a paper's reference list.

    References carry only what the citing record says about them; the
    cited record itself may hold richer metadata.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(default="Unknown Title", description="Reference title")
    authors: list[str] = Field(default_factory=list, description="Author names")
    arxiv_id: Optional[str] = Field(default=None, description="arXiv eprint")
    record_id: Optional[str] = Field(default=None, description="INSPIRE control number")
    categories: list[str] = Field(default_factory=list, description="Subject categories")
    year: Optional[int] = Field(default=None, description="Publication year")

    @property
    def identifier(self) -> Optional[str]:
        """
        Graph key for the referenced paper.

        Prefers the arXiv id; falls back to the INSPIRE record. References
        with neither cannot be followed and yield None.
        """
        if self.arxiv_id:
            try:
                return normalize_identifier(self.arxiv_id)
            except PaperLookupError:
                pass
        if self.record_id and self.record_id.isdigit():
            return f"{RECID_PREFIX}{self.record_id}"
        return None

    def bibtex_key(self) -> str:
        return _bibtex_key(self.authors, self.year, self.title)

    def to_bibtex(self) -> str:
        """Generate a BibTeX entry for this reference."""
        return _format_bibtex(
            self.title, self.authors, self.year, self.arxiv_id, self.categories
        )


class LookupResult(BaseModel):
    """What one remote lookup returns: the paper and what it cites."""

    node: PaperNode
    references: list[Reference] = Field(default_factory=list)

    @property
    def reference_ids(self) -> list[str]:
        """Followable reference identifiers, in reference-list order, once each."""
        seen: set[str] = set()
        ids = []
        for ref in self.references:
            ref_id = ref.identifier
            if ref_id is None or ref_id in seen:
                continue
            seen.add(ref_id)
            ids.append(ref_id)
        return ids


class CitationEdge(BaseModel):
    """Directed citation: `citing` references `cited`."""

    model_config = ConfigDict(frozen=True)

    citing: str
    cited: str


class NetworkStats(BaseModel):
    """Summary counts for a citation network."""

    total_papers: int = 0
    total_citations: int = 0
    papers_with_references: int = 0
    papers_being_cited: int = 0
    unresolved_papers: int = 0


class CitationNetwork(BaseModel):
    """
    A bounded network of papers reachable from a root by following references.

    `nodes` and `edges` keep traversal (discovery) order, so two builds
    over the same responses produce identical orderings. Every edge
    endpoint is a key of `nodes`.
    """

    root_id: str = Field(..., description="The paper the traversal started from")
    nodes: dict[str, PaperNode] = Field(
        default_factory=dict, description="All papers (identifier -> PaperNode)"
    )
    edges: list[CitationEdge] = Field(default_factory=list, description="Citation edges")
    depth: int = Field(..., description="Requested maximum traversal depth")
    truncated: bool = Field(
        default=False, description="True if the node bound stopped traversal early"
    )
    node_depths: dict[str, int] = Field(
        default_factory=dict, description="First discovery depth of each node"
    )
    failed: dict[str, str] = Field(
        default_factory=dict, description="Non-root papers whose lookup failed -> reason"
    )

    # Metadata
    created_at: datetime = Field(
        default_factory=datetime.utcnow, description="When the network was built"
    )

    @property
    def node_count(self) -> int:
        """Number of papers in the network."""
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        """Number of citation relationships in the network."""
        return len(self.edges)

    @property
    def root(self) -> Optional[PaperNode]:
        return self.nodes.get(self.root_id)

    def get_papers_at_depth(self, target_depth: int) -> list[PaperNode]:
        """All papers first discovered at `target_depth` hops from the root."""
        return [
            self.nodes[pid]
            for pid, depth in self.node_depths.items()
            if depth == target_depth and pid in self.nodes
        ]

    def get_cited_papers(self, paper_id: str) -> list[PaperNode]:
        """Papers that the given paper cites."""
        return [self.nodes[e.cited] for e in self.edges if e.citing == paper_id]

    def get_citing_papers(self, paper_id: str) -> list[PaperNode]:
        """Papers in the network that cite the given paper."""
        return [self.nodes[e.citing] for e in self.edges if e.cited == paper_id]

    def to_adjacency_list(self) -> dict[str, list[str]]:
        """Export network as adjacency list for graph algorithms."""
        adj: dict[str, list[str]] = {pid: [] for pid in self.nodes}
        for edge in self.edges:
            adj[edge.citing].append(edge.cited)
        return adj

    def get_stats(self) -> NetworkStats:
        return NetworkStats(
            total_papers=len(self.nodes),
            total_citations=len(self.edges),
            papers_with_references=len({e.citing for e in self.edges}),
            papers_being_cited=len({e.cited for e in self.edges}),
            unresolved_papers=sum(1 for n in self.nodes.values() if not n.resolved),
        )

    def to_graph_dict(self) -> dict[str, Any]:
        """JSON-ready graph document with `nodes` and `edges` arrays."""
        return {
            "root": self.root_id,
            "depth": self.depth,
            "truncated": self.truncated,
            "nodes": [
                {
                    **node.model_dump(mode="json"),
                    "depth": self.node_depths.get(pid),
                }
                for pid, node in self.nodes.items()
            ],
            "edges": [edge.model_dump(mode="json") for edge in self.edges],
            "failed": dict(self.failed),
        }
