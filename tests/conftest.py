"""
Shared test fixtures for reference-tool tests.
"""

import os
from pathlib import Path

import pytest

from helpers import FakeClock
from reference_tool.config import Settings
from reference_tool.core.models import CitationEdge, CitationNetwork, PaperNode, Reference


@pytest.fixture
def sample_node() -> PaperNode:
    """Create a sample paper node for testing."""
    return PaperNode(
        identifier="hep-th/9711200",
        title="The Large N Limit of Superconformal Field Theories and Supergravity",
        authors=["Maldacena, Juan Martin"],
        year=1997,
        categories=("hep-th", "Theory-HEP"),
        record_id="451647",
        arxiv_id="hep-th/9711200",
    )


@pytest.fixture
def sample_references() -> list[Reference]:
    """Create a list of sample references."""
    return [
        Reference(
            title="First Test Paper",
            authors=["Alice Smith", "Bob Jones"],
            arxiv_id="2301.12345",
            record_id="123456",
            categories=["hep-th"],
            year=2023,
        ),
        Reference(
            title="Second Test Paper",
            authors=["Charlie Brown"],
            arxiv_id="2302.67890",
            record_id="789012",
            categories=["hep-ph"],
            year=2023,
        ),
    ]


@pytest.fixture
def sample_network(sample_node: PaperNode) -> CitationNetwork:
    """Create a sample citation network: root citing three papers."""
    nodes = {sample_node.identifier: sample_node}
    edges = []
    depths = {sample_node.identifier: 0}

    for i in range(3):
        node = PaperNode(
            identifier=f"recid:{i + 1}",
            title=f"Network Paper {i}",
            authors=[f"Author {i}"],
            year=1990 + i,
            categories=("hep-th",),
            record_id=str(i + 1),
        )
        nodes[node.identifier] = node
        depths[node.identifier] = 1
        edges.append(CitationEdge(citing=sample_node.identifier, cited=node.identifier))

    return CitationNetwork(
        root_id=sample_node.identifier,
        nodes=nodes,
        edges=edges,
        depth=1,
        node_depths=depths,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def temp_config(tmp_path: Path) -> Path:
    """Path for a temporary TOML config file."""
    return tmp_path / "config" / "config.toml"


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove REFTOOL_ variables that would leak into Settings."""
    for key in list(os.environ):
        if key.startswith("REFTOOL_"):
            monkeypatch.delenv(key)


@pytest.fixture
def settings(clean_env) -> Settings:
    """Default settings without any config file."""
    return Settings()
