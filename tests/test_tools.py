"""
Tests for the MCP tool handlers.
"""

import json

import pytest

from helpers import FakeLookupClient, make_result, transient
from reference_tool.core.service import ReferenceService
from reference_tool.tools import build_network, get_references

ROOT = "hep-th/9711200"


@pytest.fixture
def service(monkeypatch: pytest.MonkeyPatch) -> ReferenceService:
    service = ReferenceService(max_retries=0, request_delay_ms=0)
    service.client = FakeLookupClient(
        {
            ROOT: make_result(ROOT, ["hep-th/9802109", "hep-th/9802150", "recid:7"]),
            "hep-th/9802109": make_result("hep-th/9802109", ["recid:7"]),
            "hep-th/9802150": transient(),
            "recid:7": make_result("recid:7", []),
        }
    )
    monkeypatch.setattr(get_references, "_service", service)
    monkeypatch.setattr(build_network, "_service", service)
    return service


class TestGetReferencesTool:
    """Tests for get_paper_references."""

    @pytest.mark.asyncio
    async def test_lists_references(self, service: ReferenceService):
        content = await get_references.handle_get_references({"paper_id": ROOT, "limit": 2})
        data = json.loads(content[0].text)

        assert data["total_references"] == 3
        assert len(data["references"]) == 2
        assert data["note"] == "Showing 2 of 3 references."

    @pytest.mark.asyncio
    async def test_error_is_reported(self, service: ReferenceService):
        content = await get_references.handle_get_references({"paper_id": "2301.99999"})
        assert "error" in json.loads(content[0].text)


class TestBuildNetworkTool:
    """Tests for build_citation_network."""

    @pytest.mark.asyncio
    async def test_builds_network(self, service: ReferenceService):
        content = await build_network.handle_build_network({"paper_id": ROOT, "depth": 2})
        data = json.loads(content[0].text)

        assert data["paper_id"] == ROOT
        assert data["statistics"]["total_papers"] == 4
        assert data["statistics"]["unresolved_papers"] == 1
        assert data["most_cited_in_network"][0]["paper_id"] == "recid:7"
        assert data["most_cited_in_network"][0]["citations_in_network"] == 2
        assert list(data["unresolved"]) == ["hep-th/9802150"]

    @pytest.mark.asyncio
    async def test_root_failure_is_reported(self, service: ReferenceService):
        content = await build_network.handle_build_network({"paper_id": "2301.99999"})
        assert "error" in json.loads(content[0].text)
