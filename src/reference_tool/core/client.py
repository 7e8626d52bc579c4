"""
INSPIRE-HEP API client.

Direct HTTP client for the INSPIRE-HEP literature API using httpx.
Every failure is raised as a classified PaperLookupError so callers can
decide between retrying, skipping and aborting.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .errors import LookupErrorKind, PaperLookupError
from .models import (
    LookupResult,
    PaperNode,
    Reference,
    RECID_PREFIX,
    is_record_identifier,
    normalize_identifier,
)

logger = logging.getLogger("reference-tool")

# INSPIRE-HEP API base URL
BASE_URL = "https://inspirehep.net/api"


def _field(data: dict[str, Any], key: str, expected: type) -> Any:
    """`data[key]`, or None when absent. ValueError if it has another type."""
    value = data.get(key)
    if value is not None and not isinstance(value, expected):
        raise ValueError(
            f"'{key}' should be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _first_entry(data: dict[str, Any], key: str) -> dict[str, Any]:
    """First object of the list under `key`, or {} when there is none."""
    items = _field(data, key, list) or []
    if not items:
        return {}
    if not isinstance(items[0], dict):
        raise ValueError(f"'{key}' entries should be objects")
    return items[0]


def _entries(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """Objects of the list under `key`; other items are ignored."""
    return [item for item in _field(data, key, list) or [] if isinstance(item, dict)]


class InspireClient:
    """
    Async client for the INSPIRE-HEP literature API.

    One lookup returns both a paper's metadata and its reference list,
    since INSPIRE embeds references in the literature record.
    """

    # Fields to request for paper metadata and references
    RECORD_FIELDS = [
        "control_number",
        "titles",
        "authors.full_name",
        "arxiv_eprints",
        "inspire_categories",
        "preprint_date",
        "imprints",
        "references",
    ]

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 30,
    ):
        """
        Initialize the INSPIRE client.

        Args:
            base_url: API root, e.g. 'https://inspirehep.net/api'.
            timeout: Transport-level request timeout in seconds.
        """
        self.base_url = base_url
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        return self._client

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET a path and decode the JSON body, classifying any failure."""
        client = await self._get_client()

        try:
            response = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise PaperLookupError(
                LookupErrorKind.TRANSIENT, f"Request to {path} timed out", cause=e
            ) from e
        except httpx.TransportError as e:
            raise PaperLookupError(
                LookupErrorKind.TRANSIENT, f"Transport error requesting {path}: {e}", cause=e
            ) from e

        status = response.status_code
        if status == 404:
            raise PaperLookupError(LookupErrorKind.NOT_FOUND, f"No record at {path}")
        if status == 400:
            raise PaperLookupError(LookupErrorKind.MALFORMED, f"Bad request for {path}")
        if status == 429 or status >= 500:
            raise PaperLookupError(
                LookupErrorKind.TRANSIENT, f"INSPIRE answered {status} for {path}"
            )
        if status >= 400:
            raise PaperLookupError(
                LookupErrorKind.FATAL, f"INSPIRE rejected request for {path}: {status}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise PaperLookupError(
                LookupErrorKind.FATAL, f"Invalid JSON from {path}", cause=e
            ) from e

        if not isinstance(data, dict):
            raise PaperLookupError(LookupErrorKind.FATAL, "Invalid response format")
        return data

    async def fetch_record(self, identifier: str) -> dict[str, Any]:
        """
        Fetch the raw literature metadata for a paper.

        arXiv ids are resolved through a literature search; record ids
        ('recid:NNN') are fetched directly.
        """
        paper_id = normalize_identifier(identifier)
        fields = ",".join(self.RECORD_FIELDS)

        if is_record_identifier(paper_id):
            recid = paper_id[len(RECID_PREFIX):]
            logger.debug(f"Fetching record {recid}")
            data = await self._get_json(f"/literature/{recid}", {"fields": fields})
            metadata = data.get("metadata")
        else:
            query = f"arxiv:{paper_id}"
            logger.debug(f"Searching for paper with query: {query}")
            data = await self._get_json(
                "/literature", {"q": query, "size": 1, "fields": fields}
            )
            envelope = data.get("hits")
            hits = envelope.get("hits") if isinstance(envelope, dict) else None
            if not isinstance(hits, list):
                raise PaperLookupError(LookupErrorKind.FATAL, "Invalid response format")
            if not hits:
                raise PaperLookupError(
                    LookupErrorKind.NOT_FOUND, f"Paper not found with ArXiv ID: {paper_id}"
                )
            metadata = hits[0].get("metadata") if isinstance(hits[0], dict) else None

        if not isinstance(metadata, dict):
            raise PaperLookupError(LookupErrorKind.FATAL, "Invalid response format")
        return metadata

    def _parse_year(self, date: Any) -> Optional[int]:
        if not isinstance(date, str):
            return None
        try:
            return int(date.split("-")[0])
        except ValueError:
            return None

    def _parse_authors(self, data: dict[str, Any]) -> list[str]:
        return [
            a["full_name"]
            for a in _entries(data, "authors")
            if isinstance(a.get("full_name"), str)
        ]

    def _parse_terms(self, data: dict[str, Any]) -> list[str]:
        return [
            cat["term"]
            for cat in _entries(data, "inspire_categories")
            if isinstance(cat.get("term"), str) and cat["term"]
        ]

    def _parse_paper(self, data: dict[str, Any], identifier: str) -> PaperNode:
        """
        Convert a literature record to a PaperNode keyed by `identifier`.

        Raises:
            ValueError: If a field has an unexpected type.
        """
        control_number = data.get("control_number")
        if control_number is None:
            raise PaperLookupError(LookupErrorKind.FATAL, "Missing control number")
        if not isinstance(control_number, (int, str)):
            raise ValueError(
                f"'control_number' should be int, got {type(control_number).__name__}"
            )

        title = _field(_first_entry(data, "titles"), "title", str) or "Unknown Title"

        eprint = _first_entry(data, "arxiv_eprints")
        arxiv_id = _field(eprint, "value", str)

        # arXiv categories first (primary class leads), then INSPIRE terms
        categories = [
            c for c in _field(eprint, "categories", list) or [] if isinstance(c, str)
        ]
        categories.extend(self._parse_terms(data))

        year = self._parse_year(data.get("preprint_date")) or self._parse_year(
            _first_entry(data, "imprints").get("date")
        )

        return PaperNode(
            identifier=identifier,
            title=title,
            authors=self._parse_authors(data),
            year=year,
            categories=tuple(dict.fromkeys(categories)),
            record_id=str(control_number),
            arxiv_id=arxiv_id,
        )

    def _parse_reference(self, data: dict[str, Any]) -> Reference:
        """
        Convert one entry of a record's `references` list.

        Raises:
            ValueError: If the entry does not have the expected shape.
        """
        ref = _field(data, "reference", dict) or {}

        record_ref = _field(_field(data, "record", dict) or {}, "$ref", str)
        record_id = record_ref.rstrip("/").split("/")[-1] if record_ref else None

        year = self._parse_year((_field(ref, "imprint", dict) or {}).get("date"))
        if year is None:
            pub_year = (_field(ref, "publication_info", dict) or {}).get("year")
            year = pub_year if isinstance(pub_year, int) else None

        return Reference(
            title=_field(_field(ref, "title", dict) or {}, "title", str) or "Unknown Title",
            authors=self._parse_authors(ref),
            arxiv_id=_field(ref, "arxiv_eprint", str),
            record_id=record_id,
            categories=self._parse_terms(ref),
            year=year,
        )

    async def lookup(self, identifier: str) -> LookupResult:
        """
        Fetch a paper and the identifiers it cites.

        Args:
            identifier: arXiv ID (e.g. 'hep-th/9711200') or 'recid:NNN'.

        Returns:
            LookupResult with the PaperNode and its ordered references.

        Raises:
            PaperLookupError: classified as not found, transient,
                malformed or fatal.
        """
        paper_id = normalize_identifier(identifier)
        metadata = await self.fetch_record(paper_id)

        try:
            node = self._parse_paper(metadata, identifier=paper_id)
            entries = _entries(metadata, "references")
        except ValueError as e:
            raise PaperLookupError(
                LookupErrorKind.MALFORMED, f"Malformed record for {paper_id}: {e}", cause=e
            ) from e

        references = []
        for entry in entries:
            try:
                references.append(self._parse_reference(entry))
            except ValueError as e:
                # One unreadable entry does not invalidate the record
                logger.debug(f"Skipping reference of {paper_id}: {e}")

        logger.info(f"Found {len(references)} references for {paper_id}")
        return LookupResult(node=node, references=references)

    async def get_paper_by_arxiv(self, arxiv_id: str) -> PaperNode:
        """Get paper metadata by arXiv ID."""
        result = await self.lookup(arxiv_id)
        return result.node

    async def get_paper_references(self, paper_id: str) -> list[Reference]:
        """Get the reference list of a paper."""
        result = await self.lookup(paper_id)
        return result.references

    async def close(self) -> None:
        """Close the client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
