"""
Test doubles shared by the test modules.
"""

import asyncio
from typing import Union

from reference_tool.core.errors import LookupErrorKind, PaperLookupError
from reference_tool.core.models import LookupResult, PaperNode, Reference

Outcome = Union[LookupResult, PaperLookupError]


def make_result(
    paper_id: str,
    refs: list[str],
    categories: tuple[str, ...] = ("hep-th",),
) -> LookupResult:
    """LookupResult for `paper_id` citing `refs` (arXiv ids or 'recid:N')."""
    references = []
    for ref in refs:
        if ref.startswith("recid:"):
            references.append(Reference(title=f"Ref {ref}", record_id=ref[len("recid:"):]))
        else:
            references.append(Reference(title=f"Ref {ref}", arxiv_id=ref))
    return LookupResult(
        node=PaperNode(
            identifier=paper_id,
            title=f"Paper {paper_id}",
            authors=["Maldacena, Juan"],
            year=1997,
            categories=categories,
            arxiv_id=paper_id,
        ),
        references=references,
    )


def transient(message: str = "503 Service Unavailable") -> PaperLookupError:
    return PaperLookupError(LookupErrorKind.TRANSIENT, message)


class FakeLookupClient:
    """
    Scripted stand-in for InspireClient.

    `responses` maps an identifier to a LookupResult, an error, or a list
    of outcomes consumed one per call (the last one repeats).
    """

    def __init__(self, responses: dict[str, Union[Outcome, list[Outcome]]]):
        self.responses = responses
        self.calls: list[str] = []

    async def lookup(self, identifier: str) -> LookupResult:
        self.calls.append(identifier)
        outcome = self.responses.get(identifier)
        if outcome is None:
            raise PaperLookupError(LookupErrorKind.NOT_FOUND, f"No record for {identifier}")
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, PaperLookupError):
            raise outcome
        return outcome

    async def close(self) -> None:
        pass


class FakeClock:
    """Manual monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)
