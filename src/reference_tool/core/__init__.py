"""
Core reference lookup and citation network module.

This module contains the pure Python business logic with NO MCP dependencies.
It can be used directly by the CLI or other Python code.

Example usage:
    from reference_tool.core import ReferenceService

    service = ReferenceService()
    network = await service.build_citation_network("hep-th/9711200", depth=2)
"""

from .cancellation import CancelToken
from .client import InspireClient
from .errors import (
    BuildErrorKind,
    LookupErrorKind,
    NetworkBuildError,
    OperationCancelled,
    PaperLookupError,
)
from .lookup import ResilientLookup
from .models import (
    CitationEdge,
    CitationNetwork,
    LookupResult,
    NetworkStats,
    PaperNode,
    Reference,
    normalize_identifier,
)
from .network import NetworkBuilder
from .service import ReferenceService

__all__ = [
    # Models
    "CitationEdge",
    "CitationNetwork",
    "LookupResult",
    "NetworkStats",
    "PaperNode",
    "Reference",
    "normalize_identifier",
    # Errors
    "BuildErrorKind",
    "LookupErrorKind",
    "NetworkBuildError",
    "OperationCancelled",
    "PaperLookupError",
    # Traversal
    "CancelToken",
    "InspireClient",
    "ResilientLookup",
    "NetworkBuilder",
    # Service
    "ReferenceService",
]
