# =============================================================================
# alfa_core/orchestrator.py - The Two-Stage Documentation Workflow
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Implements the two tools the host can call:
#
#     1. resolve_library_id(query)
#          free text → list of candidate canonical identifiers
#     2. get_library_docs(library_id, relevance_query, version_tag, tokens)
#          identifier + relevance query → documentation text
#
#   Each makes exactly one upstream call, dispatches over the decoded
#   outcome, and returns a ToolResponse with exactly one text block.
#
# OUTCOME → TEXT (resolve-library-id):
#   TransportFailure      → "Failed to query Alfa Crawler. The service may be down."
#   UpstreamError         → "Error: <error> <message>"
#   MalformedResponse     → "Missing results in Alfa Crawler response."
#   SearchSuccess([])     → "No libraries found matching your query."
#   SearchSuccess([...])  → header + formatted candidates
#
# OUTCOME → TEXT (get-library-docs):
#   TransportFailure          → "Failed to fetch documentation. ..."
#   UpstreamError             → "Error fetching docs: <error> <message>"
#   DocumentationUnavailable  → "Alfa Crawler: <message> (Library: ..., Version: ...)"
#   MalformedResponse         → "Unexpected response: ..."
#   DocumentationSuccess      → documentationText, untouched
#
# No ranking happens here.  Candidate order is whatever the upstream sent;
# picking the right one is left to the calling agent.
# =============================================================================

import logging
from typing import Optional, Protocol, Union

from alfa_core.formatting import format_search_results
from alfa_core.models import (
    DocumentationOutcome,
    DocumentationRequest,
    DocumentationSuccess,
    DocumentationUnavailable,
    MalformedResponse,
    SearchOutcome,
    SearchSuccess,
    ToolResponse,
    TransportFailure,
    UpstreamError,
)
from alfa_core.upstream import MISSING_RESULTS_REASON

logger = logging.getLogger(__name__)

SEARCH_UNAVAILABLE_TEXT = "Failed to query Alfa Crawler. The service may be down."
NO_MATCHES_TEXT = "No libraries found matching your query."
FETCH_FAILED_TEXT = "Failed to fetch documentation. Ensure the ID and version are valid."
UNEXPECTED_DOCS_TEXT = "Unexpected response: documentationText is missing or invalid."

RESULTS_HEADER = """Available Libraries (top matches):

Each result includes:
- Library ID (name): Alfa-compatible identifier
- Display Name: Human-readable name
- Latest Scraped Version
- Last Scraped At

---

"""


class DocumentationClient(Protocol):
    """What the orchestrator needs from an upstream client."""

    def search(self, query: str) -> SearchOutcome: ...

    def fetch_documentation(self, request: DocumentationRequest) -> DocumentationOutcome: ...


def resolve_token_budget(tokens: Union[int, float, str, None], minimum: int) -> Optional[int]:
    """Coerce a requested token budget and raise it to the configured floor.

    Strings are parsed as numbers ("10" → 10).  Values under `minimum` are
    raised to it; values are never lowered.  A string that is not a number
    yields the floor.  None stays None (upstream default).
    """
    if tokens is None:
        return None
    try:
        value = int(float(tokens.strip()) if isinstance(tokens, str) else tokens)
    except (ValueError, OverflowError):
        # "abc", "nan", "inf"
        return minimum
    return minimum if value < minimum else value


class DocsToolOrchestrator:
    """Runs the resolve / fetch workflow against an upstream client."""

    def __init__(self, client: DocumentationClient, minimum_tokens: int):
        self._client = client
        self._minimum_tokens = minimum_tokens

    # -------------------------------------------------------------------------
    # resolve-library-id
    # -------------------------------------------------------------------------
    def resolve_library_id(self, query: str) -> ToolResponse:
        try:
            outcome = self._client.search(query)
        except Exception:
            logger.exception("Upstream client raised during search")
            outcome = TransportFailure()
        return ToolResponse.text(render_search_outcome(outcome))

    # -------------------------------------------------------------------------
    # get-library-docs
    # -------------------------------------------------------------------------
    def build_documentation_request(
        self,
        library_id: str,
        relevance_query: str,
        version_tag: Optional[str] = None,
        tokens: Union[int, float, str, None] = None,
    ) -> DocumentationRequest:
        return DocumentationRequest(
            library_id=library_id,
            relevance_query=relevance_query,
            version_tag=version_tag,
            tokens=resolve_token_budget(tokens, self._minimum_tokens),
        )

    def get_library_docs(
        self,
        library_id: str,
        relevance_query: str,
        version_tag: Optional[str] = None,
        tokens: Union[int, float, str, None] = None,
    ) -> ToolResponse:
        request = self.build_documentation_request(library_id, relevance_query, version_tag, tokens)
        return self.fetch_documentation(request)

    def fetch_documentation(self, request: DocumentationRequest) -> ToolResponse:
        try:
            outcome = self._client.fetch_documentation(request)
        except Exception:
            logger.exception("Upstream client raised during documentation fetch")
            outcome = TransportFailure()
        return ToolResponse.text(render_documentation_outcome(outcome, request))


def render_search_outcome(outcome: SearchOutcome) -> str:
    if isinstance(outcome, UpstreamError):
        return f"Error: {outcome.code} {outcome.message}".rstrip()
    if isinstance(outcome, MalformedResponse):
        if outcome.reason != MISSING_RESULTS_REASON:
            logger.warning(f"Unexpected search response: {outcome.reason}")
        return MISSING_RESULTS_REASON
    if isinstance(outcome, SearchSuccess):
        if not outcome.candidates:
            return NO_MATCHES_TEXT
        return RESULTS_HEADER + format_search_results(outcome.candidates)
    return SEARCH_UNAVAILABLE_TEXT


def render_documentation_outcome(
    outcome: DocumentationOutcome,
    request: DocumentationRequest,
) -> str:
    if isinstance(outcome, DocumentationSuccess):
        return outcome.text
    if isinstance(outcome, UpstreamError):
        return f"Error fetching docs: {outcome.code} {outcome.message}".rstrip()
    if isinstance(outcome, DocumentationUnavailable):
        library = outcome.library_name or request.library_id
        version = outcome.version_tag or request.version_tag or "latest"
        return f"Alfa Crawler: {outcome.message} (Library: {library}, Version: {version})"
    if isinstance(outcome, MalformedResponse):
        logger.warning(f"Unexpected documentation response: {outcome.reason}")
        return UNEXPECTED_DOCS_TEXT
    return FETCH_FAILED_TEXT
