# =============================================================================
# alfa_core/models.py - Data Models (the "nouns" of the gateway)
# =============================================================================
#
# Every value here is request-scoped: built for one tool call, discarded
# once the ToolResponse has been sent.  Nothing is persisted.
#
# THREE GROUPS:
#   1. Inputs       → LibraryCandidate, DocumentationRequest
#   2. Outcomes     → the closed set of variants the upstream client decodes
#                     every raw payload into.  The orchestrator dispatches
#                     over these with isinstance() instead of probing dict
#                     keys.
#   3. The envelope → ToolResponse, the ONLY shape the host ever receives.
# =============================================================================

from dataclasses import dataclass, field
from typing import Optional, Union


# -----------------------------------------------------------------------------
# LibraryCandidate - one match returned by /search-libraries
# -----------------------------------------------------------------------------
# Wire keys are camelCase (name, displayName, latestDocVersionScraped,
# lastScrapedAt).  Only `name` is required: it is the canonical identifier
# passed back to get-library-docs.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class LibraryCandidate:
    """A library the upstream index matched against a search query."""

    name: str
    display_name: Optional[str] = None
    latest_doc_version_scraped: Optional[str] = None
    last_scraped_at: Optional[str] = None      # ISO-8601 timestamp as sent

    @classmethod
    def from_payload(cls, payload: dict) -> "LibraryCandidate":
        return cls(
            name=payload["name"],
            display_name=_optional_str(payload.get("displayName")),
            latest_doc_version_scraped=_optional_str(payload.get("latestDocVersionScraped")),
            last_scraped_at=_optional_str(payload.get("lastScrapedAt")),
        )


@dataclass(frozen=True)
class DocumentationRequest:
    """Arguments for one /fetch-library-documentation call."""

    library_id: str
    relevance_query: str
    version_tag: Optional[str] = None
    # Already coerced and raised to the configured floor.  The upstream
    # relevance search returns a fixed number of chunks, so this is not
    # sent on the wire.
    tokens: Optional[int] = None


# -----------------------------------------------------------------------------
# Outcome variants
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TransportFailure:
    """Upstream unreachable, not configured, or its body was not JSON."""


@dataclass(frozen=True)
class UpstreamError:
    """A structured {error, message} payload reported by the upstream."""

    code: str
    message: str = ""


@dataclass(frozen=True)
class MalformedResponse:
    """The upstream answered, but not in the shape the contract promises."""

    reason: str


@dataclass(frozen=True)
class SearchSuccess:
    candidates: tuple[LibraryCandidate, ...] = ()


@dataclass(frozen=True)
class DocumentationSuccess:
    text: str


@dataclass(frozen=True)
class DocumentationUnavailable:
    """The library exists, but there is no documentation for the version."""

    message: str
    library_name: Optional[str] = None
    version_tag: Optional[str] = None


SearchOutcome = Union[SearchSuccess, UpstreamError, MalformedResponse, TransportFailure]
DocumentationOutcome = Union[
    DocumentationSuccess,
    DocumentationUnavailable,
    UpstreamError,
    MalformedResponse,
    TransportFailure,
]


# -----------------------------------------------------------------------------
# ToolResponse - the uniform envelope
# -----------------------------------------------------------------------------
# Success, upstream error, empty result, and transport failure all end up
# here as ordered text blocks, so the host never branches on error kinds.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TextBlock:
    text: str
    type: str = "text"


@dataclass(frozen=True)
class ToolResponse:
    content: tuple[TextBlock, ...] = field(default_factory=tuple)

    @classmethod
    def text(cls, text: str) -> "ToolResponse":
        return cls(content=(TextBlock(text=text),))

    @property
    def first_text(self) -> str:
        return self.content[0].text if self.content else ""


def _optional_str(value) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)
