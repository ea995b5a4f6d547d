# =============================================================================
# alfa_core/upstream.py - Alfa Crawler HTTP Client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Talks to the two Alfa Crawler endpoints and turns whatever comes back
#   into one of a small, closed set of outcome values (see models.py).
#
# TWO LAYERS:
#   1. search_raw() / fetch_documentation_raw()
#        One authenticated GET each.  The result is tri-state:
#          - the parsed JSON body on 2xx
#          - the parsed JSON error body on non-2xx (when it is JSON)
#          - None for everything else (DNS, refused connection, timeout,
#            missing base URL, unparseable body)
#   2. decode_search_payload() / decode_documentation_payload()
#        Pure functions that classify the raw payload into SearchSuccess,
#        DocumentationSuccess, DocumentationUnavailable, UpstreamError,
#        MalformedResponse, or TransportFailure.
#
# FAILURE POLICY:
#   No retries.  No exception escapes this module: every failure collapses
#   into None at layer 1 and into an outcome value at layer 2.  The request
#   timeout is whatever AlfaConfig.request_timeout says; None means the
#   call blocks until the transport gives up.
# =============================================================================

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Optional

from alfa_core.config import AlfaConfig
from alfa_core.models import (
    DocumentationOutcome,
    DocumentationRequest,
    DocumentationSuccess,
    DocumentationUnavailable,
    LibraryCandidate,
    MalformedResponse,
    SearchOutcome,
    SearchSuccess,
    TransportFailure,
    UpstreamError,
)

logger = logging.getLogger(__name__)

SEARCH_PATH = "/search-libraries"
FETCH_DOCUMENTATION_PATH = "/fetch-library-documentation"

MISSING_RESULTS_REASON = "Missing results in Alfa Crawler response."


class AlfaUpstreamClient:
    """Authenticated GET client for the Alfa Crawler API."""

    def __init__(self, config: AlfaConfig):
        self._config = config

    # -------------------------------------------------------------------------
    # Decoded API (what the orchestrator uses)
    # -------------------------------------------------------------------------
    def search(self, query: str) -> SearchOutcome:
        return decode_search_payload(self.search_raw(query))

    def fetch_documentation(self, request: DocumentationRequest) -> DocumentationOutcome:
        return decode_documentation_payload(self.fetch_documentation_raw(request))

    # -------------------------------------------------------------------------
    # Raw tri-state API
    # -------------------------------------------------------------------------
    def search_raw(self, query: str) -> Optional[Any]:
        return self._get(SEARCH_PATH, [("query", query)])

    def fetch_documentation_raw(self, request: DocumentationRequest) -> Optional[Any]:
        params = [("libraryName", request.library_id)]
        if request.version_tag:
            params.append(("versionTag", request.version_tag))
        if request.relevance_query:
            params.append(("queryText", request.relevance_query))
        return self._get(FETCH_DOCUMENTATION_PATH, params)

    def build_url(self, path: str, params: list[tuple[str, str]]) -> str:
        base = (self._config.base_url or "").rstrip("/")
        return f"{base}{path}?{urllib.parse.urlencode(params)}"

    def build_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    def _get(self, path: str, params: list[tuple[str, str]]) -> Optional[Any]:
        if not self._config.base_url:
            logger.error("ALFA_CRAWLER_API_BASE_URL is not configured.")
            return None

        kwargs = {}
        if self._config.request_timeout is not None:
            kwargs["timeout"] = self._config.request_timeout

        try:
            req = urllib.request.Request(
                self.build_url(path, params),
                headers=self.build_headers(),
                method="GET",
            )
            with urllib.request.urlopen(req, **kwargs) as response:
                body = response.read()
        except urllib.error.HTTPError as e:
            # Non-2xx.  The error body may still carry {error, message}.
            logger.error(f"Error calling Alfa Crawler {path}: {e.code} {e.reason}")
            error_body = _parse_json(_read_error_body(e))
            if error_body is not None:
                logger.error(f"Error body: {error_body}")
            return error_body
        except (OSError, http.client.HTTPException, ValueError) as e:
            # ValueError: base URL without a scheme ("unknown url type")
            logger.error(f"Failed to fetch from {path}: {e}")
            return None

        payload = _parse_json(body)
        if payload is None:
            logger.error(f"Alfa Crawler {path} returned a body that is not JSON.")
        return payload


def _read_error_body(error: urllib.error.HTTPError) -> bytes:
    try:
        return error.read()
    except (OSError, http.client.HTTPException):
        return b""


def _parse_json(body: bytes) -> Optional[Any]:
    if not body:
        return None
    try:
        return json.loads(body.decode("utf-8"))
    except (ValueError, RecursionError):
        return None


# =============================================================================
# Payload decoding
# =============================================================================
# The order of checks matters and mirrors the upstream contract:
#   None → transport, non-object → malformed, `error` → upstream error,
#   then the endpoint-specific success fields.
# =============================================================================
def decode_search_payload(payload: Optional[Any]) -> SearchOutcome:
    """Classify a raw /search-libraries payload."""
    if payload is None:
        return TransportFailure()
    if not isinstance(payload, dict):
        return MalformedResponse(f"Expected a JSON object, got {type(payload).__name__}.")
    error = _upstream_error(payload)
    if error is not None:
        return error

    results = payload.get("results")
    if results is None:
        return MalformedResponse(MISSING_RESULTS_REASON)
    if not isinstance(results, list):
        return MalformedResponse("`results` is not a list.")

    candidates = []
    for index, entry in enumerate(results):
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            logger.warning(f"Skipping search result {index}: no library name.")
            continue
        candidates.append(LibraryCandidate.from_payload(entry))
    return SearchSuccess(candidates=tuple(candidates))


def decode_documentation_payload(payload: Optional[Any]) -> DocumentationOutcome:
    """Classify a raw /fetch-library-documentation payload."""
    if payload is None:
        return TransportFailure()
    if not isinstance(payload, dict):
        return MalformedResponse(f"Expected a JSON object, got {type(payload).__name__}.")
    error = _upstream_error(payload)
    if error is not None:
        return error

    text = payload.get("documentationText")
    message = payload.get("message")
    if not text and message:
        return DocumentationUnavailable(
            message=str(message),
            library_name=_optional_field(payload, "libraryName"),
            version_tag=_optional_field(payload, "versionTag"),
        )
    if not isinstance(text, str):
        return MalformedResponse("documentationText is missing or invalid.")
    return DocumentationSuccess(text=text)


def _upstream_error(payload: dict) -> Optional[UpstreamError]:
    error = payload.get("error")
    if not error:
        return None
    message = payload.get("message")
    return UpstreamError(code=str(error), message="" if message is None else str(message))


def _optional_field(payload: dict, key: str) -> Optional[str]:
    value = payload.get(key)
    return None if value is None else str(value)
