# =============================================================================
# alfa_core/formatting.py - Search Result Rendering
# =============================================================================
#
# Turns a list of LibraryCandidate into the text block the resolve tool
# returns.  One paragraph per candidate, in upstream order, with the
# optional fields omitted when the upstream did not send them:
#
#   - Library ID (name): react
#     Display Name: React
#     Latest Scraped Version: 18.3.1
#     Last Scraped At: 2025-05-01 12:30:00 UTC
# =============================================================================

from datetime import datetime, timezone
from typing import Iterable, Optional

from alfa_core.models import LibraryCandidate

NO_LIBRARIES_TEXT = "No libraries found."


def format_search_results(candidates: Iterable[LibraryCandidate]) -> str:
    """Render candidates as blank-line separated paragraphs."""
    blocks = [format_candidate(candidate) for candidate in candidates]
    if not blocks:
        return NO_LIBRARIES_TEXT
    return "\n\n".join(blocks)


def format_candidate(candidate: LibraryCandidate) -> str:
    lines = [f"- Library ID (name): {candidate.name}"]
    if candidate.display_name:
        lines.append(f"  Display Name: {candidate.display_name}")
    if candidate.latest_doc_version_scraped:
        lines.append(f"  Latest Scraped Version: {candidate.latest_doc_version_scraped}")
    if candidate.last_scraped_at:
        lines.append(f"  Last Scraped At: {format_timestamp(candidate.last_scraped_at)}")
    return "\n".join(lines)


def format_timestamp(value: str) -> str:
    """Render an ISO-8601 timestamp in UTC; unparseable values pass through.

    The output does not depend on the server's locale or timezone, so the
    same upstream payload always renders the same text.
    """
    parsed = _parse_iso(value)
    if parsed is None:
        return value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def _parse_iso(value: str) -> Optional[datetime]:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
