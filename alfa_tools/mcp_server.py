# =============================================================================
# alfa_tools/mcp_server.py - FastMCP Tool Server
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the FastMCP server that exposes the two documentation tools:
#
#     resolve-library-id  → query           → candidate library IDs
#     get-library-docs    → library ID +    → documentation text
#                           relevance query
#
# HOW IT WORKS (the flow):
#   1. The host calls a tool by name over MCP (stdio)
#   2. FastMCP validates the arguments against the declared schema
#   3. The tool function hands them to DocsToolOrchestrator
#   4. The orchestrator makes one upstream call and shapes a ToolResponse
#   5. The ToolResponse becomes a single MCP TextContent block
#
# DEPENDENCY INJECTION:
#   create_server() takes an AlfaConfig (and optionally a client).  The
#   tools close over the orchestrator built from them; nothing here reads
#   the environment at call time.
#
# RUNNING THIS SERVER:
#   a) Through the CLI:   python main.py [--key KEY]
#   b) Standalone:        python -m alfa_tools.mcp_server
# =============================================================================

import logging
import sys
from typing import Annotated, Optional

from fastmcp import FastMCP
from mcp.types import TextContent
from pydantic import Field

from alfa_core.config import AlfaConfig
from alfa_core.models import ToolResponse
from alfa_core.orchestrator import DocsToolOrchestrator, DocumentationClient
from alfa_core.upstream import AlfaUpstreamClient

SERVER_NAME = "AlfaDocumentationServer"
SERVER_INSTRUCTIONS = (
    "Retrieves documentation for software libraries via the Alfa Crawler service."
)

RESOLVE_TOOL_NAME = "resolve-library-id"
DOCS_TOOL_NAME = "get-library-docs"

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: STDOUT carries the MCP JSON-RPC stream, and anything
# else written there corrupts it.
#
# Colors:
#   CYAN   → incoming tool calls with parameters
#   GREEN  → responses (previewed; documentation can be large)
#   YELLOW → intermediate status
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

_RESPONSE_PREVIEW_CHARS = 200

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, response: ToolResponse) -> list[TextContent]:
    """Log a preview of the response in GREEN, then convert it for MCP."""
    text = response.first_text
    preview = text if len(text) <= _RESPONSE_PREVIEW_CHARS else text[:_RESPONSE_PREVIEW_CHARS] + "..."
    logger.info(f"{_GREEN}  ← {tool_name} response ({len(text)} chars): {preview!r}{_RESET}")
    return to_text_content(response)


def to_text_content(response: ToolResponse) -> list[TextContent]:
    return [TextContent(type="text", text=block.text) for block in response.content]


# =============================================================================
# Server factory
# =============================================================================
def create_server(
    config: AlfaConfig,
    client: Optional[DocumentationClient] = None,
) -> FastMCP:
    """Build the FastMCP server with both documentation tools registered.

    Args:
        config: Process-wide settings (base URL, API key, token floor).
        client: Upstream client to use.  Defaults to an AlfaUpstreamClient
            built from `config`; tests pass a stub.

    Returns:
        A FastMCP instance ready for `.run()`.
    """
    orchestrator = DocsToolOrchestrator(
        client if client is not None else AlfaUpstreamClient(config),
        minimum_tokens=config.minimum_tokens,
    )
    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)

    # =========================================================================
    # TOOL 1: resolve-library-id
    # =========================================================================
    # Always the first call.  get-library-docs needs the `name` field this
    # tool returns.  The description tells the agent how to choose among
    # candidates because no ranking happens on this side.
    # =========================================================================
    @mcp.tool(
        name=RESOLVE_TOOL_NAME,
        description=(
            "Resolves a library name to an Alfa-compatible library ID and returns a list "
            "of matching libraries from the Alfa Crawler index.\n\n"
            "You MUST call this function before 'get-library-docs' to obtain a valid "
            "Alfa-compatible library ID (which is the library's 'name' field).\n\n"
            "When selecting the best match, consider mainly name similarity and display name."
        ),
    )
    def resolve_library_id(
        query: Annotated[
            str,
            Field(
                min_length=1,
                description="Library name or search query to find a compatible library ID.",
            ),
        ],
    ):
        _log_request(RESOLVE_TOOL_NAME, query=query)
        response = orchestrator.resolve_library_id(query)
        return _log_response(RESOLVE_TOOL_NAME, response)

    # =========================================================================
    # TOOL 2: get-library-docs
    # =========================================================================
    # Argument names are camelCase on the wire; hosts already send them
    # that way.  `tokens` accepts a number or a numeric string and is
    # raised to the configured floor.
    # =========================================================================
    @mcp.tool(
        name=DOCS_TOOL_NAME,
        description=(
            "Fetches up-to-date, relevant documentation sections for a library using its "
            "Alfa-compatible library ID and a specific query. Call 'resolve-library-id' "
            "first to get the ID."
        ),
    )
    def get_library_docs(
        alfaCompatibleLibraryID: Annotated[
            str,
            Field(description="Alfa-compatible library ID (e.g., 'nextjs')"),
        ],
        relevanceQuery: Annotated[
            str,
            Field(
                description=(
                    "You MUST provide a query to find the most relevant sections of the "
                    "documentation for your specific task or question (e.g., 'how to set up "
                    "authentication', 'usage with React hooks'). This is crucial for focused "
                    "results and to avoid retrieving entire documents."
                ),
            ),
        ],
        versionTag: Annotated[
            Optional[str],
            Field(description="Optional version tag (e.g., '1.0.0', 'latest')"),
        ] = None,
        tokens: Annotated[
            Optional[float],
            Field(
                description=(
                    f"Max number of tokens to retrieve (default: {config.minimum_tokens}). "
                    "Note: this is currently NOT USED by the underlying Alfa Crawler for "
                    "'get-library-docs' when relevanceQuery is used, as relevance search "
                    "returns a fixed number of chunks."
                ),
            ),
        ] = None,
    ):
        _log_request(
            DOCS_TOOL_NAME,
            alfaCompatibleLibraryID=alfaCompatibleLibraryID,
            versionTag=versionTag,
            relevanceQuery=relevanceQuery,
            tokens=tokens,
        )
        request = orchestrator.build_documentation_request(
            alfaCompatibleLibraryID, relevanceQuery, versionTag, tokens
        )
        _log_status(f"Effective token budget: {request.tokens}")
        response = orchestrator.fetch_documentation(request)
        return _log_response(DOCS_TOOL_NAME, response)

    return mcp


# =============================================================================
# Server entry point
# =============================================================================
# Standalone mode reads configuration from the environment only.  main.py
# additionally handles .env loading and --key/--setKey.
# =============================================================================
if __name__ == "__main__":
    from alfa_core.config import load_config

    configure_logging()
    create_server(load_config()).run()
