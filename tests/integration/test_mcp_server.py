import asyncio

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from alfa_core.models import (
    DocumentationSuccess,
    DocumentationUnavailable,
    LibraryCandidate,
    SearchSuccess,
    TransportFailure,
)
from alfa_tools.mcp_server import DOCS_TOOL_NAME, RESOLVE_TOOL_NAME, create_server
from tests.conftest import StubDocsClient


def _call_tool(server, name: str, arguments: dict):
    async def _run():
        async with Client(server) as client:
            return await client.call_tool(name, arguments)

    return asyncio.run(_run())


def _list_tools(server):
    async def _run():
        async with Client(server) as client:
            return await client.list_tools()

    return asyncio.run(_run())


def test_server_exposes_both_tools_with_schemas(config, stub_client) -> None:
    tools = {tool.name: tool for tool in _list_tools(create_server(config, stub_client))}

    assert set(tools) == {RESOLVE_TOOL_NAME, DOCS_TOOL_NAME}

    resolve_schema = tools[RESOLVE_TOOL_NAME].inputSchema
    assert resolve_schema["required"] == ["query"]
    assert resolve_schema["properties"]["query"]["minLength"] == 1

    docs_schema = tools[DOCS_TOOL_NAME].inputSchema
    assert set(docs_schema["required"]) == {"alfaCompatibleLibraryID", "relevanceQuery"}
    assert {"versionTag", "tokens"} <= set(docs_schema["properties"])


def test_resolve_round_trip_returns_single_text_block(config) -> None:
    client = StubDocsClient(
        search_outcome=SearchSuccess(
            candidates=(LibraryCandidate(name="react", display_name="React"),)
        )
    )

    result = _call_tool(create_server(config, client), RESOLVE_TOOL_NAME, {"query": "react"})

    assert len(result.content) == 1
    assert result.content[0].type == "text"
    assert "- Library ID (name): react" in result.content[0].text
    assert "  Display Name: React" in result.content[0].text
    assert client.queries == ["react"]


def test_resolve_transport_failure_is_not_a_protocol_error(config) -> None:
    client = StubDocsClient(search_outcome=TransportFailure())

    result = _call_tool(create_server(config, client), RESOLVE_TOOL_NAME, {"query": "react"})

    assert not result.is_error
    assert "service may be down" in result.content[0].text


def test_resolve_rejects_empty_query(config, stub_client) -> None:
    with pytest.raises(ToolError):
        _call_tool(create_server(config, stub_client), RESOLVE_TOOL_NAME, {"query": ""})

    assert stub_client.queries == []


def test_get_docs_round_trip_coerces_string_tokens(config) -> None:
    client = StubDocsClient(docs_outcome=DocumentationSuccess("# Routing\n"))

    result = _call_tool(
        create_server(config, client),
        DOCS_TOOL_NAME,
        {
            "alfaCompatibleLibraryID": "nextjs",
            "relevanceQuery": "app router",
            "tokens": "10",
        },
    )

    assert [block.text for block in result.content] == ["# Routing\n"]
    request = client.requests[0]
    assert request.library_id == "nextjs"
    assert request.relevance_query == "app router"
    assert request.version_tag is None
    assert request.tokens == 5000


def test_get_docs_keeps_tokens_above_floor(config) -> None:
    client = StubDocsClient(docs_outcome=DocumentationSuccess("docs"))

    _call_tool(
        create_server(config, client),
        DOCS_TOOL_NAME,
        {"alfaCompatibleLibraryID": "nextjs", "relevanceQuery": "q", "tokens": 6000},
    )

    assert client.requests[0].tokens == 6000


def test_get_docs_unavailable_version(config) -> None:
    client = StubDocsClient(
        docs_outcome=DocumentationUnavailable(
            message="no docs", library_name="foo", version_tag="1.0"
        )
    )

    result = _call_tool(
        create_server(config, client),
        DOCS_TOOL_NAME,
        {"alfaCompatibleLibraryID": "foo", "relevanceQuery": "q", "versionTag": "1.0"},
    )

    assert result.content[0].text == "Alfa Crawler: no docs (Library: foo, Version: 1.0)"


def test_get_docs_requires_relevance_query(config, stub_client) -> None:
    with pytest.raises(ToolError):
        _call_tool(
            create_server(config, stub_client),
            DOCS_TOOL_NAME,
            {"alfaCompatibleLibraryID": "foo"},
        )

    assert stub_client.requests == []


def test_get_docs_rejects_non_numeric_tokens(config, stub_client) -> None:
    with pytest.raises(ToolError):
        _call_tool(
            create_server(config, stub_client),
            DOCS_TOOL_NAME,
            {"alfaCompatibleLibraryID": "foo", "relevanceQuery": "q", "tokens": "abc"},
        )

    assert stub_client.requests == []


def test_get_docs_tokens_schema_is_numeric(config, stub_client) -> None:
    tools = {tool.name: tool for tool in _list_tools(create_server(config, stub_client))}

    tokens_schema = tools[DOCS_TOOL_NAME].inputSchema["properties"]["tokens"]
    variants = tokens_schema.get("anyOf", [tokens_schema])
    assert {"type": "string"} not in variants
    assert {"type": "number"} in variants
