# =============================================================================
# alfa_tools/__init__.py
# =============================================================================
# This package is the MCP face of the gateway.
#
# ARCHITECTURAL ROLE:
#   alfa_tools/ translates between FastMCP and alfa_core/.  It:
#     1. Declares each tool's name, description, and input schema
#     2. Hands validated arguments to the DocsToolOrchestrator
#     3. Converts the resulting ToolResponse into MCP TextContent blocks
#     4. Logs every request and response to stderr
#
#   It holds no workflow logic: deciding what text a failure turns into is
#   alfa_core/orchestrator.py's job.
# =============================================================================
