# =============================================================================
# alfa_core/__init__.py
# =============================================================================
# This package contains everything the documentation gateway does that is
# not MCP plumbing: configuration, the upstream HTTP client, payload
# decoding, result formatting, and the two-stage tool workflow.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP.  Every module here can be
#   exercised from a bare Python REPL with a stub client and no network.
#   alfa_tools/ wraps these functions as MCP tools; this package is the
#   engine behind them.
# =============================================================================
