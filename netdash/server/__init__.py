# ============================================================================
# netdash/server/__init__.py
# Server Package - local HTTP boundary
# ============================================================================
#
# PURPOSE:
# Exposes the diagnostics facade to the desktop UI over loopback HTTP.
#
# API ARCHITECTURE:
# UI <- HTTP (JSON / NDJSON) -> FastAPI app -> DiagnosticsService
#
# WHAT THE SERVER DOES:
# - **Invoke**: POST /v1/invoke forwards {operation, args} to dispatch()
# - **Typed routes**: /v1/network/* and /v1/system/* per operation
# - **Authentication**: Optional bearer token (NETDASH_REQUIRE_AUTH)
# - **CORS**: Origin patterns with wildcard ports for the UI shell
#
# ============================================================================
