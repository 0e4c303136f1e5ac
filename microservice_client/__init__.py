"""
Authenticated HTTP clients for downstream microservices.

Submodules cover configuration, the credential cache and session store, the
authenticating request transport, the typed endpoint clients and the MCP tool
server that exposes them.
"""

__all__ = []
