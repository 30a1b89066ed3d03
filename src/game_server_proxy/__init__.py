"""Game Server Proxy.

Aggregates paginated public-server listings from a game API, ranks them, and
serves short-lived cached results over HTTP and MCP.
"""

__version__ = "0.1.0"
