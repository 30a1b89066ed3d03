"""Core listing pipeline — fetch, paginate, normalize, rank, cache.

This module is framework-agnostic. It has no dependency on MCP, Starlette,
or any server framework; ``server.py`` wires it to the outside world.
"""
