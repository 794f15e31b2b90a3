"""
Importing this package registers every Qdrant tool on the shared FastMCP instance.
"""

from core.mcp.tools import (  # noqa: F401
    batch,
    cluster,
    collections,
    indexes,
    payload,
    points,
    search,
    service,
    snapshots,
    vectors,
)
