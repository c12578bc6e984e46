"""Shared MCP application instance.

Tool modules register on this object; server.py imports them and runs it.
Keeping the instance here avoids a circular import between server and tools.
"""

from mcp.server.fastmcp import FastMCP

mcp = FastMCP(
    "OASTH Transit",
    instructions=(
        "Thessaloniki OASTH bus information - lines, routes, stops, live arrivals, "
        "bus locations, and ATH.ENA transit card decoding"
    ),
)
