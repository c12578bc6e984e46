"""OASTH (Thessaloniki) transit and ATH.ENA card decoding MCP server."""

__version__ = "0.1.0"
