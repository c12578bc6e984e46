import argparse
import asyncio
import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel

from oasth_mcp.app import mcp
from oasth_mcp.data.config import get_oasth_config
from oasth_mcp.data.oasth_client import OASTHClient
from oasth_mcp.models.card import CardDump
from oasth_mcp.tools import card_tools, transit_tools  # noqa: F401  (importing registers the tools)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


@mcp.tool()
def health() -> HealthResponse:
    """Check if the OASTH MCP server is running and healthy.

    Returns the server status, version, and current timestamp.
    """
    from oasth_mcp import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


def run_decode_card(dump_path: Path) -> str:
    """Decode a card dump JSON file and return the ticket as JSON."""
    dump = CardDump.model_validate_json(dump_path.read_text(encoding="utf-8"))
    response = card_tools.decode_dump(dump)
    return response.model_dump_json(indent=2)


async def run_fetch(endpoint: str, param: str | None) -> str:
    """Fetch one endpoint and return its decoded records as JSON."""
    async with OASTHClient(get_oasth_config()) as client:
        payload = await client.fetch(endpoint, param)
    return json.dumps(
        {"kind": payload.kind.value, "records": payload.records},
        ensure_ascii=False,
        indent=2,
    )


def _add_verbose(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="oasth-mcp",
        description="OASTH Transit MCP Server",
    )
    subparsers = parser.add_subparsers(dest="command")

    # decode-card command
    decode_parser = subparsers.add_parser(
        "decode-card",
        help="Decode a captured ATH.ENA card dump (JSON)",
    )
    decode_parser.add_argument(
        "dump_path",
        type=Path,
        help="Path to card dump JSON (uid, version, application_id, requires_auth, files)",
    )
    _add_verbose(decode_parser)

    # fetch command
    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Fetch one OASTH endpoint and print the decoded records",
    )
    fetch_parser.add_argument("endpoint", help="Endpoint name, e.g. getLines or getStopArrivals")
    fetch_parser.add_argument("param", nargs="?", default=None, help="Stop or route code")
    _add_verbose(fetch_parser)

    args = parser.parse_args()

    if args.command in ("decode-card", "fetch"):
        # Configure logging
        log_level = logging.DEBUG if args.verbose else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        if args.command == "decode-card":
            print(run_decode_card(args.dump_path))
        else:
            print(asyncio.run(run_fetch(args.endpoint, args.param)))
    else:
        # Default: run MCP server
        mcp.run()


if __name__ == "__main__":
    main()
