"""MCP tool for decoding ATH.ENA transit card dumps."""

from oasth_mcp.app import mcp
from oasth_mcp.card.ticket import decode_card as _decode_card
from oasth_mcp.card.timestamps import format_remaining_time
from oasth_mcp.data.config import get_oasth_config
from oasth_mcp.models.card import CardDump
from oasth_mcp.models.responses import TicketResponse


def decode_dump(dump: CardDump) -> TicketResponse:
    """Decode a card dump in the configured timezone."""
    result = _decode_card(dump, tz=get_oasth_config().card_tzinfo)
    return TicketResponse(
        kind=result.kind,
        ticket=result.ticket,
        remaining_time_formatted=format_remaining_time(result.ticket.remaining_time_seconds),
    )


@mcp.tool()
def decode_card(
    uid: str,
    version: str = "",
    files: dict[str, str] | None = None,
    application_id: str = "",
    requires_auth: bool = False,
) -> TicketResponse:
    """Decode the data read from an ATH.ENA (MIFARE DESFire) transit card.

    Pass what the NFC reader collected; byte fields are hex strings (spaces
    allowed).

    Examples:
        decode_card(uid="04942E6A264480", files={"12": "0a000000"})  # 10 trips left

    Args:
        uid: Tag UID as hex.
        version: Concatenated GetVersion response data (28 bytes) as hex.
        files: Map of file id (e.g. "2", "4", "12", "16") to file contents as hex.
        application_id: Selected application label (e.g. "1TA").
        requires_auth: True if the card refused file reads without authentication.

    Returns:
        TicketResponse with the decoded ticket, the outcome kind
        (no_data/encrypted/decoded) and a formatted countdown.
    """
    dump = CardDump(
        uid=uid,
        version=version,
        files=files or {},
        application_id=application_id,
        requires_auth=requires_auth,
    )
    return decode_dump(dump)
