"""Interpretation of raw DESFire reader responses.

The reader collaborator issues the commands (GetVersion, GetApplicationIDs,
SelectApplication, GetFileSettings, ReadData/ReadRecords/GetValue) and hands
back each response as bytes: data followed by two status bytes. This module
classifies those responses and accumulates them into a CardDump; it never
talks to a card itself.
"""

import logging
from collections.abc import Iterable
from enum import Enum, IntEnum

from pydantic import BaseModel

from oasth_mcp.codec.binary import ascii_printable, parse_hex, to_hex
from oasth_mcp.models.card import CardDump

logger = logging.getLogger(__name__)

AID_LENGTH = 3


class StatusWord(str, Enum):
    """Classification of the trailing SW1 SW2 bytes."""

    ISO_SUCCESS = "iso_success"  # 90 00
    SUCCESS = "success"  # 91 00
    ADDITIONAL_FRAME = "additional_frame"  # 91 AF
    AUTHENTICATION_ERROR = "authentication_error"  # 91 AE
    COMMAND_ABORTED = "command_aborted"  # 91 CA, seen when selecting a protected app
    MORE_DATA = "more_data"  # 61 xx
    OTHER = "other"
    NO_RESPONSE = "no_response"


class FileType(IntEnum):
    """DESFire file types reported by GetFileSettings."""

    STANDARD = 0
    BACKUP = 1
    VALUE = 2
    LINEAR_RECORD = 3
    CYCLIC_RECORD = 4


AUTH_REQUIRED = frozenset({StatusWord.AUTHENTICATION_ERROR, StatusWord.COMMAND_ABORTED})


def classify(sw1: int, sw2: int) -> StatusWord:
    """Map status bytes to a StatusWord."""
    if sw1 == 0x90 and sw2 == 0x00:
        return StatusWord.ISO_SUCCESS
    if sw1 == 0x61:
        return StatusWord.MORE_DATA
    if sw1 == 0x91:
        return {
            0x00: StatusWord.SUCCESS,
            0xAF: StatusWord.ADDITIONAL_FRAME,
            0xAE: StatusWord.AUTHENTICATION_ERROR,
            0xCA: StatusWord.COMMAND_ABORTED,
        }.get(sw2, StatusWord.OTHER)
    return StatusWord.OTHER


def split_response(response: bytes | None) -> tuple[bytes, StatusWord]:
    """Separate response data from its status word.

    Returns:
        (data, status). Responses shorter than two bytes are NO_RESPONSE.
    """
    if response is None or len(response) < 2:
        return b"", StatusWord.NO_RESPONSE
    return bytes(response[:-2]), classify(response[-2], response[-1])


def assemble_frames(responses: Iterable[bytes | None]) -> bytes:
    """Concatenate the data of a multi-frame exchange such as GetVersion.

    Frames are consumed while the previous one announced an additional frame.
    """
    data = bytearray()
    for response in responses:
        chunk, status = split_response(response)
        if status is StatusWord.NO_RESPONSE:
            break
        data.extend(chunk)
        if status is not StatusWord.ADDITIONAL_FRAME:
            break
    return bytes(data)


class ApplicationId(BaseModel):
    """A 3-byte DESFire application identifier."""

    hex: str
    ascii: str

    @property
    def label(self) -> str:
        """Printable name when the AID is ASCII (ATH.ENA uses "1TA"), else hex."""
        return self.ascii or self.hex


def parse_application_ids(response: bytes | None) -> list[ApplicationId]:
    """Parse a GetApplicationIDs response into AIDs.

    Only successful (91 00) responses are parsed; a trailing partial AID is
    ignored.
    """
    data, status = split_response(response)
    if status is not StatusWord.SUCCESS:
        return []
    aids = []
    for start in range(0, len(data) - AID_LENGTH + 1, AID_LENGTH):
        raw = data[start : start + AID_LENGTH]
        aids.append(ApplicationId(hex=to_hex(raw), ascii=ascii_printable(raw)))
    return aids


def file_type_from_settings(response: bytes | None) -> FileType | None:
    """File type from a GetFileSettings response, or None if unreadable."""
    data, status = split_response(response)
    if status is not StatusWord.SUCCESS or not data:
        return None
    try:
        return FileType(data[0])
    except ValueError:
        return None


class CardDumpBuilder:
    """Accumulates reader responses into the inputs of the ticket decoder.

    Usage:
        builder = CardDumpBuilder()
        builder.set_uid(tag_id)
        builder.add_version_frames([part1, part2, part3])
        for aid in builder.add_application_ids(aid_response):
            builder.record_select(select_response)
            ...
            builder.add_file_response(file_id, read_response, file_type)
        dump = builder.build()
    """

    def __init__(self) -> None:
        self._uid = b""
        self._version = b""
        self._application_id = ""
        self._requires_auth = False
        self._files: dict[int, bytes] = {}

    def set_uid(self, tag_id: str | bytes | list[int]) -> None:
        """Store the tag UID, given as a hex string or raw bytes."""
        if isinstance(tag_id, str):
            self._uid = parse_hex(tag_id)
        else:
            self._uid = bytes(tag_id)

    def add_version_frames(self, responses: Iterable[bytes | None]) -> None:
        self._version = assemble_frames(responses)

    def add_application_ids(self, response: bytes | None) -> list[ApplicationId]:
        """Parse an AID list; the first AID becomes the application id."""
        aids = parse_application_ids(response)
        if aids and not self._application_id:
            self._application_id = aids[0].label
        for aid in aids:
            logger.debug(f"Found application {aid.hex} ({aid.ascii!r})")
        return aids

    def record_select(self, response: bytes | None) -> bool:
        """Record a SelectApplication response.

        Returns:
            True if the application was selected and its files can be read.
        """
        _, status = split_response(response)
        if status in AUTH_REQUIRED:
            logger.debug("Application requires authentication")
            self._requires_auth = True
        return status is StatusWord.SUCCESS

    def add_file_response(
        self, file_id: int, response: bytes | None, file_type: FileType | None = None
    ) -> None:
        """Store the data of a file read.

        Value files (GetValue) must answer 91 00; data and record reads also
        accept 91 AF (more data pending). An authentication error marks the
        card as encrypted.
        """
        data, status = split_response(response)
        accepted = {StatusWord.SUCCESS}
        if file_type is not FileType.VALUE:
            accepted.add(StatusWord.ADDITIONAL_FRAME)

        if status in accepted:
            self._files[file_id] = data
        elif status in AUTH_REQUIRED:
            logger.debug(f"File {file_id}: authentication required")
            self._requires_auth = True
        else:
            logger.debug(f"File {file_id}: read failed with status {status.value}")

    def build(self) -> CardDump:
        return CardDump(
            uid=self._uid,
            version=self._version,
            application_id=self._application_id,
            requires_auth=self._requires_auth,
            files=dict(self._files),
        )
