"""Tests for DESFire reader response handling."""

import pytest

from oasth_mcp.card.apdu import (
    CardDumpBuilder,
    FileType,
    StatusWord,
    assemble_frames,
    classify,
    file_type_from_settings,
    parse_application_ids,
    split_response,
)

OK = b"\x91\x00"
MORE = b"\x91\xaf"
AUTH = b"\x91\xae"


@pytest.mark.parametrize(
    ("sw1", "sw2", "expected"),
    [
        (0x90, 0x00, StatusWord.ISO_SUCCESS),
        (0x91, 0x00, StatusWord.SUCCESS),
        (0x91, 0xAF, StatusWord.ADDITIONAL_FRAME),
        (0x91, 0xAE, StatusWord.AUTHENTICATION_ERROR),
        (0x91, 0xCA, StatusWord.COMMAND_ABORTED),
        (0x61, 0x10, StatusWord.MORE_DATA),
        (0x91, 0x9D, StatusWord.OTHER),
        (0x6A, 0x82, StatusWord.OTHER),
    ],
)
def test_classify(sw1: int, sw2: int, expected: StatusWord):
    assert classify(sw1, sw2) == expected


def test_split_response():
    assert split_response(b"\x01\x02" + OK) == (b"\x01\x02", StatusWord.SUCCESS)
    assert split_response(OK) == (b"", StatusWord.SUCCESS)


@pytest.mark.parametrize("response", [None, b"", b"\x91"])
def test_split_response_too_short(response):
    assert split_response(response) == (b"", StatusWord.NO_RESPONSE)


def test_assemble_frames_three_part_version():
    frames = [b"\x04" * 7 + MORE, b"\x05" * 7 + MORE, b"\x06" * 14 + OK]
    assert assemble_frames(frames) == b"\x04" * 7 + b"\x05" * 7 + b"\x06" * 14


def test_assemble_frames_stops_after_final_frame():
    frames = [b"\x01" + OK, b"\x02" + OK]
    assert assemble_frames(frames) == b"\x01"


def test_assemble_frames_stops_on_missing_frame():
    assert assemble_frames([b"\x01" + MORE, None, b"\x03" + OK]) == b"\x01"


def test_parse_application_ids_ascii_and_hex():
    aids = parse_application_ids(b"1TA" + b"\x00\x00\x01" + OK)
    assert [aid.hex for aid in aids] == ["315441", "000001"]
    assert aids[0].label == "1TA"
    assert aids[1].label == "000001"


def test_parse_application_ids_ignores_partial_and_failed():
    assert [a.label for a in parse_application_ids(b"1TA\x01" + OK)] == ["1TA"]
    assert parse_application_ids(b"1TA" + AUTH) == []


def test_file_type_from_settings():
    assert file_type_from_settings(b"\x02\x00\x00\x00" + OK) == FileType.VALUE
    assert file_type_from_settings(b"\x04" + OK) == FileType.CYCLIC_RECORD
    assert file_type_from_settings(b"\x09" + OK) is None
    assert file_type_from_settings(AUTH) is None


def test_builder_collects_dump():
    builder = CardDumpBuilder()
    builder.set_uid("04:94:2E:6A:26:44:80")
    builder.add_version_frames([b"\x04\x01\x01\x01\x00\x18\x05" + OK])
    builder.add_application_ids(b"1TA" + OK)
    assert builder.record_select(OK) is True

    builder.add_file_response(12, b"\x0a\x00\x00\x00" + OK, FileType.VALUE)
    builder.add_file_response(2, b"\x01" * 32 + MORE, FileType.STANDARD)
    dump = builder.build()

    assert dump.uid == bytes.fromhex("04942e6a264480")
    assert dump.version == b"\x04\x01\x01\x01\x00\x18\x05"
    assert dump.application_id == "1TA"
    assert dump.requires_auth is False
    assert dump.files == {12: b"\x0a\x00\x00\x00", 2: b"\x01" * 32}


def test_builder_value_file_requires_final_status():
    builder = CardDumpBuilder()
    builder.add_file_response(12, b"\x0a\x00\x00\x00" + MORE, FileType.VALUE)
    assert builder.build().files == {}


def test_builder_marks_auth_required():
    builder = CardDumpBuilder()
    assert builder.record_select(b"\x91\xca") is False
    builder.add_file_response(2, AUTH)
    dump = builder.build()
    assert dump.requires_auth is True
    assert dump.files == {}


def test_builder_uid_from_bytes():
    builder = CardDumpBuilder()
    builder.set_uid([0x04, 0x94])
    assert builder.build().uid == b"\x04\x94"
