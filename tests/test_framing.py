"""Tests for command framing and reply parsing."""

import pytest

from laser_marker_mcp.protocol.framing import (
    TERMINATOR,
    command_prefix,
    encode_command,
    frame_command,
    validate_command,
)
from laser_marker_mcp.protocol.parser import is_success, parse_reply


def test_validate_well_formed_commands():
    """Read and write commands with a terminator pass validation."""
    assert validate_command("RX,Ready\r") is None
    assert validate_command("WX,ProgramNo=5\r") is None


def test_validate_missing_prefix():
    """A command without WX/RX is rejected with the prefix rule."""
    problem = validate_command("XX,Ready\r")
    assert problem == 'A command must start with "WX" or "RX" prefix.'


def test_validate_missing_terminator():
    """A command without the carriage return is rejected."""
    problem = validate_command("RX,Ready")
    assert problem == 'A command must end with "\r" terminator.'


def test_validate_checks_prefix_first():
    """A command breaking both rules reports the prefix rule."""
    assert "prefix" in validate_command("Ready")


def test_command_prefix():
    assert command_prefix("WX,StartMarking\r") == "WX"
    assert command_prefix("RX,Error\r") == "RX"


def test_encode_command_is_single_byte():
    """Commands are sent as ASCII; other characters become '?'."""
    assert encode_command("RX,Ready\r") == b"RX,Ready\r"
    assert encode_command("WX,CharacterString=é\r") == b"WX,CharacterString=?\r"


def test_frame_command_links_segments():
    command = frame_command("WX", "BLK=1", "CharacterString=A")
    assert command == "WX,BLK=1,CharacterString=A\r"
    assert command.endswith(TERMINATOR)


def test_frame_command_rejects_bad_prefix():
    with pytest.raises(ValueError):
        frame_command("ZX", "Ready")


def test_frame_command_requires_payload():
    with pytest.raises(ValueError):
        frame_command("RX")


def test_is_success_requires_matching_prefix():
    """Only the request's own prefix followed by ,OK counts as success."""
    assert is_success("RX,OK,0\r", "RX")
    assert is_success("WX,OK\r", "WX")
    assert not is_success("WX,OK\r", "RX")


def test_is_success_rejects_device_errors():
    """Non-OK status, empty and garbled replies are failures."""
    assert not is_success("WX,NG,22\r", "WX")
    assert not is_success("", "WX")
    assert not is_success("WXOK", "WX")
    assert not is_success("wx,ok", "WX")


def test_parse_reply_splits_values():
    reply = parse_reply("RX,OK,0,1\r")
    assert reply is not None
    assert reply.prefix == "RX"
    assert reply.status == "OK"
    assert reply.values == ["0", "1"]
    assert reply.ok


def test_parse_reply_error_status():
    reply = parse_reply("WX,NG,22\r")
    assert reply is not None
    assert not reply.ok
    assert reply.values == ["22"]


def test_parse_reply_without_status():
    assert parse_reply("") is None
    assert parse_reply("garbage") is None
