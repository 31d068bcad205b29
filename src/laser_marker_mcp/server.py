"""MCP server entry point for Keyence MD-X laser markers.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .device import MDX2500
from .errors import LaserMarkerError
from .models.response import Response
from .protocol.commands import Command
from .protocol.framing import TERMINATOR
from .protocol.parser import parse_reply
from .transport.tcp_connection import (
    CONNECT_TIMEOUT_MS,
    DEFAULT_PORT,
    RECEIVE_TIMEOUT_MS,
    SEND_TIMEOUT_MS,
)

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "laser-marker",
    instructions="Control a Keyence MD-X series laser marker over TCP.",
)

# Global connection state
_marker = MDX2500()


def _get_marker() -> MDX2500:
    """Get the connected marker, raising if not connected."""
    if not _marker.connected:
        raise RuntimeError(
            "Not connected to laser marker. Use the 'connect' tool first."
        )
    return _marker


def _result(response: Response) -> dict[str, Any]:
    result = response.to_dict()
    parsed = parse_reply(response.message) if response.success else None
    if parsed is not None and parsed.values:
        result["values"] = parsed.values
    return result


COMMAND_CATALOG = {
    Command.READY.value: "RX - 0 when the marker can accept a marking trigger",
    Command.ERROR.value: "RX - current error codes",
    Command.ERROR_CLEAR.value: "WX - clear the current error",
    Command.START_MARKING.value: "WX - start marking with the active program",
    Command.STOP_MARKING.value: "WX - abort the running marking job",
    Command.PROGRAM_NO.value: "WX - select the active program (ProgramNo=<n>)",
    Command.BLOCK.value: "WX - block number for a following CharacterString",
    Command.CHARACTER_STRING.value: "WX - replacement text for the preceding BLK",
}


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(
    host: str,
    port: int = DEFAULT_PORT,
    connect_timeout_ms: int = CONNECT_TIMEOUT_MS,
    send_timeout_ms: int = SEND_TIMEOUT_MS,
    receive_timeout_ms: int = RECEIVE_TIMEOUT_MS,
) -> dict[str, Any]:
    """Open a TCP connection to the laser marker controller.

    Args:
        host: Controller IPv4 address.
        port: Command port (default 50002).
        connect_timeout_ms: How long to wait for the controller to accept.
        send_timeout_ms: Send deadline for every command.
        receive_timeout_ms: Reply deadline for every command.
    """
    if _marker.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "host": _marker.connection.host,
        }

    try:
        _marker.connect(
            host,
            port,
            send_timeout_ms=send_timeout_ms,
            receive_timeout_ms=receive_timeout_ms,
            connect_timeout_ms=connect_timeout_ms,
        )
    except LaserMarkerError as e:
        return {"connected": False, "error": str(e)}

    return {"connected": True, "host": host, "port": port}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the connection to the laser marker."""
    _marker.disconnect()
    return {"disconnected": True}


@mcp.tool()
def get_status() -> dict[str, Any]:
    """Report connection state and the last selected program."""
    return {
        "connected": _marker.connected,
        "host": _marker.connection.host,
        "current_program_no": _marker.current_program_no,
    }


# ─── MARKER TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def is_ready() -> dict[str, Any]:
    """Ask whether the marker can accept a marking trigger."""
    return _result(_get_marker().is_ready())


@mcp.tool()
def error_status() -> dict[str, Any]:
    """Read the controller's current error codes."""
    return _result(_get_marker().error_status())


@mcp.tool()
def clear_error() -> dict[str, Any]:
    """Clear the controller's current error."""
    return _result(_get_marker().clear_error())


@mcp.tool()
def start_marking(receive_timeout_ms: int | None = None) -> dict[str, Any]:
    """Start marking with the active program.

    Args:
        receive_timeout_ms: Optional longer reply deadline for long jobs.
    """
    return _result(_get_marker().start_marking(receive_timeout_ms))


@mcp.tool()
def stop_marking() -> dict[str, Any]:
    """Abort the running marking job."""
    return _result(_get_marker().stop_marking())


@mcp.tool()
def change_program(program_no: str) -> dict[str, Any]:
    """Select the active marking program.

    Args:
        program_no: Program number as shown on the controller.
    """
    marker = _get_marker()
    try:
        result = _result(marker.change_program(program_no))
    except ValueError as e:
        return {"error": str(e)}
    result["current_program_no"] = marker.current_program_no
    return result


@mcp.tool()
def change_character_strings(blocks: list[int], strings: list[str]) -> dict[str, Any]:
    """Replace the text of one or more blocks in the active program.

    Args:
        blocks: Block numbers, e.g. [1, 2].
        strings: New text for each block, same length as ``blocks``.
    """
    marker = _get_marker()
    try:
        return _result(marker.change_character_strings(blocks, strings))
    except ValueError as e:
        return {"error": str(e)}


@mcp.tool()
def send_command(command: str) -> dict[str, Any]:
    """Send a raw protocol command, e.g. ``RX,Ready``.

    The carriage-return terminator is appended when missing.

    Args:
        command: Command starting with ``WX`` or ``RX``.
    """
    if not command.endswith(TERMINATOR):
        command += TERMINATOR
    return _result(_get_marker().run(command))


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("laser://device/status")
def resource_device_status() -> str:
    """Connection state and last selected program."""
    return json.dumps({
        "connected": _marker.connected,
        "host": _marker.connection.host,
        "port": _marker.connection.settings.port,
        "current_program_no": _marker.current_program_no,
    })


@mcp.resource("laser://catalog/commands")
def resource_command_catalog() -> str:
    """Fields understood by the MD-X2500 command set."""
    commands = [
        {"name": name, "description": description}
        for name, description in COMMAND_CATALOG.items()
    ]
    return json.dumps({"commands": commands, "count": len(commands)})


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def marking_job(program_no: str, texts: str) -> str:
    """Guide the AI through a complete marking job.

    Args:
        program_no: Program to mark with.
        texts: Block texts as ``block=text`` pairs separated by ';'.
    """
    return f"""Run a marking job with program {program_no}.
Steps:
- Use error_status; if an error is reported, use clear_error and check again
- Use change_program to select program {program_no}
- Use change_character_strings to set these blocks: {texts}
- Use is_ready and only continue when the marker reports ready
- Use start_marking, with a longer receive_timeout_ms for large jobs

Stop and report the device message if any step fails."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
