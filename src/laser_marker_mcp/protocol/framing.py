"""Command framing for the MD-X text protocol.

Request layout::

    +--------+-----+-----------------------------+------------+
    | Prefix | Sep | Payload (field[=value],...) | Terminator |
    | WX/RX  | ,   | variable length             | \\r         |
    +--------+-----+-----------------------------+------------+

- Prefix: ``WX`` for writes, ``RX`` for reads
- Several ``field=value`` segments may be linked in one write, each
  introduced by the separator
- Replies echo the prefix followed by ``,OK`` on success
"""

from __future__ import annotations

WRITE_PREFIX = "WX"
READ_PREFIX = "RX"
PREFIXES = (WRITE_PREFIX, READ_PREFIX)
SEPARATOR = ","
ASSIGNMENT = "="
TERMINATOR = "\r"
OK_STATUS = "OK"

COMMAND_ENCODING = "ascii"
REPLY_ENCODING = "utf-8"


def validate_command(command: str) -> str | None:
    """Check the framing of an outgoing command.

    Returns:
        ``None`` if the command is well formed, otherwise a message
        describing the framing rule it breaks.
    """
    if not command.startswith(PREFIXES):
        return (
            f'A command must start with "{WRITE_PREFIX}" '
            f'or "{READ_PREFIX}" prefix.'
        )
    if not command.endswith(TERMINATOR):
        return f'A command must end with "{TERMINATOR}" terminator.'
    return None


def command_prefix(command: str) -> str:
    """Return the two-character prefix of a command."""
    return command[: len(WRITE_PREFIX)]


def encode_command(command: str) -> bytes:
    """Encode a command as single-byte text.

    Characters outside ASCII are sent as ``?``.
    """
    return command.encode(COMMAND_ENCODING, errors="replace")


def frame_command(prefix: str, *segments: str) -> str:
    """Join a prefix and payload segments into a terminated command."""
    if prefix not in PREFIXES:
        raise ValueError(f"Prefix must be one of {PREFIXES}, got {prefix!r}")
    if not segments:
        raise ValueError("A command needs at least one payload segment")
    return SEPARATOR.join((prefix, *segments)) + TERMINATOR
