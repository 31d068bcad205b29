"""Command vocabulary and high-level command builders for the MD-X2500.

Each builder returns a complete, terminated command string ready to be
passed to :meth:`laser_marker_mcp.client.LaserMarker.run`.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from ..errors import ArgumentMismatchError
from .framing import ASSIGNMENT, READ_PREFIX, WRITE_PREFIX, frame_command


class Command(str, Enum):
    """Field names understood by the controller."""

    READY = "Ready"
    ERROR = "Error"
    ERROR_CLEAR = "ErrorClear"
    START_MARKING = "StartMarking"
    STOP_MARKING = "StopMarking"
    PROGRAM_NO = "ProgramNo"
    BLOCK = "BLK"
    CHARACTER_STRING = "CharacterString"


def _assign(name: str, value: object) -> str:
    return f"{name}{ASSIGNMENT}{value}"


def build_read(*fields: str) -> str:
    """Build a read request, e.g. ``RX,Ready\\r``."""
    return frame_command(READ_PREFIX, *(str(f) for f in fields))


def build_write(*fields: str, **assignments: object) -> str:
    """Build a write request.

    Bare ``fields`` are sent as-is (``WX,ErrorClear``); ``assignments``
    are appended as linked ``name=value`` segments in call order.
    """
    segments = [str(f) for f in fields]
    segments.extend(_assign(name, value) for name, value in assignments.items())
    return frame_command(WRITE_PREFIX, *segments)


def build_ready() -> str:
    """Build a Ready read to check whether the marker can accept a job."""
    return build_read(Command.READY.value)


def build_error_status() -> str:
    return build_read(Command.ERROR.value)


def build_error_clear() -> str:
    return build_write(Command.ERROR_CLEAR.value)


def build_start_marking() -> str:
    return build_write(Command.START_MARKING.value)


def build_stop_marking() -> str:
    return build_write(Command.STOP_MARKING.value)


def build_change_program(program_no: str | int) -> str:
    """Build a ProgramNo write selecting the marking program.

    Args:
        program_no: Program number as shown on the controller.
    """
    program_no = str(program_no)
    if not program_no:
        raise ValueError("Program number must not be empty")
    return build_write(_assign(Command.PROGRAM_NO.value, program_no))


def build_change_character_strings(
    blocks: Sequence[int], strings: Sequence[str]
) -> str:
    """Build one linked write replacing the text of several blocks.

    Produces ``WX,BLK=<b1>,CharacterString=<s1>,BLK=<b2>,...\\r``.

    Args:
        blocks: Block numbers to change.
        strings: Replacement text, one per block.

    Raises:
        ArgumentMismatchError: If the sequences are empty or differ in length.
    """
    if len(blocks) != len(strings) or not blocks:
        raise ArgumentMismatchError(
            f"{Command.BLOCK.value} count: {len(blocks)}, but "
            f"{Command.CHARACTER_STRING.value} count: {len(strings)}"
        )
    segments: list[str] = []
    for block, text in zip(blocks, strings):
        if int(block) < 0:
            raise ValueError(f"Block number must be non-negative, got {block}")
        segments.append(_assign(Command.BLOCK.value, int(block)))
        segments.append(_assign(Command.CHARACTER_STRING.value, text))
    return build_write(*segments)
