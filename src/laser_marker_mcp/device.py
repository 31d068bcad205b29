"""Keyence MD-X2500 laser marker operations."""

from __future__ import annotations

from collections.abc import Sequence

from .client import LaserMarker
from .models.response import Response
from .protocol.commands import (
    build_change_character_strings,
    build_change_program,
    build_error_clear,
    build_error_status,
    build_ready,
    build_start_marking,
    build_stop_marking,
)


class MDX2500(LaserMarker):
    """Laser marker with the MD-X2500 command set.

    ``current_program_no`` remembers the last program selected through
    :meth:`change_program` that the controller acknowledged. It is ``None``
    until one succeeds.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._current_program_no: str | None = None

    @property
    def current_program_no(self) -> str | None:
        return self._current_program_no

    def is_ready(self) -> Response:
        return self.run(build_ready())

    def clear_error(self) -> Response:
        return self.run(build_error_clear())

    def error_status(self) -> Response:
        return self.run(build_error_status())

    def start_marking(self, receive_timeout_ms: int | None = None) -> Response:
        """Trigger marking with the current program.

        Marking a large job can take longer than the connection's receive
        timeout; pass ``receive_timeout_ms`` to wait longer for this call.
        """
        return self.run(build_start_marking(), receive_timeout_ms)

    def stop_marking(self) -> Response:
        return self.run(build_stop_marking())

    def change_program(self, program_no: str | int) -> Response:
        """Select the marking program, recording it on success."""
        program_no = str(program_no)
        response = self.run(build_change_program(program_no))
        if response.success:
            self._current_program_no = program_no
        return response

    def change_character_strings(
        self, blocks: Sequence[int], strings: Sequence[str]
    ) -> Response:
        """Replace the text of several blocks in one linked write.

        Raises:
            ArgumentMismatchError: If ``blocks`` and ``strings`` are empty
                or differ in length. Nothing is sent in that case.
        """
        return self.run(build_change_character_strings(blocks, strings))
