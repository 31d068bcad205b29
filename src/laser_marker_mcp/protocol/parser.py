"""Reply parsing for device messages."""

from __future__ import annotations

from dataclasses import dataclass, field

from .framing import OK_STATUS, SEPARATOR, TERMINATOR


@dataclass
class Reply:
    """A reply split into its comma-separated parts."""

    prefix: str
    status: str
    values: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == OK_STATUS


def is_success(reply: str, prefix: str) -> bool:
    """Return True if ``reply`` reports success for a ``prefix`` request.

    A reply succeeds when it starts with the request prefix immediately
    followed by the separator and the ``OK`` status token. Anything else,
    including an empty reply, is a device-level failure.
    """
    return reply.startswith(prefix + SEPARATOR + OK_STATUS)


def parse_reply(reply: str) -> Reply | None:
    """Split a reply such as ``RX,OK,0,1`` into prefix, status and values.

    Returns ``None`` when the reply has no status field.
    """
    parts = reply.rstrip(TERMINATOR + "\n").split(SEPARATOR)
    if len(parts) < 2:
        return None
    return Reply(prefix=parts[0], status=parts[1], values=parts[2:])
