"""Result of a single command exchange with the laser marker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _flatten(text: str) -> str:
    return text.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")


def describe_error(error: BaseException | None) -> str:
    """Render an exception and its direct cause as one line of text.

    Returns an empty string when there is nothing to describe.
    """
    if error is None or not str(error).strip():
        return ""
    detail = f"Exception: {_flatten(str(error))}."
    cause = error.__cause__ or error.__context__
    if cause is not None and str(cause).strip():
        detail += f" Inner exception: {_flatten(str(cause))}."
    return detail


@dataclass(frozen=True, eq=False)
class Response:
    """Outcome of one ``run`` call.

    ``success`` is True only when the device echoed the request prefix
    with an ``OK`` status. ``error`` is set when the exchange itself could
    not be completed (no connection, transport failure); a device that
    answers with a non-OK status yields ``success=False`` and no error,
    leaving its own text in ``message``.
    """

    success: bool
    message: str = ""
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if self.message is None:
            object.__setattr__(self, "message", "")
        if self.error is not None and self.success:
            raise ValueError("A response carrying an error cannot be successful")

    @property
    def failure_detail(self) -> str:
        return describe_error(self.error)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Response):
            return NotImplemented
        return (
            self.success
            and other.success
            and self.message == other.message
            and self.failure_detail == other.failure_detail
        )

    def __hash__(self) -> int:
        return hash((self.success, self.message, self.failure_detail))

    def __str__(self) -> str:
        result = "success" if self.success else "failure"
        body = (
            f"Response result: {result}. "
            f"Response message: {_flatten(self.message)}."
        )
        detail = self.failure_detail
        return f"{body} {detail}" if detail else body

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "error": self.failure_detail or None,
        }
