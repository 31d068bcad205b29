"""Protocol layer: command framing, command builders, and reply parsing."""

from .framing import encode_command, validate_command
from .commands import Command, build_read, build_write
from .parser import is_success
