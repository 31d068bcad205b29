"""Client driver and MCP server for Keyence MD-X series laser markers."""

from .client import LaserMarker
from .device import MDX2500
from .models.response import Response

__version__ = "0.1.0"
