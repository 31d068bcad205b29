"""Data models for command exchanges."""

from .response import Response
