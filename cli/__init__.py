"""CLI module for TapScribe."""

from .types import USAGE, Command

__all__ = ["Command", "USAGE"]
