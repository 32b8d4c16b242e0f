"""Command groups of the taskboard CLI."""

from . import item, view

__all__ = ["item", "view"]
