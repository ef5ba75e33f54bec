"""Explicit intrusive reference counting with owning, borrowed and unowned handles."""

__version__ = "0.1.0"
__all__ = ["refcount", "displayable", "unowned"]