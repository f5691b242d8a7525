"""Local persistence for Compound."""

from compound.db.store import EntryStore

__all__ = ["EntryStore"]
