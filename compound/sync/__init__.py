"""Cloud synchronization for Compound."""

from compound.sync.background import BackgroundWriter
from compound.sync.orchestrator import SyncOrchestrator, SyncReport

__all__ = [
    "BackgroundWriter",
    "SyncOrchestrator",
    "SyncReport",
]
