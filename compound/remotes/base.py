"""Base remote mirror interface for Compound."""

from abc import ABC, abstractmethod
from typing import Optional

from compound.models import RemoteRow


class RemoteError(Exception):
    """Raised when a remote mirror operation could not be confirmed."""


class BaseRemote(ABC):
    """Abstract base class for remote mirror implementations.

    A remote mirror holds one row per entry, keyed by the entry's date id.
    Upserts overwrite on id; the mirror performs no concurrency checks.
    Every backend or transport failure surfaces as ``RemoteError``.
    """

    @abstractmethod
    def is_configured(self) -> bool:
        """Check whether the mirror has what it needs to connect.

        Returns:
            True if remote operations can be attempted, False otherwise.
        """
        pass

    @abstractmethod
    def upsert(self, rows: list[RemoteRow]) -> None:
        """Write rows, overwriting any existing row with the same id.

        Args:
            rows: Rows to write as one batch.

        Raises:
            RemoteError: If the write was not confirmed.
        """
        pass

    @abstractmethod
    def select_all(self) -> list[RemoteRow]:
        """Get every row visible to this device.

        Returns:
            Rows ordered by id descending.

        Raises:
            RemoteError: If the read failed.
        """
        pass

    @abstractmethod
    def update_analysis(self, entry_id: str, analysis: Optional[str]) -> None:
        """Set the analysis column of an existing row.

        Args:
            entry_id: Entry date id.
            analysis: Analysis text.

        Raises:
            RemoteError: If the update was not confirmed.
        """
        pass
