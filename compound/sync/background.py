"""Background queue for remote writes."""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional


class BackgroundWriter:
    """Runs remote writes off the caller's path, one at a time.

    Each submission returns a ``Future`` that completes when the write
    settles. Writes run in submission order on a single worker, so the
    last save of an id is also the last one sent.
    """

    def __init__(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="compound-remote")
        self._outstanding: set[Future] = set()
        self._lock = threading.Lock()

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Queue a write.

        Args:
            fn: Callable performing the write.
            *args: Arguments for ``fn``.

        Returns:
            Future resolving to ``fn``'s return value.
        """
        future = self._executor.submit(fn, *args)
        with self._lock:
            self._outstanding.add(future)
        future.add_done_callback(self._discard)
        return future

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._outstanding.discard(future)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for every queued write to settle.

        Args:
            timeout: Maximum seconds to wait, None to wait indefinitely.

        Returns:
            True if all writes settled within the timeout.
        """
        with self._lock:
            outstanding = list(self._outstanding)
        if not outstanding:
            return True
        _, not_done = wait(outstanding, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Finish queued writes and stop the worker."""
        self._executor.shutdown(wait=True)
