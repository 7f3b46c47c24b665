"""
Single-flight coalescing for concurrent cache misses.

Off by default: without it, two concurrent misses for the same key both call
the scraper and the later store wins. With it, the second caller waits for
the first caller's result instead.
"""
import threading
import logging
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger("cache.coalescer")


class RequestCoalescer:
    """
    Shares one in-flight scraper call among concurrent callers of a key.

    Usage:
        coalescer = RequestCoalescer()
        items = coalescer.run("hashtag_dance", lambda: fetch_items())
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Max seconds a joining caller waits (None waits for ever)
        """
        self._in_flight: Dict[str, Future] = {}
        self._lock = threading.Lock()
        self._timeout = timeout

    def run(self, cache_key: str, fetch_fn: Callable[[], List[Any]]) -> List[Any]:
        """
        Run fetch_fn, or join the call already running for cache_key.

        Errors raised by fetch_fn propagate to every caller sharing the call.
        """
        with self._lock:
            future = self._in_flight.get(cache_key)
            is_initiator = future is None
            if is_initiator:
                future = Future()
                self._in_flight[cache_key] = future
                logger.debug(f"Initiating fetch for {cache_key}")
            else:
                logger.debug(f"Joining in-flight fetch for {cache_key}")

        if not is_initiator:
            return future.result(timeout=self._timeout)

        try:
            result = fetch_fn()
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._in_flight.pop(cache_key, None)

    @property
    def active_requests(self) -> int:
        """Number of currently in-flight requests."""
        with self._lock:
            return len(self._in_flight)
