"""
benchmcp main-thread dispatch

Hosts whose object model may only be touched from their UI thread attach a
``MainThreadDispatcher`` to the host facade. Work submitted from the server
thread is queued, and the host drains the queue from a timer on its main
thread by calling ``process_pending()``.
"""

import concurrent.futures
import logging
import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional, Tuple

from ..common.errors import HostError

logger = logging.getLogger(__name__)

# Seconds a blocking ``call()`` waits for the main thread
RESPONSE_TIMEOUT = 30.0

WorkItem = Tuple[Callable[..., Any], Tuple[Any, ...], Future]


def run_into_future(future: Future, fn: Callable[..., Any], args: Tuple[Any, ...]) -> None:
    """Run ``fn(*args)`` and store its result or exception in ``future``"""
    if not future.set_running_or_notify_cancel():
        return
    try:
        future.set_result(fn(*args))
    except Exception as e:
        future.set_exception(e)


class MainThreadDispatcher:
    """Queue of work for the host's main thread

    Args:
        main_thread: thread allowed to run the work, the creating thread when None
    """

    def __init__(self, main_thread: Optional[threading.Thread] = None):
        self.main_thread = main_thread or threading.current_thread()
        self._queue: "queue.Queue[WorkItem]" = queue.Queue()

    def on_main_thread(self) -> bool:
        return threading.current_thread() is self.main_thread

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Schedule ``fn(*args)`` on the main thread

        Called on the main thread itself, the work runs right away.
        """
        future: Future = Future()
        if self.on_main_thread():
            run_into_future(future, fn, args)
        else:
            self._queue.put((fn, args, future))
        return future

    def call(self, fn: Callable[..., Any], *args: Any, timeout: float = RESPONSE_TIMEOUT) -> Any:
        """Run ``fn(*args)`` on the main thread and wait for the result

        Raises:
            HostError: the main thread did not pick the work up in time
        """
        future = self.submit(fn, *args)
        try:
            return future.result(timeout)
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            raise HostError(f"Host did not respond within {timeout}s") from e

    def pending(self) -> int:
        return self._queue.qsize()

    def process_pending(self, limit: Optional[int] = None) -> int:
        """Run queued work; the host calls this from its main thread

        Returns:
            number of work items run
        """
        processed = 0
        while limit is None or processed < limit:
            try:
                fn, args, future = self._queue.get_nowait()
            except queue.Empty:
                break
            run_into_future(future, fn, args)
            processed += 1
        if processed:
            logger.debug(f"Ran {processed} host calls on the main thread")
        return processed

    def cancel_pending(self) -> int:
        """Drop queued work, failing every waiting caller"""
        cancelled = 0
        while True:
            try:
                _, _, future = self._queue.get_nowait()
            except queue.Empty:
                break
            if future.set_running_or_notify_cancel():
                future.set_exception(HostError("Host dispatcher was shut down"))
            cancelled += 1
        return cancelled
