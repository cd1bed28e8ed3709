"""Stop flag for cancelling conversions."""

import logging
import signal
import threading
from typing import Callable, List


class StopFlag:
    """Thread-safe cancellation token shared by a converter and its caller."""

    def __init__(self):
        """Initialize the stop flag."""
        self._stop_requested = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []
        self._signal_handlers_registered = False

    def request_stop(self):
        """Request a stop: running processes are terminated, no new file is started."""
        with self._lock:
            if self._stop_requested.is_set():
                return
            self._stop_requested.set()
            callbacks = list(self._callbacks)

        logging.warning("[STOP] Stop requested - terminating current conversion")
        for callback in callbacks:
            callback()

    def is_stop_requested(self) -> bool:
        """Check if stop has been requested."""
        return self._stop_requested.is_set()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """
        Register a callable to run when a stop is requested.

        Runs immediately if a stop was already requested.
        """
        with self._lock:
            if not self._stop_requested.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def register_signal_handlers(self):
        """Register signal handlers for Ctrl+C and termination signals."""
        if self._signal_handlers_registered:
            return

        def signal_handler(signum, frame):
            """Handle interrupt signals gracefully."""
            self.request_stop()

        signal.signal(signal.SIGINT, signal_handler)  # Ctrl+C
        # SIGTERM cannot be handled on every platform
        if hasattr(signal, "SIGTERM"):
            signal.signal(signal.SIGTERM, signal_handler)
        self._signal_handlers_registered = True
