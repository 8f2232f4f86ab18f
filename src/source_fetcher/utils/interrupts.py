"""Deferral of keyboard interrupts around critical filesystem steps."""

import signal
import threading
from contextlib import contextmanager
from typing import Iterator

from source_fetcher.utils.output import print_warning


@contextmanager
def ignore_interrupts() -> Iterator[None]:
    """Hold back SIGINT until the wrapped block has finished.

    An interrupt received inside the block is re-raised as
    ``KeyboardInterrupt`` once the block completes. Signal handlers can only
    be installed from the main thread; elsewhere the block runs unguarded.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    received = []

    def _handler(signum, frame):
        print_warning("Ignoring interrupt until the current step finishes")
        received.append(signum)

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)
    if received:
        raise KeyboardInterrupt
