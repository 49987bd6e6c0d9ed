"""
Hand-off of completions from worker threads back to the render thread.

Worker threads never touch render-facing state. They post callables here and
the render loop runs them in `drain()`.
"""

import logging
import queue
import threading

from fingertip_hud.config import WorkerConfig

logger = logging.getLogger(__name__)


class MainContextDispatcher:
    """
    Bounded queue of callables executed on the thread that owns render state.

    The owner is the thread that created the dispatcher. Completions run in the order
    they were posted, which is completion order, not submission order.
    """

    def __init__(self, maxsize=None):
        """
        Initialize the dispatcher on the render thread.

        Args:
            maxsize (int): Maximum pending callables. If None, uses config default.
        """
        maxsize = maxsize if maxsize is not None else WorkerConfig.COMPLETION_QUEUE_MAXSIZE
        self.queue = queue.Queue(maxsize=maxsize)
        self.owner_thread = threading.get_ident()

    def is_owner_thread(self):
        return threading.get_ident() == self.owner_thread

    def post(self, callback):
        """
        Queue a callable for the render thread (non-blocking).

        Args:
            callback: Zero-argument callable

        Returns:
            bool: True if queued, False if the queue was full and the callable dropped
        """
        try:
            self.queue.put_nowait(callback)
            return True
        except queue.Full:
            logger.warning("Completion queue full, dropping completion")
            return False

    def drain(self, max_items=None):
        """
        Run pending callables on the calling thread, which must be the owner.

        Args:
            max_items (int): Upper bound on callables to run. If None, runs all pending.

        Returns:
            int: Number of callables executed
        """
        if not self.is_owner_thread():
            logger.warning("drain() called off the render thread, ignoring")
            return 0

        executed = 0
        while max_items is None or executed < max_items:
            try:
                callback = self.queue.get_nowait()
            except queue.Empty:
                break
            try:
                callback()
            except Exception as e:
                logger.error(f"Error running completion: {e}", exc_info=True)
            executed += 1
        return executed

    def pending(self):
        return self.queue.qsize()
