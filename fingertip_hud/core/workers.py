"""
Background worker thread for hand inference.

The worker runs detection and the depth/coordinate math off the render thread and
posts each result back through a `MainContextDispatcher`, so rendering never
blocks on inference.
"""

import functools
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable

from fingertip_hud.config import WorkerConfig
from fingertip_hud.core.scheduler import CancellationToken
from fingertip_hud.errors import RecoverableFrameError

logger = logging.getLogger(__name__)


@dataclass
class InferenceJob:
    """
    One unit of background work.

    `process` runs on the worker thread; `complete` receives its result on the
    render thread. Both are skipped once `token` is cancelled.
    """

    generation: int
    token: CancellationToken
    process: Callable[[], Any]
    complete: Callable[[Any], None]


def run_job(job, dispatcher):
    """
    Run a job's background half and post its completion.

    Args:
        job (InferenceJob): Job to run
        dispatcher (MainContextDispatcher): Where the completion is posted

    Returns:
        bool: True if a completion was posted
    """
    if job.token.cancelled:
        return False

    try:
        result = job.process()
    except RecoverableFrameError as e:
        logger.debug(f"Skipping frame {job.generation}: {e}")
        return False
    except Exception as e:
        logger.error(f"Inference error on frame {job.generation}: {e}", exc_info=True)
        return False

    if job.token.cancelled:
        return False
    return dispatcher.post(functools.partial(_complete_if_alive, job, result))


def _complete_if_alive(job, result):
    if job.token.cancelled:
        return
    job.complete(result)


class InferenceWorker(threading.Thread):
    """
    Background worker thread for hand inference.

    Holds at most `queue_maxsize` pending jobs; submitting to a full queue drops the
    oldest pending job, so the worker always picks up the freshest frame.
    """

    def __init__(self, dispatcher, stop_event=None, queue_maxsize=None):
        """
        Initialize the inference worker.

        Args:
            dispatcher (MainContextDispatcher): Receives completions for the render thread
            stop_event (threading.Event): Event to signal thread shutdown
            queue_maxsize (int): Maximum pending jobs. If None, uses config default.
        """
        super().__init__(daemon=True, name="InferenceWorker")
        self.dispatcher = dispatcher
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        maxsize = queue_maxsize if queue_maxsize is not None else WorkerConfig.JOB_QUEUE_MAXSIZE
        self.in_queue = queue.Queue(maxsize=maxsize)
        self.dropped_jobs = 0

        logger.info(f"Initialized inference worker with queue size {maxsize}")

    def submit(self, job):
        """
        Queue a job (non-blocking). If the queue is full, the oldest job is dropped.

        Args:
            job (InferenceJob): Job to run

        Returns:
            bool: True if the job was queued
        """
        if self.stop_event.is_set():
            return False

        try:
            self.in_queue.put_nowait(job)
            return True
        except queue.Full:
            try:
                dropped = self.in_queue.get_nowait()
                self.dropped_jobs += 1
                logger.debug(f"Dropping pending frame {dropped.generation} for {job.generation}")
            except queue.Empty:
                pass
            try:
                self.in_queue.put_nowait(job)
                return True
            except queue.Full:
                logger.warning(f"Inference queue full, dropping frame {job.generation}")
                return False

    def run(self):
        """Main worker loop - processes jobs from queue."""
        logger.info("InferenceWorker started")

        while not self.stop_event.is_set():
            try:
                job = self.in_queue.get(timeout=WorkerConfig.QUEUE_TIMEOUT)
            except queue.Empty:
                continue

            run_job(job, self.dispatcher)

        logger.info("InferenceWorker stopped")

    def stop(self):
        """Signal the worker to stop and exit."""
        logger.info("Stopping InferenceWorker...")
        self.stop_event.set()
