"""Best-effort progress reporting."""
import logging
import queue
import threading
from typing import Callable, Optional

from pbnart.types import ProgressEvent

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressEvent], None]

# Stage milestones (percent reached when the stage starts)
PALETTE = ("Generating color palette", 0)
EDGES = ("Detecting edges", 5)
SAMPLING = ("Sampling points", 15)
QUANTIZING = ("Quantizing points", 20)
INDEXING = ("Building spatial index", 25)
REGIONS = ("Creating regions", 30)
GRID_QUANTIZING = ("Quantizing pixels", 30)
BORDERS = ("Drawing borders", 70)
NUMBERS = ("Adding numbers", 85)
COMPLETE = ("Complete", 100)

# Rasterization spans REGIONS .. BORDERS
RASTER_START = 30
RASTER_SPAN = 40

_STOP = object()


class ProgressReporter:
    """
    Forwards progress events to an optional sink without blocking.

    ``report`` only enqueues; a daemon consumer thread drains the queue in
    arrival order and calls the sink. Any thread may report. A sink that
    raises is logged and otherwise ignored so reporting can never abort a
    run. Without a sink no thread is started and reporting is a no-op.
    """

    def __init__(self, sink: Optional[ProgressSink] = None):
        self.sink = sink
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._consumer: Optional[threading.Thread] = None
        if sink is not None:
            self._consumer = threading.Thread(
                target=self._drain, name="pbnart-progress", daemon=True
            )
            self._consumer.start()

    def report(self, stage: str, percent: int) -> None:
        if self._consumer is None:
            return
        self._queue.put(ProgressEvent(stage=stage, percent=int(percent)))

    def milestone(self, milestone: tuple) -> None:
        stage, percent = milestone
        self.report(stage, percent)

    def worker_done(self, completed: int, total: int) -> None:
        """Report rasterization progress after ``completed`` of ``total`` workers."""
        self.report(REGIONS[0], RASTER_START + (completed * RASTER_SPAN) // total)

    def close(self) -> None:
        """Stop the consumer once queued events are delivered. Does not wait."""
        if self._consumer is not None:
            self._queue.put(_STOP)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for a closed reporter to finish delivering; True when done."""
        if self._consumer is None:
            return True
        self._consumer.join(timeout)
        return not self._consumer.is_alive()

    def __enter__(self) -> "ProgressReporter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _drain(self) -> None:
        while True:
            event = self._queue.get()
            if event is _STOP:
                return
            try:
                self.sink(event)
            except Exception as e:
                logger.warning(
                    f"Progress sink failed at '{event.stage}' ({event.percent}%): {e}"
                )
