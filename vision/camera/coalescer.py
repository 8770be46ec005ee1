"""Single-flight coalescing of expensive point cloud captures."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from utils.errors import CaptureCancelledError, CaptureTimeoutError
from utils.logger import Logger, LoggerType
from utils.settings import coalescer as COALCFG
from vision.pointcloud.cloud import PointCloud

Producer = Callable[[], PointCloud]


@dataclass
class CaptureSlot:
    """Most recent capture result; guarded by the coalescer's lock."""

    active: bool = False
    last_cloud: PointCloud | None = None
    last_timestamp: float = float("-inf")
    last_error: BaseException | None = None


class CaptureCoalescer:
    """
    Run at most one capture at a time and share its result.

    The first caller runs ``produce`` itself. Callers arriving while a
    capture is in flight wait for the next result that completes after they
    arrived, so nobody is handed a cloud older than its own request. Waiting
    is bounded by ``wait_timeout``; the producer is never timed out.
    """

    def __init__(
        self,
        poll_interval: float = COALCFG.poll_interval,
        wait_timeout: float = COALCFG.wait_timeout,
        clock: Callable[[], float] = time.monotonic,
        logger: LoggerType | None = None,
    ) -> None:
        self.poll_interval = poll_interval
        self.wait_timeout = wait_timeout
        self._clock = clock
        self._slot = CaptureSlot()
        self._cond = threading.Condition(threading.Lock())
        self.logger = logger or Logger.get_logger("vision.coalescer")

    @property
    def active(self) -> bool:
        with self._cond:
            return self._slot.active

    @property
    def last_timestamp(self) -> float:
        """Completion time (``clock`` units) of the latest capture."""
        with self._cond:
            return self._slot.last_timestamp

    def capture(
        self, produce: Producer, cancel: threading.Event | None = None
    ) -> PointCloud:
        """
        Return a cloud from a capture that completed after this call began.

        Raises
        ------
        CaptureTimeoutError
            Waited longer than ``wait_timeout`` for another caller's capture.
        CaptureCancelledError
            ``cancel`` was set while waiting.
        Exception
            Whatever ``produce`` raised, re-raised unchanged to the caller
            that ran it and to every waiter that receives that result.
        """
        start = self._clock()
        with self._cond:
            if self._slot.active:
                busy = True
            else:
                self._slot.active = True
                busy = False
        if busy:
            self.logger.debug("Capture already in flight, waiting for its result")
            return self._wait_for_capture_after(start, cancel)

        cloud: PointCloud | None = None
        error: BaseException | None = None
        try:
            cloud = produce()
        except BaseException as exc:
            error = exc
        finally:
            with self._cond:
                self._slot.active = False
                self._slot.last_cloud = cloud
                self._slot.last_error = error
                self._slot.last_timestamp = self._clock()
                self._cond.notify_all()

        if error is not None:
            raise error
        return cloud

    def _wait_for_capture_after(
        self, when: float, cancel: threading.Event | None
    ) -> PointCloud:
        while True:
            if cancel is not None and cancel.is_set():
                raise CaptureCancelledError("cancelled while waiting for point cloud")

            waited = self._clock() - when
            if waited > self.wait_timeout:
                raise CaptureTimeoutError(
                    f"waiting for point cloud timed out after {waited:.2f}s"
                )

            with self._cond:
                if self._slot.last_timestamp > when:
                    if self._slot.last_error is not None:
                        raise self._slot.last_error
                    return self._slot.last_cloud
                self._cond.wait(self.poll_interval)
