# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterator, Literal, Optional

import numpy as np

from lanecam.app_utils import Logger

from .errors import CameraOpenError, CameraReadError, CameraTransformError

logger = Logger("Camera")

CameraStatus = Literal["disconnected", "connected", "streaming", "paused"]

# Status changes not listed here are ignored
STATUS_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "disconnected": ("connected",),
    "connected": ("streaming", "disconnected"),
    "streaming": ("paused", "disconnected"),
    "paused": ("streaming", "disconnected"),
}

MAX_RETRY_DELAY = 60.0


class BaseCamera(ABC):
    """
    Common behaviour of every frame source backed by a camera.

    Subclasses only implement ``_open_camera``, ``_close_camera`` and ``_read_frame``. This
    class serialises access to them and adds:
        - start with retries and exponential backoff, restart after stop
        - frame rate throttling in ``capture()``
        - per-frame adjustments
        - a status machine (disconnected, connected, streaming, paused) reported to an
          optional callback on a background thread
    """

    def __init__(
        self,
        resolution: tuple[int, int] | None = (640, 480),
        fps: int = 10,
        adjustments: Callable[[np.ndarray], np.ndarray] | None = None,
        auto_reconnect: bool = True,
    ):
        """
        Args:
            resolution (tuple, optional): Requested (width, height). None keeps the device default.
            fps (int): Maximum rate at which ``capture()`` returns frames.
            adjustments (callable, optional): Applied to every captured frame, e.g. a pipeline
                built with ``lanecam.app_utils.image``.
            auto_reconnect (bool): Retry opening and reopen lost connections. Default: True.

        Raises:
            ValueError: If fps is not positive.
        """
        if fps <= 0:
            raise ValueError("FPS must be a positive integer")
        self.resolution = resolution
        self.fps = fps
        self.adjustments = adjustments
        self.auto_reconnect = auto_reconnect
        self.reconnect_delay = 1.0
        self.max_open_attempts = 10
        self.logger = logger
        self.name = type(self).__name__

        self._lock = threading.Lock()
        self._started = False
        self._status: CameraStatus = "disconnected"
        self._frame_interval = 1.0 / fps
        self._next_capture_at = 0.0
        self._empty_reads = 0

        self._status_callback: Callable[[str, dict], None] | None = None
        self._callback_executor: ThreadPoolExecutor | None = None

    @property
    def status(self) -> CameraStatus:
        return self._status

    @property
    def _pause_after(self) -> int:
        # About 0.75 s worth of empty reads
        return max(1, int(0.75 * self.fps))

    def start(self) -> None:
        """
        Open the camera. No-op when already started.

        Raises:
            CameraOpenError: If the camera cannot be used (missing device, permission denied)
                or did not open within ``max_open_attempts``.
            Exception: Whatever ``_open_camera`` raises when auto-reconnect is disabled.
        """
        with self._lock:
            if self._started:
                return
            if self._callback_executor is None:
                self._callback_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="CameraStatus")

            self.logger.info(f"Opening {self.name}")
            self._open_with_retries()
            self._started = True
            self._empty_reads = 0
            self._next_capture_at = time.monotonic()
            self.logger.info(f"{self.name} started")

    def _open_with_retries(self) -> None:
        for attempt in range(1, self.max_open_attempts + 1):
            try:
                self._open_camera()
                return
            except CameraOpenError as e:
                self.logger.error(f"Cannot open {self.name}: {e}")
                raise
            except Exception as e:
                if not self.auto_reconnect:
                    raise
                if attempt == self.max_open_attempts:
                    raise CameraOpenError(f"Could not open {self.name} after {attempt} attempts: {e}") from e

                delay = min(self.reconnect_delay * 2 ** (attempt - 1), MAX_RETRY_DELAY)
                self.logger.warning(f"Opening {self.name} failed ({attempt}/{self.max_open_attempts}): {e}. Retrying in {delay:.1f}s")
                time.sleep(delay)

    def stop(self) -> None:
        """Close the camera. It can be started again later. Close errors are logged, not raised."""
        with self._lock:
            if not self._started:
                return
            try:
                self._close_camera()
            except Exception as e:
                self.logger.warning(f"Error while closing {self.name}: {e}")
                return

            self._started = False
            if self._callback_executor is not None:
                self._callback_executor.shutdown(wait=False)
                self._callback_executor = None
            self.logger.info(f"{self.name} stopped")

    def capture(self) -> Optional[np.ndarray]:
        """
        Return the next frame, waiting as needed to honour the frame rate.

        Returns:
            np.ndarray | None: The adjusted frame, or None if the camera had no frame.

        Raises:
            CameraReadError: If the camera is not started.
            CameraTransformError: If the adjustments fail.
        """
        with self._lock:
            if not self._started:
                raise CameraReadError(f"{self.name} must be started before capturing")

            self._throttle()
            frame = self._read_frame()
            if frame is None:
                self._empty_reads += 1
                if self._empty_reads >= self._pause_after:
                    self._set_status("paused")
                return None

            self._empty_reads = 0
            self._set_status("streaming")
            return self._adjust(frame)

    def _throttle(self) -> None:
        wait = self._next_capture_at - time.monotonic()
        if wait > 0:
            time.sleep(wait)
        self._next_capture_at = time.monotonic() + self._frame_interval

    def _adjust(self, frame: np.ndarray) -> np.ndarray:
        if self.adjustments is None:
            return frame
        try:
            return self.adjustments(frame)
        except Exception as e:
            raise CameraTransformError(f"Frame transformation failed ({self.adjustments}): {e}") from e

    def stream(self) -> Iterator[np.ndarray]:
        """Yield frames until the camera is stopped. Empty reads are skipped."""
        if not self._started:
            raise CameraReadError(f"{self.name} must be started before streaming")
        while self._started:
            frame = self.capture()
            if frame is not None:
                yield frame

    def is_started(self) -> bool:
        return self._started

    def is_ready(self) -> bool:
        """True when started and not disconnected, i.e. ``capture()`` may return frames."""
        return self._started and self._status != "disconnected"

    def on_status_changed(self, callback: Callable[[str, dict], None] | None) -> None:
        """
        Set the callback receiving status changes, or remove it with None.

        The callback runs on a background thread with the new status and a dict of details.
        Its exceptions are logged.
        """
        if callback is None:
            self._status_callback = None
            return

        def guarded(status: str, data: dict):
            try:
                callback(status, data)
            except Exception as e:
                self.logger.error(f"Status callback failed on '{status}': {e}")

        self._status_callback = guarded

    @abstractmethod
    def _open_camera(self) -> None:
        """Connect to the camera and report the 'connected' status."""

    @abstractmethod
    def _close_camera(self) -> None:
        """Release the camera and report the 'disconnected' status."""

    @abstractmethod
    def _read_frame(self) -> Optional[np.ndarray]:
        """Read one raw frame, or return None if there is none."""

    def _set_status(self, status: CameraStatus, data: dict | None = None) -> None:
        if status == self._status or status not in STATUS_TRANSITIONS[self._status]:
            return
        self._status = status
        if self._status_callback is not None and self._callback_executor is not None:
            self._callback_executor.submit(self._status_callback, status, data or {})

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
