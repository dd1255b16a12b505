# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np

from lanecam.app_peripherals.camera import BaseCamera, CameraError
from lanecam.app_utils import Logger

from .dispatcher import DispatchController
from .embedding import EmbeddingExtractor
from .errors import FrameSourceError
from .example_store import ExampleStore
from .knn import KNNClassifier
from .notifier import WebhookNotifier
from .training import TrainingInput
from .types import LoopState, OutboundEvent, Prediction

logger = Logger("FrameLoop")


class FrameSource(ABC):
    """Provider of frames for the loop.

    A frame returned by ``current_frame()`` belongs to the caller until it is handed back
    with ``release_frame()``, which the loop does exactly once per frame.
    """

    def open(self) -> None:
        """Acquire the underlying device. Failures are fatal to starting the loop."""
        pass

    def close(self) -> None:
        pass

    @abstractmethod
    def is_ready(self) -> bool:
        pass

    @abstractmethod
    def current_frame(self) -> Optional[np.ndarray]:
        """Return the latest frame, or None if none is available."""
        pass

    def release_frame(self, frame: np.ndarray) -> None:
        pass


class CameraFrameSource(FrameSource):
    """Frame source reading from a camera peripheral."""

    def __init__(self, camera: BaseCamera):
        self.camera = camera

    def open(self) -> None:
        try:
            self.camera.start()
        except CameraError as e:
            raise FrameSourceError(f"Cannot open camera {self.camera.name}: {e}") from e

    def close(self) -> None:
        self.camera.stop()

    def is_ready(self) -> bool:
        # A disconnected camera still gets capture() calls, which drive its reconnection
        return self.camera.is_started()

    def current_frame(self) -> Optional[np.ndarray]:
        return self.camera.capture()


class FrameLoop:
    """Per-frame training, classification and dispatch, driven by a background thread.

    States: ``idle`` (never started), ``running`` and ``stopped`` (resumable with ``start()``).
    Every tick acquires one frame, stores its embedding for the class being trained if any,
    classifies it once examples exist, dispatches the resulting events and releases the frame.
    A failing tick is logged and never stops the loop.
    """

    def __init__(
        self,
        source: FrameSource,
        extractor: EmbeddingExtractor,
        store: ExampleStore,
        classifier: KNNClassifier,
        controller: DispatchController,
        notifier: WebhookNotifier | None = None,
        training: TrainingInput | None = None,
        interval: float = 1 / 30,
        clock: Callable[[], float] = time.time,
        on_prediction: Callable[[Prediction], None] | None = None,
    ):
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.source = source
        self.extractor = extractor
        self.store = store
        self.classifier = classifier
        self.controller = controller
        self.notifier = notifier
        self.training = training
        self.interval = interval
        self.clock = clock
        self.on_prediction = on_prediction

        self.last_prediction: Prediction | None = None
        self.tick_count = 0

        self._state: LoopState = "idle"
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._worker: threading.Thread | None = None
        self._exiting_worker: threading.Thread | None = None

    @property
    def state(self) -> LoopState:
        return self._state

    def is_running(self) -> bool:
        return self._state == "running"

    def start(self) -> None:
        """
        Open the frame source and start ticking. No-op when already running.

        Raises:
            Exception: Whatever the frame source raises when it cannot be opened. The loop
                stays in its previous state.
        """
        with self._state_lock:
            if self._state == "running":
                return

            exiting = self._exiting_worker
            if exiting is not None and exiting is not threading.current_thread():
                exiting.join()
            self._exiting_worker = None

            try:
                self.source.open()
            except Exception as e:
                logger.error(f"Cannot start frame loop, frame source unavailable: {e}")
                raise

            self._stop_event = threading.Event()
            self._state = "running"
            self._worker = threading.Thread(target=self._run, args=(self._stop_event,), name="FrameLoop", daemon=True)
            self._worker.start()
            logger.info("Frame loop started")

    def stop(self) -> None:
        """Stop ticking and close the frame source. Safe to call at any time, including from a tick."""
        with self._state_lock:
            if self._state != "running":
                return
            self._state = "stopped"
            self._stop_event.set()
            worker, self._worker = self._worker, None
            if worker is threading.current_thread():
                # Called from a tick: the worker closes the source once the tick returns
                self._exiting_worker = worker
                return

        if worker is not None:
            worker.join()
        self._close_source()

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            started = time.monotonic()
            self.tick()
            elapsed = time.monotonic() - started
            stop_event.wait(max(0.0, self.interval - elapsed))

        if self._exiting_worker is threading.current_thread():
            self._close_source()
        logger.info("Frame loop stopped")

    def _close_source(self) -> None:
        try:
            self.source.close()
        except Exception as e:
            logger.warning(f"Failed to close frame source: {e}")

    def tick(self) -> list[OutboundEvent]:
        """
        Process a single frame.

        Returns:
            list[OutboundEvent]: Events dispatched for this frame.
        """
        self.tick_count += 1
        try:
            if not self.source.is_ready():
                return []
            frame = self.source.current_frame()
        except Exception as e:
            logger.error(f"Frame acquisition failed: {e}")
            return []

        if frame is None:
            return []

        try:
            return self._process(frame)
        except Exception as e:
            logger.exception(f"Frame processing failed: {e}")
            return []
        finally:
            self._release(frame)

    def _process(self, frame: np.ndarray) -> list[OutboundEvent]:
        embedding = None

        class_index = self.training.active() if self.training is not None else None
        if class_index is not None:
            embedding = self.extractor.extract(frame)
            self.store.add_example(class_index, embedding)

        if self.store.total == 0:
            return []

        if embedding is None:
            embedding = self.extractor.extract(frame)
        prediction = self.classifier.predict(embedding)
        self.last_prediction = prediction

        events = self.controller.evaluate(prediction.confidences, prediction.example_counts, self.clock())
        for event in events:
            self._send(event)

        if self.on_prediction is not None:
            try:
                self.on_prediction(prediction)
            except Exception as e:
                logger.error(f"Prediction callback failed: {e}")

        return events

    def _send(self, event: OutboundEvent) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.send(event)
        except Exception as e:
            logger.error(f"Failed to schedule event for class {event.class_index}: {e}")

    def _release(self, frame: np.ndarray) -> None:
        try:
            self.source.release_frame(frame)
        except Exception as e:
            logger.warning(f"Failed to release frame: {e}")
